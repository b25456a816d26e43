"""
Gestionnaires d'exceptions : toute erreur devient une réponse JSON lisible
par le back-office, jamais un crash.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from notary_admin.exceptions import NotaryAdminError

logger = logging.getLogger(__name__)


async def notary_admin_error_handler(request: Request, exc: NotaryAdminError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code} on {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.error_code} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.error_code, **exc.details},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Erreur serveur", "error": "internal_error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotaryAdminError, notary_admin_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
