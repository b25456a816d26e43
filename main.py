import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notary_admin.config import get_allowed_origins
from notary_admin.exception_handlers import register_exception_handlers
from notary_admin.routes import blog, records

# Configuration du logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="My Notary Admin API",
    description="API du back-office My Notary",
    version="1.0.0",
)

allowed_origins = get_allowed_origins()

# Si on utilise "*" (wildcard), désactiver credentials
allow_credentials = "*" not in allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routes
app.include_router(blog.router, prefix="/api/blog", tags=["blog"])
for name, router in records.routers.items():
    app.include_router(router, prefix=f"/api/{name}", tags=[name])


@app.get("/")
async def root():
    return {
        "message": "My Notary Admin API - FastAPI",
        "status": "healthy",
        "endpoints": {
            "blog": "/api/blog",
            **{name: f"/api/{name}" for name in records.routers},
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8001, reload=True)
