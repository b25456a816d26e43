import logging
from functools import lru_cache

from fastapi import Depends, HTTPException, Request

from notary_admin import config, database
from notary_admin.crud.blog_posts import BlogPostRepository
from notary_admin.services.content_model import LanguageContentModel
from notary_admin.services.storage import ImageUploader
from notary_admin.services.translation import Translator, build_translator
from notary_admin.services.translation_orchestrator import TranslationOrchestrator

logger = logging.getLogger(__name__)


def require_admin(request: Request):
    """Vérifie le jeton Supabase de l'administrateur (Authorization: Bearer ...)"""
    authorization = request.headers.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=401, detail="Authentification requise")

    try:
        response = database.get_client().auth.get_user(token)
    except Exception as e:
        logger.warning(f"Admin token rejected: {str(e)}")
        raise HTTPException(status_code=401, detail="Session invalide")

    if not response or not response.user:
        raise HTTPException(status_code=401, detail="Session invalide")
    return response.user


@lru_cache
def get_content_model() -> LanguageContentModel:
    return LanguageContentModel(config.load_content_settings())


def get_gateway() -> database.SupabaseGateway:
    return database.get_gateway()


def get_blog_repository(
    gateway=Depends(get_gateway),
    content_model: LanguageContentModel = Depends(get_content_model),
) -> BlogPostRepository:
    return BlogPostRepository(gateway, content_model)


@lru_cache
def get_translator() -> Translator:
    return build_translator()


def get_orchestrator(
    repository: BlogPostRepository = Depends(get_blog_repository),
    translator: Translator = Depends(get_translator),
) -> TranslationOrchestrator:
    return TranslationOrchestrator(repository.content_model, translator, repository)


def get_image_uploader() -> ImageUploader:
    return ImageUploader(database.get_client().storage)
