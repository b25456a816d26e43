# notary_admin/routes/blog.py
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from notary_admin.crud.blog_posts import BlogPostRepository
from notary_admin.dependencies import (
    get_blog_repository,
    get_content_model,
    get_image_uploader,
    get_orchestrator,
    get_translator,
    require_admin,
)
from notary_admin.exceptions import ValidationError
from notary_admin.models.blog import BlogPostOut, BlogPostPayload, BlogPostSummary, LocalizedEntity
from notary_admin.models.translation import TranslateArticleRequest, TranslationProgress
from notary_admin.services.content_model import LanguageContentModel
from notary_admin.services.deepl import DeepLTranslator
from notary_admin.services.filters import filter_rows, paginate
from notary_admin.services.form_state import FormStateStore
from notary_admin.services.storage import ImageUploader
from notary_admin.services.translation_orchestrator import SingleFlight, TranslationOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(require_admin)])

translation_guard = SingleFlight()

BLOG_SEARCH_FIELDS = ("title", "excerpt", "slug")


def serialize_post(entity: LocalizedEntity, content_model: LanguageContentModel) -> BlogPostOut:
    return BlogPostOut(
        id=entity.id,
        base_locale=content_model.base_locale,
        locales=list(entity.locales),
        common=entity.common,
        content=entity.content,
    )


def apply_payload(store: FormStateStore, payload: BlogPostPayload) -> LocalizedEntity:
    """
    Recopie les champs du formulaire dans le store, langue par langue.
    """
    registry = store.content_model.registry
    for name, value in payload.common.items():
        if name in ("id", "created_at", "updated_at"):
            continue
        store.set_common_field(name, value)
    for locale, bundle in payload.content.items():
        if locale not in registry:
            raise ValidationError(f"Langue inconnue : {locale}", "content")
        for name, value in bundle.items():
            store.set_locale_field(locale, name, value)
    return store.entity


@router.get("/", response_model=Dict[str, Any])
def list_posts(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query("all"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    repository: BlogPostRepository = Depends(get_blog_repository),
):
    rows = filter_rows(repository.list_posts(), search=search, search_fields=BLOG_SEARCH_FIELDS, status=status)
    result = paginate(rows, page, per_page)
    items = [
        BlogPostSummary(
            id=str(row["id"]),
            title=row.get("title") or "",
            slug=row.get("slug") or "",
            status=row.get("status") or "draft",
            excerpt=row.get("excerpt") or "",
            published_at=row.get("published_at"),
            created_at=row.get("created_at"),
            is_featured=bool(row.get("is_featured")),
        ).model_dump()
        for row in result.items
    ]
    return {**result.model_dump(), "items": items}


@router.get("/languages", response_model=List[Dict[str, Any]])
def list_languages(content_model: LanguageContentModel = Depends(get_content_model)):
    return [
        {"code": locale.code, "name": locale.name, "flag": locale.flag, "is_base": locale.code == content_model.base_locale}
        for locale in content_model.registry
    ]


@router.get("/translation-usage", response_model=Dict[str, Any])
def get_translation_usage(translator=Depends(get_translator)):
    """
    Informations d'utilisation du fournisseur de traduction (DeepL uniquement)
    """
    if isinstance(translator, DeepLTranslator):
        usage = translator.get_api_usage()
        if usage is not None:
            return usage
    return {"message": "Translation usage not available"}


@router.post("/upload-image", response_model=Dict[str, str])
def upload_cover_image(
    file: UploadFile = File(...),
    uploader: ImageUploader = Depends(get_image_uploader),
):
    uploader.validate(file.filename, file.content_type, file.size or 0)
    data = file.file.read()
    url = uploader.upload_cover_image(file.filename, data, file.content_type)
    return {"url": url}


@router.get("/{post_id}", response_model=BlogPostOut)
def get_post(
    post_id: str,
    repository: BlogPostRepository = Depends(get_blog_repository),
):
    return serialize_post(repository.load(post_id), repository.content_model)


@router.post("/", response_model=BlogPostOut)
def create_post(
    payload: BlogPostPayload,
    repository: BlogPostRepository = Depends(get_blog_repository),
):
    store = FormStateStore(repository.content_model)
    entity = apply_payload(store, payload)
    repository.create(entity)
    return serialize_post(entity, repository.content_model)


@router.put("/{post_id}", response_model=BlogPostOut)
def update_post(
    post_id: str,
    payload: BlogPostPayload,
    repository: BlogPostRepository = Depends(get_blog_repository),
):
    store = FormStateStore(repository.content_model, repository.load(post_id))
    entity = apply_payload(store, payload)
    repository.update(post_id, entity)
    return serialize_post(entity, repository.content_model)


@router.delete("/{post_id}", response_model=Dict[str, bool])
def delete_post(
    post_id: str,
    repository: BlogPostRepository = Depends(get_blog_repository),
):
    repository.get_row(post_id)
    repository.delete(post_id)
    return {"deleted": True}


@router.post("/{post_id}/translate", response_model=Dict[str, Any])
def translate_post(
    post_id: str,
    request: TranslateArticleRequest,
    repository: BlogPostRepository = Depends(get_blog_repository),
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    """
    Traduit l'article vers les langues demandées, une langue à la fois.
    Chaque langue réussie est sauvegardée immédiatement.
    """
    content_model = repository.content_model
    if request.source_locale not in content_model.registry:
        raise ValidationError(f"Langue inconnue : {request.source_locale}", "source_locale")

    progress: List[TranslationProgress] = []
    with translation_guard.hold(post_id):
        store = FormStateStore(content_model, repository.load(post_id), active_locale=request.source_locale)
        result = orchestrator.translate_and_save(
            post_id,
            store.get_bundle(request.source_locale),
            request.target_locales,
            request.fields,
            request.source_locale,
            on_progress=progress.append,
            store=store,
        )

    return {
        **orchestrator.summary(result),
        "translations": result.translations,
        "progress": [event.model_dump(mode="json") for event in progress],
        "post": serialize_post(store.entity, content_model).model_dump(),
    }
