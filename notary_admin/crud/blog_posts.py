import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from notary_admin.database import BLOG_POSTS_TABLE
from notary_admin.exceptions import ValidationError
from notary_admin.models.blog import BlogStatus, LocalizedEntity
from notary_admin.services.content_model import LanguageContentModel, is_empty
from notary_admin.utils.string_utils import split_list

logger = logging.getLogger(__name__)

INTEGER_FIELDS = ("views_count", "read_time_minutes", "featured_order")


def _to_int(name: str, value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Valeur numérique invalide pour {name}", name) from None


def prepare_for_save(entity: LocalizedEntity, base_locale: str, is_new: bool) -> LocalizedEntity:
    """
    Règles de l'écran d'édition appliquées avant enregistrement.
    Lève ValidationError si le titre de la langue de base manque.
    """
    base_bundle = entity.content.get(base_locale) or {}
    if is_empty(base_bundle.get("title")):
        raise ValidationError("Le titre est obligatoire", "title")

    common = entity.common
    status = common.get("status") or BlogStatus.DRAFT.value
    if status not in {s.value for s in BlogStatus}:
        raise ValidationError(f"Statut invalide : {status}", "status")
    common["status"] = status

    for name in ("tags", "meta_keywords"):
        common[name] = split_list(common.get(name))

    for name in INTEGER_FIELDS:
        if name in common:
            common[name] = _to_int(name, common[name])
    if common.get("views_count") is None:
        common["views_count"] = 0

    # Publication sans date : on date à la création uniquement
    if status == BlogStatus.PUBLISHED.value and not common.get("published_at") and is_new:
        common["published_at"] = datetime.now(timezone.utc).isoformat()
    return entity


class BlogPostRepository:
    def __init__(self, gateway, content_model: LanguageContentModel, table: str = BLOG_POSTS_TABLE):
        self.gateway = gateway
        self.content_model = content_model
        self.table = table

    def _flatten(self, entity: LocalizedEntity) -> Dict[str, Any]:
        row = self.content_model.flatten(entity)
        # slug et URL canonique dérivés, renvoyés à l'éditeur
        entity.common["slug"] = row.get("slug", "")
        entity.common["canonical_url"] = row.get("canonical_url", "")
        return row

    def list_posts(self) -> List[Dict[str, Any]]:
        """
        Renvoie la liste de tous les articles, du plus récent au plus ancien.
        """
        return self.gateway.list(self.table, order_by="created_at", descending=True)

    def get_row(self, post_id: str) -> Dict[str, Any]:
        return self.gateway.get_or_404(self.table, post_id)

    def load(self, post_id: str, locales: Optional[Iterable[str]] = None) -> LocalizedEntity:
        """
        Charge un article et le convertit en bundles par langue.
        """
        entity = self.content_model.expand(self.get_row(post_id), locales)
        entity.id = str(post_id)
        return entity

    def create(self, entity: LocalizedEntity) -> Dict[str, Any]:
        """
        Insère un nouvel article. Retourne la ligne créée.
        """
        prepare_for_save(entity, self.content_model.base_locale, is_new=True)
        row = self._flatten(entity)
        created = self.gateway.insert(self.table, row)
        entity.id = None if created.get("id") is None else str(created["id"])
        logger.info(f"✅ Blog post created: {row.get('slug')}")
        return created

    def update(self, post_id: str, entity: LocalizedEntity) -> Dict[str, Any]:
        prepare_for_save(entity, self.content_model.base_locale, is_new=False)
        row = self._flatten(entity)
        updated = self.gateway.update(self.table, post_id, row)
        logger.info(f"Blog post {post_id} updated ({len(row)} columns)")
        return updated

    def save_locale(
        self,
        post_id: str,
        locale: str,
        bundle: Mapping[str, Any],
        fields: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Écrit uniquement les colonnes d'une langue (ex: title_fr, faq_fr).
        """
        entity = LocalizedEntity(locales=(locale,), content={locale: dict(bundle)}, id=post_id)
        names = list(bundle) if fields is None else list(fields)
        selected = [f for f in names if f in bundle and f in self.content_model.localized_fields]
        row = self.content_model.flatten(entity, locales=[locale], fields=selected, include_common=False)
        if not row:
            logger.warning(f"No column to save for {post_id} ({locale})")
            return {}
        logger.info(f"Saving {locale} for {post_id}: {', '.join(row)}")
        return self.gateway.update(self.table, post_id, row)

    def delete(self, post_id: str) -> int:
        """
        Supprime l'article. Retourne le nombre de lignes supprimées (0 ou 1).
        """
        return self.gateway.delete(self.table, post_id)
