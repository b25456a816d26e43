"""
Modèle de contenu multilingue des articles de blog.

Une ligne `blog_posts` stocke chaque champ traduit sur N colonnes
(`title`, `title_fr`, `title_es`...). L'éditeur travaille au contraire
avec un bundle par langue. `expand` et `flatten` passent d'une forme à l'autre.
"""
import copy
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from notary_admin.config import ContentSettings, LocaleRegistry
from notary_admin.exceptions import ValidationError
from notary_admin.models.blog import (
    COMMON_DEFAULTS,
    COMMON_FIELDS,
    FAQ_KEYS,
    LOCALIZED_FIELDS,
    FieldKind,
    LocalizedEntity,
)
from notary_admin.utils.string_utils import slugify

logger = logging.getLogger(__name__)


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def normalize_faq(value: Any) -> List[Dict[str, str]]:
    """
    Retourne la FAQ sous forme de liste ordonnée de {question, answer}.
    Une valeur absente ou qui n'est pas une liste donne [].
    """
    if not isinstance(value, (list, tuple)):
        return []
    items = []
    for entry in value:
        if not isinstance(entry, Mapping):
            continue
        items.append({key: "" if entry.get(key) is None else str(entry.get(key)) for key in FAQ_KEYS})
    return items


class LanguageContentModel:
    def __init__(
        self,
        settings: ContentSettings,
        localized_fields: Optional[Mapping[str, FieldKind]] = None,
        common_fields: Optional[Mapping[str, FieldKind]] = None,
    ):
        self.settings = settings
        self.localized_fields = dict(localized_fields or LOCALIZED_FIELDS)
        self.common_fields = dict(common_fields or COMMON_FIELDS)

    @property
    def registry(self) -> LocaleRegistry:
        return self.settings.locales

    @property
    def base_locale(self) -> str:
        return self.registry.base

    def storage_key(self, field: str, locale: str) -> str:
        """(champ, langue) -> nom de colonne"""
        if field not in self.localized_fields:
            raise ValidationError(f"Champ non traduisible : {field}", field)
        if self.registry.is_base(locale):
            return field
        return f"{field}_{locale}"

    def empty_value(self, field: str) -> Any:
        kind = self.localized_fields.get(field) or self.common_fields.get(field)
        if field in COMMON_DEFAULTS:
            return COMMON_DEFAULTS[field]
        if kind == FieldKind.TEXT:
            return ""
        if kind == FieldKind.LIST:
            return []
        if kind == FieldKind.BOOLEAN:
            return False
        return None

    def empty_bundle(self) -> Dict[str, Any]:
        return {field: self.empty_value(field) for field in self.localized_fields}

    def _locales(self, locales: Optional[Iterable[str]]) -> tuple:
        codes = self.registry.codes if locales is None else list(locales)
        return tuple(self.registry.validate(code) for code in codes)

    def new_entity(self, locales: Optional[Iterable[str]] = None) -> LocalizedEntity:
        """Article vide pour l'écran de création"""
        codes = self._locales(locales)
        common = {name: self.empty_value(name) for name in self.common_fields}
        if "cover_image_url" in common and self.settings.default_cover_image:
            common["cover_image_url"] = self.settings.default_cover_image
        return LocalizedEntity(
            locales=codes,
            common=common,
            content={code: self.empty_bundle() for code in codes},
        )

    def _read_localized(self, field: str, value: Any) -> Any:
        if self.localized_fields[field] == FieldKind.LIST:
            if field == "faq":
                return normalize_faq(value)
            return list(value) if isinstance(value, (list, tuple)) else []
        if value is None:
            return self.empty_value(field)
        return value

    def _read_common(self, field: str, value: Any) -> Any:
        kind = self.common_fields[field]
        if value is None:
            return copy.copy(self.empty_value(field))
        if kind == FieldKind.LIST:
            return list(value) if isinstance(value, (list, tuple)) else []
        return value

    def expand(self, row: Optional[Mapping[str, Any]], locales: Optional[Iterable[str]] = None) -> LocalizedEntity:
        """
        Ligne de la base -> article éditable.
        Une colonne absente ou nulle donne la valeur vide du type du champ
        ('' pour le texte, [] pour les listes) ; 0 et False sont conservés.
        """
        row = row or {}
        codes = self._locales(locales)
        content = {}
        for code in codes:
            content[code] = {
                field: self._read_localized(field, row.get(self.storage_key(field, code)))
                for field in self.localized_fields
            }
        common = {field: self._read_common(field, row.get(field)) for field in self.common_fields}
        row_id = row.get("id")
        return LocalizedEntity(
            locales=codes,
            common=common,
            content=content,
            id=None if row_id is None else str(row_id),
        )

    def derive_slug(self, entity: LocalizedEntity) -> str:
        slug = entity.common.get("slug") or ""
        if str(slug).strip():
            return str(slug).strip()
        base_bundle = entity.content.get(self.base_locale) or {}
        return slugify(base_bundle.get("title"))

    def canonical_url(self, slug: str) -> str:
        if not slug:
            return ""
        return f"{self.settings.base_url.rstrip('/')}/blog/{slug}"

    def _write(self, row: Dict[str, Any], key: str, kind: FieldKind, value: Any) -> None:
        if kind == FieldKind.LIST:
            row[key] = list(value) if isinstance(value, (list, tuple)) else []
        elif kind == FieldKind.BOOLEAN:
            row[key] = bool(value)
        elif kind == FieldKind.TEXT:
            # les chaînes vides ne doivent pas écraser les colonnes existantes
            if value is None or value == "":
                return
            row[key] = value
        else:
            row[key] = value

    def flatten(
        self,
        entity: LocalizedEntity,
        locales: Optional[Iterable[str]] = None,
        fields: Optional[Iterable[str]] = None,
        include_common: bool = True,
    ) -> Dict[str, Any]:
        """
        Article éditable -> ligne à écrire.

        `locales` et `fields` restreignent les colonnes traduites écrites
        (sauvegarde d'une seule langue). Les champs communs, dont le slug et
        l'URL canonique dérivés, ne sont écrits que si `include_common`.
        """
        codes = self._locales(entity.locales if locales is None else locales)
        selected = list(self.localized_fields) if fields is None else list(fields)
        row: Dict[str, Any] = {}

        for code in codes:
            bundle = entity.content.get(code) or {}
            for field in selected:
                kind = self.localized_fields.get(field)
                if kind is None:
                    raise ValidationError(f"Champ non traduisible : {field}", field)
                value = bundle.get(field, self.empty_value(field))
                if field == "faq":
                    value = normalize_faq(value)
                self._write(row, self.storage_key(field, code), kind, value)

        if include_common:
            for field, kind in self.common_fields.items():
                if field in ("slug", "canonical_url"):
                    continue
                self._write(row, field, kind, entity.common.get(field, self.empty_value(field)))
            slug = self.derive_slug(entity)
            self._write(row, "slug", FieldKind.TEXT, slug)
            self._write(row, "canonical_url", FieldKind.TEXT, self.canonical_url(slug))

        return row

    def source_subset(self, bundle: Mapping[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
        """Champs sélectionnés non vides d'un bundle (ce qui part à la traduction)"""
        subset = {}
        for field in fields:
            if field not in self.localized_fields:
                raise ValidationError(f"Champ non traduisible : {field}", field)
            value = bundle.get(field)
            if field == "faq":
                value = normalize_faq(value)
            if not is_empty(value):
                subset[field] = copy.deepcopy(value)
        return subset
