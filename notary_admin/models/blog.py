from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field


class FieldKind(str, Enum):
    TEXT = "text"
    LIST = "list"
    BOOLEAN = "boolean"
    NUMBER = "number"


class BlogStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


# Champs traduits : colonne sans suffixe pour la langue de base, `<champ>_<code>` sinon
LOCALIZED_FIELDS: Dict[str, FieldKind] = {
    "title": FieldKind.TEXT,
    "excerpt": FieldKind.TEXT,
    "content": FieldKind.TEXT,
    "meta_title": FieldKind.TEXT,
    "meta_description": FieldKind.TEXT,
    "category": FieldKind.TEXT,
    "cta": FieldKind.TEXT,
    "faq": FieldKind.LIST,
}

TRANSLATABLE_FIELDS: Tuple[str, ...] = tuple(LOCALIZED_FIELDS)

# Champs communs à toutes les langues
COMMON_FIELDS: Dict[str, FieldKind] = {
    "slug": FieldKind.TEXT,
    "cover_image_url": FieldKind.TEXT,
    "cover_image_alt": FieldKind.TEXT,
    "author": FieldKind.TEXT,
    "meta_keywords": FieldKind.LIST,
    "canonical_url": FieldKind.TEXT,
    "tags": FieldKind.LIST,
    "status": FieldKind.TEXT,
    "published_at": FieldKind.TEXT,
    "views_count": FieldKind.NUMBER,
    "read_time_minutes": FieldKind.NUMBER,
    "is_featured": FieldKind.BOOLEAN,
    "featured_order": FieldKind.NUMBER,
}

COMMON_DEFAULTS: Dict[str, Any] = {
    "status": BlogStatus.DRAFT.value,
    "views_count": 0,
}

FAQ_KEYS = ("question", "answer")


@dataclass
class LocalizedEntity:
    """
    Article en cours d'édition : champs communs + un bundle par langue.
    Chaque langue de `locales` a toujours un bundle dans `content`.
    """
    locales: Tuple[str, ...]
    common: Dict[str, Any] = field(default_factory=dict)
    content: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    id: Optional[str] = None


class BlogPostPayload(BaseModel):
    """Corps des requêtes de création / modification d'article"""
    common: Dict[str, Any] = Field(default_factory=dict)
    content: Dict[str, Dict[str, Any]] = Field(default_factory=dict)

    class Config:
        json_schema_extra = {
            "example": {
                "common": {"slug": "", "status": "draft", "tags": ["apostille"]},
                "content": {
                    "en": {"title": "How to get an apostille", "faq": [{"question": "Q1", "answer": "A1"}]},
                    "fr": {"title": "Comment obtenir une apostille"},
                },
            }
        }


class BlogPostOut(BaseModel):
    id: Optional[str] = None
    base_locale: str
    locales: List[str]
    common: Dict[str, Any]
    content: Dict[str, Dict[str, Any]]


class BlogPostSummary(BaseModel):
    id: str
    title: str = ""
    slug: str = ""
    status: str = BlogStatus.DRAFT.value
    excerpt: str = ""
    published_at: Optional[str] = None
    created_at: Optional[str] = None
    is_featured: bool = False
