from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from notary_admin.models.blog import TRANSLATABLE_FIELDS


class TranslationStatus(str, Enum):
    STARTING = "starting"
    TRANSLATING = "translating"
    SAVING = "saving"
    SUCCESS = "success"
    ERROR = "error"


class TranslationRequest(BaseModel):
    """Requête envoyée au service de traduction pour UNE langue cible"""
    source_locale: str
    target_locale: str
    fields: Dict[str, Any]


class TranslateArticleRequest(BaseModel):
    """Corps de POST /api/blog/{id}/translate"""
    source_locale: str = "en"
    target_locales: List[str]
    fields: List[str] = Field(default_factory=lambda: list(TRANSLATABLE_FIELDS))

    class Config:
        json_schema_extra = {
            "example": {
                "source_locale": "en",
                "target_locales": ["fr", "es"],
                "fields": ["title", "content", "faq"],
            }
        }


class TranslationProgress(BaseModel):
    current: int
    total: int
    status: TranslationStatus
    locale: Optional[str] = None
    language_name: Optional[str] = None
    translation: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class TranslationStats(BaseModel):
    total: int = 0
    succeeded: int = 0
    failed: int = 0


class TranslationBatchResult(BaseModel):
    stats: TranslationStats = Field(default_factory=TranslationStats)
    errors: Dict[str, str] = Field(default_factory=dict)
    translations: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    saved: Dict[str, bool] = Field(default_factory=dict)
