"""
Configuration de l'application : variables d'environnement et registre des langues.
"""
import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from dotenv import load_dotenv

from notary_admin.exceptions import UnknownLocaleError

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

SITE_BASE_URL = os.getenv("SITE_BASE_URL", "https://mynotary.io")
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

TRANSLATION_PROVIDER = os.getenv("TRANSLATION_PROVIDER", "openai")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_TRANSLATION_MODEL = os.getenv("OPENAI_TRANSLATION_MODEL", "gpt-4o-mini")
DEEPL_API_KEY = os.getenv("DEEPL_API_KEY")
DEEPL_API_URL = os.getenv("DEEPL_API_URL", "https://api-free.deepl.com/v2/translate")
TRANSLATION_TIMEOUT_SECONDS = float(os.getenv("TRANSLATION_TIMEOUT_SECONDS", "120"))
TRANSLATION_PAUSE_SECONDS = float(os.getenv("TRANSLATION_PAUSE_SECONDS", "0.5"))

BLOG_IMAGES_BUCKET = os.getenv("BLOG_IMAGES_BUCKET", "blog-images")
MAX_IMAGE_SIZE_BYTES = 5 * 1024 * 1024
DEFAULT_COVER_IMAGE_URL = os.getenv("DEFAULT_COVER_IMAGE_URL", "")


@dataclass(frozen=True)
class Locale:
    code: str
    name: str
    flag: str = "🌐"


DEFAULT_LOCALES: Tuple[Locale, ...] = (
    Locale("en", "English", "🇬🇧"),
    Locale("fr", "Français", "🇫🇷"),
    Locale("es", "Español", "🇪🇸"),
    Locale("de", "Deutsch", "🇩🇪"),
    Locale("it", "Italiano", "🇮🇹"),
    Locale("pt", "Português", "🇵🇹"),
)

# Noms anglais utilisés dans les prompts de traduction
LANGUAGE_NAMES: Dict[str, str] = {
    "en": "English",
    "fr": "French",
    "es": "Spanish",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
}


class LocaleRegistry:
    """
    Registre statique des langues supportées.
    La langue de base est stockée dans les colonnes sans suffixe,
    les autres dans les colonnes `<champ>_<code>`.
    """

    def __init__(self, locales: Iterable[Locale] = DEFAULT_LOCALES, base: Optional[str] = None):
        self._locales: Dict[str, Locale] = {}
        for locale in locales:
            self._locales[locale.code] = locale
        if not self._locales:
            raise ValueError("At least one locale is required")
        self.base = base or next(iter(self._locales))
        if self.base not in self._locales:
            raise UnknownLocaleError(self.base)

    @property
    def codes(self) -> List[str]:
        return list(self._locales)

    def get(self, code: str) -> Locale:
        try:
            return self._locales[code]
        except KeyError:
            raise UnknownLocaleError(code) from None

    def validate(self, code: str) -> str:
        self.get(code)
        return code

    def is_base(self, code: str) -> bool:
        return self.validate(code) == self.base

    def __contains__(self, code) -> bool:
        return code in self._locales

    def __iter__(self):
        return iter(self._locales.values())

    def __len__(self) -> int:
        return len(self._locales)


@dataclass
class ContentSettings:
    locales: LocaleRegistry = field(default_factory=LocaleRegistry)
    base_url: str = SITE_BASE_URL
    default_cover_image: str = DEFAULT_COVER_IMAGE_URL


def load_content_settings() -> ContentSettings:
    """Construit les réglages de contenu depuis l'environnement"""
    return ContentSettings(
        locales=LocaleRegistry(),
        base_url=SITE_BASE_URL.rstrip("/"),
        default_cover_image=DEFAULT_COVER_IMAGE_URL,
    )


def get_allowed_origins() -> List[str]:
    return [origin.strip() for origin in FRONTEND_URL.split(",") if origin.strip()]
