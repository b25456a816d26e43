import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from notary_admin import config
from notary_admin.exceptions import TranslationServiceError
from notary_admin.models.blog import FAQ_KEYS
from notary_admin.models.translation import TranslationRequest

logger = logging.getLogger(__name__)

# Mapping des codes de langue pour DeepL
DEEPL_SOURCE_LANGS = {"en": "EN", "fr": "FR", "es": "ES", "de": "DE", "it": "IT", "pt": "PT"}
DEEPL_TARGET_LANGS = {"en": "EN-US", "fr": "FR", "es": "ES", "de": "DE", "it": "IT", "pt": "PT-PT"}

Slot = Tuple[str, Optional[int], Optional[str]]


class DeepLTranslator:
    """
    Traduction via l'API DeepL.
    Chaque champ texte et chaque question / réponse de la FAQ part comme
    un `text` distinct du même appel ; l'ordre des résultats est celui des envois.
    """

    def __init__(
        self,
        api_key: Optional[str] = config.DEEPL_API_KEY,
        api_url: str = config.DEEPL_API_URL,
        timeout: float = config.TRANSLATION_TIMEOUT_SECONDS,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout

        if not self.api_key:
            logger.warning("DEEPL_API_KEY not found in environment variables. DeepL translation is disabled.")

    @staticmethod
    def _collect(fields: Dict[str, Any]) -> Tuple[List[str], List[Slot]]:
        texts: List[str] = []
        slots: List[Slot] = []
        for name, value in fields.items():
            if name == "faq":
                for index, item in enumerate(value or []):
                    for key in FAQ_KEYS:
                        text = item.get(key) or ""
                        if text.strip():
                            texts.append(text)
                            slots.append(("faq", index, key))
            elif isinstance(value, str) and value.strip():
                texts.append(value)
                slots.append((name, None, None))
        return texts, slots

    def translate(self, request: TranslationRequest) -> Dict[str, Any]:
        target = request.target_locale
        if not self.api_key:
            raise TranslationServiceError("DeepL API key not configured", target)
        if target not in DEEPL_TARGET_LANGS:
            raise TranslationServiceError(f"Unsupported target language: {target}", target)

        texts, slots = self._collect(request.fields)
        if not texts:
            return {}

        headers = {"Authorization": f"DeepL-Auth-Key {self.api_key}"}
        data = [("text", text) for text in texts]
        data += [
            ("source_lang", DEEPL_SOURCE_LANGS.get(request.source_locale, "EN")),
            ("target_lang", DEEPL_TARGET_LANGS[target]),
            ("preserve_formatting", "1"),
            ("tag_handling", "html"),
        ]

        logger.info(f"Translating {len(texts)} text(s) from {request.source_locale} to {target}")
        try:
            response = requests.post(self.api_url, headers=headers, data=data, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.Timeout as exc:
            logger.error("DeepL API request timeout")
            raise TranslationServiceError("DeepL API request timeout", target) from exc
        except requests.exceptions.RequestException as exc:
            logger.error(f"DeepL API request failed: {str(exc)}")
            raise TranslationServiceError(f"DeepL API request failed: {exc}", target) from exc
        except ValueError as exc:
            raise TranslationServiceError("Invalid JSON in DeepL response", target) from exc

        translations = result.get("translations") if isinstance(result, dict) else None
        if not isinstance(translations, list) or len(translations) != len(texts):
            logger.error(f"Unexpected DeepL response for {target}")
            raise TranslationServiceError("Malformed DeepL response", target)

        output: Dict[str, Any] = {}
        source_faq = request.fields.get("faq") or []
        for (name, index, key), item in zip(slots, translations):
            text = item.get("text") if isinstance(item, dict) else None
            if text is None:
                raise TranslationServiceError("Malformed DeepL response", target)
            if name == "faq":
                if "faq" not in output:
                    output["faq"] = [{k: entry.get(k) or "" for k in FAQ_KEYS} for entry in source_faq]
                output["faq"][index][key] = text
            else:
                output[name] = text
        return output

    def get_api_usage(self) -> Optional[dict]:
        """
        Récupère les informations d'utilisation de l'API DeepL
        """
        if not self.api_key:
            return None

        try:
            usage_url = self.api_url.replace("/v2/translate", "/v2/usage")
            headers = {"Authorization": f"DeepL-Auth-Key {self.api_key}"}
            response = requests.get(usage_url, headers=headers, timeout=5)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching DeepL usage: {str(e)}")
            return None
