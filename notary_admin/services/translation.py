import json
import logging
import re
import time
from typing import Any, Dict, Mapping, Optional, Protocol

from openai import OpenAI, OpenAIError

from notary_admin import config
from notary_admin.exceptions import TranslationServiceError
from notary_admin.models.blog import FAQ_KEYS
from notary_admin.models.translation import TranslationRequest

logger = logging.getLogger(__name__)

PROTECTED_TERMS = ("My Notary", "mynotary.io")


class Translator(Protocol):
    def translate(self, request: TranslationRequest) -> Dict[str, Any]: ...


def language_name(code: str) -> str:
    return config.LANGUAGE_NAMES.get(code, code)


def parse_json_object(text: Optional[str], locale: Optional[str] = None) -> Dict[str, Any]:
    """
    Extrait l'objet JSON d'une réponse de modèle.
    Certaines réponses sont entourées de ```json ... ``` ou de texte.
    """
    if not text or not text.strip():
        raise TranslationServiceError("Empty translation response", locale)
    content = text.strip()
    if content.startswith("```"):
        content = re.sub(r"^```(json)?\s*", "", content, flags=re.IGNORECASE)
        content = re.sub(r"\s*```$", "", content)
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        match = re.search(r"\{[\s\S]*\}", content)
        if not match:
            raise TranslationServiceError("No valid JSON found in translation response", locale) from None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as exc:
            raise TranslationServiceError(f"Invalid JSON in translation response: {exc}", locale) from exc
    if not isinstance(parsed, dict):
        raise TranslationServiceError("Translation response is not a JSON object", locale)
    return parsed


def clean_translation(translated: Mapping[str, Any], source: Mapping[str, Any], locale: Optional[str] = None) -> Dict[str, Any]:
    """
    Ne garde que les champs demandés et correctement formés.
    Un champ absent ou invalide est simplement omis (réponse partielle).
    """
    result: Dict[str, Any] = {}
    for field, value in translated.items():
        if field not in source or value is None:
            continue
        if field == "faq":
            source_faq = source.get("faq") or []
            if not isinstance(value, list) or len(value) != len(source_faq):
                logger.warning(f"Ignoring malformed FAQ translation for {locale}")
                continue
            items = []
            for entry in value:
                if not isinstance(entry, Mapping):
                    items = None
                    break
                items.append({key: str(entry.get(key) or "") for key in FAQ_KEYS})
            if items is None:
                logger.warning(f"Ignoring malformed FAQ translation for {locale}")
                continue
            result["faq"] = items
        elif isinstance(value, str):
            result[field] = value
        else:
            logger.warning(f"Ignoring non-string value for {field} ({locale})")
    return result


def build_prompt(fields: Mapping[str, Any], source_locale: str, target_locale: str) -> str:
    source_name = language_name(source_locale)
    target_name = language_name(target_locale)
    field_list = "\n".join(f"- {name}" for name in fields)
    faq_rule = ""
    if "faq" in fields:
        faq_rule = (
            "7. FAQ\n"
            "   - Translate each question and each answer of the faq array\n"
            '   - Keep the same array, same order: [{"question": "...", "answer": "..."}]\n'
        )
    protected = ", ".join(f'"{term}"' for term in PROTECTED_TERMS)
    return (
        f"Translate this blog article content from {source_name} to {target_name}.\n\n"
        "RULES:\n"
        "1. Keep ALL HTML tags and attributes, URLs and paragraph structure unchanged.\n"
        f"2. Keep these terms unchanged: {protected}, email addresses, any URL.\n"
        f"3. Translate naturally, as a native {target_name} speaker would; never word-for-word.\n"
        "4. Use the formal register.\n"
        "5. Translate SEO keywords to their natural equivalent. meta_description must stay under 160 characters.\n"
        "6. Use the same translated term consistently across the whole article.\n"
        f"{faq_rule}\n"
        "Return ONLY a valid JSON object with EXACTLY these keys:\n"
        f"{field_list}\n\n"
        "CONTENT TO TRANSLATE:\n"
        f"{json.dumps(dict(fields), ensure_ascii=False, indent=2)}"
    )


class OpenAITranslator:
    """Traduction d'un lot de champs via un seul appel chat completion"""

    def __init__(self, client: Optional[OpenAI] = None, model: str = config.OPENAI_TRANSLATION_MODEL):
        self._client = client
        self.model = model

    def translate(self, request: TranslationRequest) -> Dict[str, Any]:
        target = request.target_locale
        if not request.fields:
            return {}
        if self._client is None:
            raise TranslationServiceError("OpenAI translation client is not configured", target)

        prompt = build_prompt(request.fields, request.source_locale, target)
        started = time.monotonic()
        try:
            completion = self._client.chat.completions.create(
                model=self.model,
                temperature=0.2,
                messages=[
                    {
                        "role": "system",
                        "content": f"You are a native {language_name(target)} translator. Reply with valid JSON only.",
                    },
                    {"role": "user", "content": prompt},
                ],
            )
        except OpenAIError as exc:
            logger.error(f"OpenAI translation error ({target}): {str(exc)}")
            raise TranslationServiceError(f"OpenAI translation error: {exc}", target) from exc

        try:
            content = completion.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise TranslationServiceError("Invalid response structure", target) from exc

        translated = clean_translation(parse_json_object(content, target), request.fields, target)
        logger.info(f"OpenAI {request.source_locale} -> {target} done in {(time.monotonic() - started) * 1000:.0f}ms")
        return translated


def build_translator(provider: Optional[str] = None) -> Translator:
    """Instancie le traducteur configuré (TRANSLATION_PROVIDER)"""
    provider = (provider or config.TRANSLATION_PROVIDER).lower()
    if provider == "deepl":
        from notary_admin.services.deepl import DeepLTranslator

        return DeepLTranslator()

    client = None
    if config.OPENAI_API_KEY:
        client = OpenAI(api_key=config.OPENAI_API_KEY, timeout=config.TRANSLATION_TIMEOUT_SECONDS)
        logger.info("OpenAI translation client initialised.")
    else:
        logger.warning("OPENAI_API_KEY is not set. Article translation is disabled.")
    return OpenAITranslator(client)
