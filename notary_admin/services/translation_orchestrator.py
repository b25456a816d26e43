"""
Traduction d'un article vers plusieurs langues avec sauvegarde après chaque langue.

Les langues cibles sont traitées l'une après l'autre : un appel au service de
traduction puis une écriture en base par langue. L'échec d'une langue est
enregistré et n'interrompt pas le lot.
"""
import logging
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from notary_admin import config
from notary_admin.exceptions import TranslationInProgressError, ValidationError
from notary_admin.models.translation import (
    TranslationBatchResult,
    TranslationProgress,
    TranslationRequest,
    TranslationStats,
    TranslationStatus,
)
from notary_admin.services.content_model import LanguageContentModel, is_empty
from notary_admin.services.form_state import FormStateStore
from notary_admin.services.translation import Translator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TranslationProgress], None]


def validate_translation_job(
    content_model: LanguageContentModel,
    entity_id: Optional[str],
    source_bundle: Mapping[str, Any],
    target_locales: Iterable[str],
    selected_fields: Iterable[str],
    source_locale: str,
) -> List[str]:
    """
    Vérifie qu'un lot peut démarrer et retourne les langues cibles dédoublonnées.
    """
    registry = content_model.registry
    if not entity_id:
        raise ValidationError("Enregistrez l'article avant de le traduire")
    registry.validate(source_locale)

    fields = list(selected_fields)
    if not fields:
        raise ValidationError("Sélectionnez au moins un champ à traduire", "fields")

    targets: List[str] = []
    for code in target_locales:
        if code not in registry:
            raise ValidationError(f"Langue inconnue : {code}", "target_locales")
        if code == source_locale:
            raise ValidationError("La langue source ne peut pas être une langue cible", "target_locales")
        if code not in targets:
            targets.append(code)
    if not targets:
        raise ValidationError("Sélectionnez au moins une langue cible", "target_locales")

    if not content_model.source_subset(source_bundle, fields):
        raise ValidationError("Aucun contenu à traduire dans la langue source")
    return targets


class SingleFlight:
    """Un seul lot de traduction à la fois par article"""

    def __init__(self):
        self._lock = threading.Lock()
        self._running = set()

    @contextmanager
    def hold(self, key: str):
        with self._lock:
            if key in self._running:
                raise TranslationInProgressError(key)
            self._running.add(key)
        try:
            yield
        finally:
            with self._lock:
                self._running.discard(key)

    def is_running(self, key: str) -> bool:
        with self._lock:
            return key in self._running


class TranslationOrchestrator:
    def __init__(
        self,
        content_model: LanguageContentModel,
        translator: Translator,
        repository,
        pause_seconds: float = config.TRANSLATION_PAUSE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.content_model = content_model
        self.translator = translator
        self.repository = repository
        self.pause_seconds = pause_seconds
        self._sleep = sleep

    def translate_and_save(
        self,
        entity_id: str,
        source_bundle: Mapping[str, Any],
        target_locales: Iterable[str],
        selected_fields: Iterable[str],
        source_locale: str,
        on_progress: Optional[ProgressCallback] = None,
        store: Optional[FormStateStore] = None,
    ) -> TranslationBatchResult:
        """
        Traduit `source_bundle` vers chaque langue cible puis sauvegarde
        les colonnes de cette langue. Si `store` est fourni, chaque traduction
        y est fusionnée (seuls les champs retournés sont modifiés).
        """
        registry = self.content_model.registry
        fields = list(selected_fields)
        targets = validate_translation_job(
            self.content_model, entity_id, source_bundle, target_locales, fields, source_locale
        )
        # Les champs vides côté source ne sont pas envoyés
        payload = self.content_model.source_subset(source_bundle, fields)
        total = len(targets)
        result = TranslationBatchResult(stats=TranslationStats(total=total))

        def emit(current: int, status: TranslationStatus, locale: Optional[str] = None, **extra):
            if on_progress is None:
                return
            on_progress(
                TranslationProgress(
                    current=current,
                    total=total,
                    status=status,
                    locale=locale,
                    language_name=registry.get(locale).name if locale else None,
                    **extra,
                )
            )

        logger.info("=" * 50)
        logger.info(f"🌍 Translating blog post {entity_id} into {total} language(s)")
        logger.info(f"Source: {source_locale} | Targets: {', '.join(targets)} | Fields: {', '.join(payload)}")
        emit(0, TranslationStatus.STARTING)

        for index, locale in enumerate(targets, start=1):
            logger.info(f"[{index}/{total}] {registry.get(locale).name}")
            emit(index, TranslationStatus.TRANSLATING, locale)
            started = time.monotonic()
            try:
                request = TranslationRequest(source_locale=source_locale, target_locale=locale, fields=payload)
                # une valeur vide ne remplace jamais la valeur enregistrée
                translated = {
                    name: value
                    for name, value in self.translator.translate(request).items()
                    if name in payload and not is_empty(value)
                }
                emit(index, TranslationStatus.SAVING, locale, translation=translated)

                if store is not None:
                    merged = store.merge_translation(locale, translated)
                else:
                    merged = dict(translated)
                self.repository.save_locale(entity_id, locale, translated, fields=list(translated))

                result.translations[locale] = merged
                result.saved[locale] = True
                result.stats.succeeded += 1
                logger.info(f"✅ {locale} saved in {(time.monotonic() - started) * 1000:.0f}ms")
                emit(index, TranslationStatus.SUCCESS, locale, translation=merged)
            except Exception as exc:
                reason = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
                result.errors[locale] = reason
                result.stats.failed += 1
                logger.error(f"❌ {locale} failed: {reason}")
                emit(index, TranslationStatus.ERROR, locale, error=reason)

            if index < total and self.pause_seconds > 0:
                self._sleep(self.pause_seconds)

        failed_locales = f" ({', '.join(result.errors)})" if result.errors else ""
        logger.info(
            f"📊 Translation summary for {entity_id}: {result.stats.succeeded}/{total} succeeded, "
            f"{result.stats.failed} failed{failed_locales}"
        )
        return result

    def summary(self, result: TranslationBatchResult) -> Dict[str, Any]:
        return {"stats": result.stats.model_dump(), "errors": dict(result.errors)}
