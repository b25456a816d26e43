"""
Tests de l'orchestrateur de traduction : lot séquentiel, erreurs isolées par langue.
"""
import logging

import pytest

from conftest import PrefixTranslator
from notary_admin.exceptions import GatewayError, TranslationInProgressError, TranslationServiceError, ValidationError
from notary_admin.models.translation import TranslationStatus
from notary_admin.services.form_state import FormStateStore
from notary_admin.services.translation_orchestrator import SingleFlight, TranslationOrchestrator


@pytest.fixture
def source(repository):
    return repository.load("post-1").content["en"]


def make_orchestrator(content_model, translator, repository, **kwargs):
    kwargs.setdefault("pause_seconds", 0)
    return TranslationOrchestrator(content_model, translator, repository, **kwargs)


# =============================================================================
# Batch
# =============================================================================


class TestBatch:
    def test_one_failing_locale_does_not_abort(self, content_model, repository, gateway, source):
        translator = PrefixTranslator(failures={"es": TranslationServiceError("DeepL API request timeout", "es")})
        orchestrator = make_orchestrator(content_model, translator, repository)

        result = orchestrator.translate_and_save("post-1", source, ["fr", "es", "de"], ["title", "content", "faq"], "en")

        assert result.stats.total == 3
        assert result.stats.succeeded == 2
        assert result.stats.failed == 1
        assert result.errors == {"es": "DeepL API request timeout"}
        row = gateway.get("blog_posts", "post-1")
        assert row["title_fr"] == "[fr] Hello"
        assert row["title_de"] == "[de] Hello"
        assert "title_es" not in row
        assert result.saved == {"fr": True, "de": True}

    def test_locales_are_processed_in_order(self, content_model, repository, translator, source):
        orchestrator = make_orchestrator(content_model, translator, repository)
        orchestrator.translate_and_save("post-1", source, ["de", "fr", "it"], ["title"], "en")
        assert [call.target_locale for call in translator.calls] == ["de", "fr", "it"]

    def test_progress_events(self, content_model, repository, source):
        translator = PrefixTranslator(failures={"es": RuntimeError("boom")})
        orchestrator = make_orchestrator(content_model, translator, repository)
        events = []

        orchestrator.translate_and_save("post-1", source, ["fr", "es"], ["title"], "en", on_progress=events.append)

        assert [(e.current, e.status, e.locale) for e in events] == [
            (0, TranslationStatus.STARTING, None),
            (1, TranslationStatus.TRANSLATING, "fr"),
            (1, TranslationStatus.SAVING, "fr"),
            (1, TranslationStatus.SUCCESS, "fr"),
            (2, TranslationStatus.TRANSLATING, "es"),
            (2, TranslationStatus.ERROR, "es"),
        ]
        assert all(e.total == 2 for e in events)
        assert events[3].translation["title"] == "[fr] Hello"
        assert events[3].language_name == "Français"
        assert events[-1].error == "boom"

    def test_partial_response_only_writes_returned_fields(self, content_model, repository, gateway, source):
        translator = PrefixTranslator(responses={"fr": {"title": "Bonjour"}})
        orchestrator = make_orchestrator(content_model, translator, repository)
        store = FormStateStore(content_model, repository.load("post-1"))

        result = orchestrator.translate_and_save("post-1", source, ["fr"], ["title", "content"], "en", store=store)

        assert gateway.updates[-1] == ("blog_posts", "post-1", {"title_fr": "Bonjour"})
        assert store.get_locale_field("fr", "content") == "<p>Ancien contenu</p>"
        assert result.translations["fr"]["title"] == "Bonjour"
        assert result.translations["fr"]["content"] == "<p>Ancien contenu</p>"

    def test_empty_translated_fields_are_not_saved(self, content_model, repository, gateway, source):
        existing_faq = [{"question": "Q fr", "answer": "R fr"}, {"question": "Q2 fr", "answer": "R2 fr"}]
        gateway.update("blog_posts", "post-1", {"faq_fr": existing_faq})
        translator = PrefixTranslator(responses={"fr": {"title": "Bonjour", "faq": []}})
        orchestrator = make_orchestrator(content_model, translator, repository)
        store = FormStateStore(content_model, repository.load("post-1"))

        result = orchestrator.translate_and_save("post-1", source, ["fr"], ["title", "faq"], "en", store=store)

        assert gateway.updates[-1] == ("blog_posts", "post-1", {"title_fr": "Bonjour"})
        assert gateway.get("blog_posts", "post-1")["faq_fr"] == existing_faq
        assert store.get_locale_field("fr", "faq") == existing_faq
        assert result.translations["fr"]["faq"] == existing_faq

    def test_faq_pairs_are_translated(self, content_model, repository, gateway, translator, source):
        orchestrator = make_orchestrator(content_model, translator, repository)
        orchestrator.translate_and_save("post-1", source, ["it"], ["faq"], "en")

        assert gateway.get("blog_posts", "post-1")["faq_it"] == [
            {"question": "[it] What is an apostille?", "answer": "[it] A certificate."},
            {"question": "[it] How long?", "answer": "[it] Two days."},
        ]

    def test_empty_source_fields_are_not_sent(self, content_model, repository, translator, source):
        orchestrator = make_orchestrator(content_model, translator, repository)
        orchestrator.translate_and_save("post-1", source, ["fr"], ["title", "excerpt"], "en")
        assert translator.calls[0].fields == {"title": "Hello"}

    def test_unrequested_fields_are_dropped(self, content_model, repository, gateway, source):
        translator = PrefixTranslator(responses={"fr": {"title": "Bonjour", "cta": "Réservez"}})
        orchestrator = make_orchestrator(content_model, translator, repository)

        orchestrator.translate_and_save("post-1", source, ["fr"], ["title"], "en")

        assert "cta_fr" not in gateway.get("blog_posts", "post-1")

    def test_save_failure_is_recorded(self, content_model, repository, translator, source, monkeypatch):
        save_locale = repository.save_locale

        def flaky_save(post_id, locale, bundle, fields=None):
            if locale == "de":
                raise GatewayError("RLS policy violation", "blog_posts")
            return save_locale(post_id, locale, bundle, fields)

        monkeypatch.setattr(repository, "save_locale", flaky_save)
        orchestrator = make_orchestrator(content_model, translator, repository)

        result = orchestrator.translate_and_save("post-1", source, ["fr", "de"], ["title"], "en")

        assert result.errors == {"de": "RLS policy violation"}
        assert result.stats.succeeded == 1

    def test_pause_between_locales(self, content_model, repository, translator, source):
        pauses = []
        orchestrator = make_orchestrator(
            content_model, translator, repository, pause_seconds=0.5, sleep=pauses.append
        )
        orchestrator.translate_and_save("post-1", source, ["fr", "es", "de"], ["title"], "en")
        assert pauses == [0.5, 0.5]

    def test_summary(self, content_model, repository, source):
        translator = PrefixTranslator(failures={"fr": TranslationServiceError("quota", "fr")})
        orchestrator = make_orchestrator(content_model, translator, repository)
        result = orchestrator.translate_and_save("post-1", source, ["fr"], ["title"], "en")

        assert orchestrator.summary(result) == {
            "stats": {"total": 1, "succeeded": 0, "failed": 1},
            "errors": {"fr": "quota"},
        }

    def test_summary_is_logged(self, content_model, repository, source, caplog):
        translator = PrefixTranslator(failures={"es": TranslationServiceError("quota", "es")})
        orchestrator = make_orchestrator(content_model, translator, repository)

        with caplog.at_level(logging.INFO, logger="notary_admin.services.translation_orchestrator"):
            orchestrator.translate_and_save("post-1", source, ["fr", "es"], ["title"], "en")

        assert "🌍 Translating blog post post-1 into 2 language(s)" in caplog.text
        assert "❌ es failed: quota" in caplog.text
        assert "📊 Translation summary for post-1: 1/2 succeeded, 1 failed (es)" in caplog.text


# =============================================================================
# Validation
# =============================================================================


class TestValidation:
    @pytest.mark.parametrize(
        "entity_id, targets, fields",
        [
            (None, ["fr"], ["title"]),
            ("post-1", [], ["title"]),
            ("post-1", ["en"], ["title"]),
            ("post-1", ["fr", "xx"], ["title"]),
            ("post-1", ["fr"], []),
        ],
    )
    def test_invalid_jobs_never_call_the_service(self, content_model, repository, translator, source, entity_id, targets, fields):
        orchestrator = make_orchestrator(content_model, translator, repository)
        with pytest.raises(ValidationError):
            orchestrator.translate_and_save(entity_id, source, targets, fields, "en")
        assert translator.calls == []

    def test_no_source_content(self, content_model, repository, translator):
        orchestrator = make_orchestrator(content_model, translator, repository)
        with pytest.raises(ValidationError):
            orchestrator.translate_and_save("post-1", {"title": "", "faq": []}, ["fr"], ["title", "faq"], "en")

    def test_duplicate_targets_are_merged(self, content_model, repository, translator, source):
        orchestrator = make_orchestrator(content_model, translator, repository)
        result = orchestrator.translate_and_save("post-1", source, ["fr", "fr"], ["title"], "en")
        assert result.stats.total == 1


# =============================================================================
# Single flight
# =============================================================================


class TestSingleFlight:
    def test_second_batch_is_rejected(self):
        guard = SingleFlight()
        with guard.hold("post-1"):
            assert guard.is_running("post-1")
            with pytest.raises(TranslationInProgressError):
                with guard.hold("post-1"):
                    pass
            with guard.hold("post-2"):
                pass
        assert not guard.is_running("post-1")

    def test_released_after_error(self):
        guard = SingleFlight()
        with pytest.raises(RuntimeError):
            with guard.hold("post-1"):
                raise RuntimeError("boom")
        assert not guard.is_running("post-1")
