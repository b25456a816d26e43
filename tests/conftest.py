"""
Fixtures partagées : base en mémoire, traducteurs factices, client HTTP.
"""
import itertools

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from main import app
from notary_admin.config import ContentSettings, LocaleRegistry
from notary_admin.crud.blog_posts import BlogPostRepository
from notary_admin.dependencies import (
    get_blog_repository,
    get_content_model,
    get_gateway,
    get_image_uploader,
    get_orchestrator,
    get_translator,
    require_admin,
)
from notary_admin.exceptions import EntityNotFoundError
from notary_admin.services.content_model import LanguageContentModel
from notary_admin.services.storage import ImageUploader
from notary_admin.services.translation_orchestrator import TranslationOrchestrator


# =============================================================================
# Fakes
# =============================================================================


class FakeGateway:
    """Tables Supabase en mémoire, mêmes méthodes que SupabaseGateway"""

    def __init__(self, tables=None):
        self.tables = {name: [dict(row) for row in rows] for name, rows in (tables or {}).items()}
        self.updates = []
        self._ids = itertools.count(1)

    def _rows(self, table):
        return self.tables.setdefault(table, [])

    def _find(self, table, row_id):
        for row in self._rows(table):
            if str(row.get("id")) == str(row_id):
                return row
        return None

    def get(self, table, row_id):
        row = self._find(table, row_id)
        return dict(row) if row is not None else None

    def get_or_404(self, table, row_id):
        row = self.get(table, row_id)
        if row is None:
            raise EntityNotFoundError(table, row_id)
        return row

    def list(self, table, order_by="created_at", descending=True):
        rows = [dict(row) for row in self._rows(table)]
        if order_by:
            rows.sort(key=lambda row: str(row.get(order_by) or ""), reverse=descending)
        return rows

    def insert(self, table, data):
        row = dict(data)
        row.setdefault("id", f"gen-{next(self._ids)}")
        row.setdefault("created_at", "2026-10-01T09:00:00+00:00")
        self._rows(table).append(row)
        return dict(row)

    def update(self, table, row_id, data):
        if not data:
            return {}
        row = self._find(table, row_id)
        if row is None:
            raise EntityNotFoundError(table, row_id)
        row.update(data)
        self.updates.append((table, str(row_id), dict(data)))
        return dict(row)

    def delete(self, table, row_id):
        row = self._find(table, row_id)
        if row is None:
            return 0
        self._rows(table).remove(row)
        return 1


class PrefixTranslator:
    """
    Traduit en préfixant chaque texte par le code de la langue cible.
    `failures` : exceptions à lever par langue, `responses` : réponses imposées.
    """

    def __init__(self, failures=None, responses=None):
        self.failures = failures or {}
        self.responses = responses or {}
        self.calls = []

    def translate(self, request):
        self.calls.append(request)
        target = request.target_locale
        if target in self.failures:
            raise self.failures[target]
        if target in self.responses:
            return dict(self.responses[target])
        result = {}
        for name, value in request.fields.items():
            if name == "faq":
                result[name] = [
                    {"question": f"[{target}] {item['question']}", "answer": f"[{target}] {item['answer']}"}
                    for item in value
                ]
            else:
                result[name] = f"[{target}] {value}"
        return result


class FakeBucket:
    def __init__(self, name, fail=False):
        self.name = name
        self.fail = fail
        self.uploads = []

    def upload(self, path, data, options):
        if self.fail:
            raise RuntimeError("bucket unavailable")
        self.uploads.append((path, data, options))

    def get_public_url(self, path):
        return f"https://storage.test/{self.name}/{path}"


class FakeStorage:
    def __init__(self, fail=False):
        self.buckets = {}
        self.fail = fail

    def from_(self, name):
        return self.buckets.setdefault(name, FakeBucket(name, self.fail))


class FakeEditor:
    """Widget d'édition riche : garde son propre HTML"""

    def __init__(self):
        self.html = ""
        self.loads = []

    def get_html(self):
        return self.html

    def set_content(self, html):
        self.html = html
        self.loads.append(html)


# =============================================================================
# Fixtures
# =============================================================================


BLOG_ROW = {
    "id": "post-1",
    "created_at": "2026-09-01T10:00:00+00:00",
    "title": "Hello",
    "content": "<p>Body</p>",
    "excerpt": "",
    "faq": [
        {"question": "What is an apostille?", "answer": "A certificate."},
        {"question": "How long?", "answer": "Two days."},
    ],
    "content_fr": "<p>Ancien contenu</p>",
    "slug": "hello",
    "status": "draft",
    "views_count": 0,
}


@pytest.fixture
def settings():
    return ContentSettings(
        locales=LocaleRegistry(),
        base_url="https://mynotary.io",
        default_cover_image="https://cdn.test/default-cover.jpg",
    )


@pytest.fixture
def content_model(settings):
    return LanguageContentModel(settings)


@pytest.fixture
def blog_row():
    return dict(BLOG_ROW)


@pytest.fixture
def gateway(blog_row):
    return FakeGateway({"blog_posts": [blog_row]})


@pytest.fixture
def repository(gateway, content_model):
    return BlogPostRepository(gateway, content_model)


@pytest.fixture
def translator():
    return PrefixTranslator()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def editor():
    return FakeEditor()


@pytest.fixture
def client(gateway, content_model, translator, storage):
    def orchestrator_override(
        repository=Depends(get_blog_repository),
        translator=Depends(get_translator),
    ):
        return TranslationOrchestrator(repository.content_model, translator, repository, pause_seconds=0)

    app.dependency_overrides[require_admin] = lambda: {"id": "admin-1", "email": "admin@mynotary.io"}
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_content_model] = lambda: content_model
    app.dependency_overrides[get_translator] = lambda: translator
    app.dependency_overrides[get_orchestrator] = orchestrator_override
    app.dependency_overrides[get_image_uploader] = lambda: ImageUploader(storage, clock=lambda: 1700000000.0)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
