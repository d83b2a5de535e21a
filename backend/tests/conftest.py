"""
Pytest configuration and shared test helpers for backend tests.
"""
import os
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

# Skip the MongoDB connection when running under pytest.
os.environ.setdefault("PYTEST_RUNNING", "1")

BACKEND_DIR = Path(__file__).resolve().parent.parent
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import pytest
from fastapi.testclient import TestClient

from server import app


@pytest.fixture
def client():
    """Return a TestClient for the main FastAPI app (server:app)."""
    return TestClient(app)


class InMemoryStore:
    """SessionStore double keeping JSON snapshots in a dict."""

    def __init__(self):
        self.data: Dict[str, Dict[str, Any]] = {}

    async def get(self, key, model):
        raw = self.data.get(key)
        return model.model_validate(raw) if raw is not None else None

    async def set(self, key, value):
        self.data[key] = value.model_dump(mode="json")

    async def delete(self, key):
        return self.data.pop(key, None) is not None


def _matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    for field, expected in query.items():
        if isinstance(expected, dict) and "$in" in expected:
            if doc.get(field) not in expected["$in"]:
                return False
        elif doc.get(field) != expected:
            return False
    return True


class FakeCursor:
    def __init__(self, docs):
        self.docs = docs

    def sort(self, field, direction=1):
        self.docs.sort(key=lambda d: d[field], reverse=direction < 0)
        return self

    def limit(self, n):
        self.docs = self.docs[:n]
        return self

    async def to_list(self, length=None):
        return self.docs if length is None else self.docs[:length]


class FakeCollection:
    """Just enough of a Motor collection for journal and checkout records."""

    def __init__(self):
        self.docs: List[Dict[str, Any]] = []

    async def insert_one(self, doc):
        self.docs.append(dict(doc))
        return SimpleNamespace(inserted_id=len(self.docs))

    async def find_one(self, query, projection=None) -> Optional[Dict[str, Any]]:
        return next((dict(d) for d in self.docs if _matches(d, query)), None)

    async def update_one(self, query, update, upsert=False):
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                return SimpleNamespace(matched_count=1)
        return SimpleNamespace(matched_count=0)

    def find(self, query, projection=None):
        return FakeCursor([dict(d) for d in self.docs if _matches(d, query)])


class FakeDB(dict):
    def __missing__(self, name):
        collection = FakeCollection()
        self[name] = collection
        return collection


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def fake_db():
    return FakeDB()


@pytest.fixture
def entitlements(store, fake_db):
    from legallylegit.services.entitlement_service import EntitlementService

    service = EntitlementService(store=store)
    service.db = fake_db
    return service


def stream_chunk(text: Optional[str] = None, sources: Optional[List[tuple]] = None):
    """Gemini stream chunk with optional grounding batch [(uri, title), ...]."""
    grounding = None
    if sources is not None:
        grounding = SimpleNamespace(grounding_chunks=[
            SimpleNamespace(web=SimpleNamespace(uri=uri, title=title)) for uri, title in sources
        ])
    return SimpleNamespace(
        text=text,
        candidates=[SimpleNamespace(grounding_metadata=grounding)],
    )


class FakeModels:
    """Async models surface of a genai client."""

    def __init__(self, response=None, chunks=None, error=None, fail_after=None):
        self.response = response
        self.chunks = chunks or []
        self.error = error
        self.fail_after = fail_after
        self.calls: List[Dict[str, Any]] = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response

    async def generate_content_stream(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None and self.fail_after is None:
            raise self.error

        async def iterate():
            for i, chunk in enumerate(self.chunks):
                if self.fail_after is not None and i == self.fail_after:
                    raise self.error
                yield chunk
            if self.fail_after is not None and self.fail_after >= len(self.chunks):
                raise self.error

        return iterate()


def fake_genai_client(**kwargs):
    models = FakeModels(**kwargs)
    return SimpleNamespace(aio=SimpleNamespace(models=models)), models
