from __future__ import annotations

import pytest

from Chunk_Index_rev.config.settings import get_settings

QDRANT_TEST_URL = "http://qdrant.test:6333"


def pytest_configure(config):  # pragma: no cover - option wiring only
    config.addinivalue_line("markers", "asyncio: async tests")


@pytest.fixture(autouse=True)
def _configure_environment(monkeypatch):
    monkeypatch.setenv("QDRANT_URL", QDRANT_TEST_URL)
    monkeypatch.delenv("QDRANT_API_KEY", raising=False)
    monkeypatch.delenv("QDRANT_COLLECTION", raising=False)
    monkeypatch.delenv("QDRANT_EMBEDDING_SIZE", raising=False)
    monkeypatch.delenv("CHUNK_INDEX_ENV", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def qdrant_url() -> str:
    return QDRANT_TEST_URL
