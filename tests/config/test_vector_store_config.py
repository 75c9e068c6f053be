"""Tests for vector store configuration loader."""

from __future__ import annotations

from pathlib import Path
from uuid import UUID

import pytest
from pydantic import ValidationError

from Chunk_Index_rev.config.settings import QdrantSettings
from Chunk_Index_rev.config.vector_store import (
    DatasetConfiguration,
    load_vector_store_config,
    migrate_vector_store_config,
)

DATASET = "0b8f4c52-8a2e-4a47-9a55-7d7e2f0c1e10"


def test_load_vector_store_config(tmp_path: Path) -> None:
    config_path = tmp_path / "vector_store.yaml"
    config_path.write_text(
        f"""
datasets:
  - dataset_id: {DATASET}
    collection: papers
    embedding_size: 384
    api_key: dataset-secret
""",
        encoding="utf-8",
    )

    config = load_vector_store_config(config_path)

    entry = config.dataset_for(UUID(DATASET))
    assert entry is not None
    assert entry.collection == "papers"
    resolved = entry.to_configuration(QdrantSettings())
    assert resolved.qdrant_url == "http://qdrant.test:6333"
    assert resolved.embedding_size == 384
    assert resolved.api_key_value() == "dataset-secret"


def test_missing_file_yields_empty_config(tmp_path: Path) -> None:
    config = load_vector_store_config(tmp_path / "absent.yaml")
    assert config.datasets == []


def test_invalid_dataset_id(tmp_path: Path) -> None:
    config_path = tmp_path / "vector_store.yaml"
    config_path.write_text("datasets:\n  - dataset_id: not-a-uuid\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_vector_store_config(config_path)


def test_migrate_legacy_layout() -> None:
    migrated = migrate_vector_store_config(
        {"vector_store": {"datasets": {DATASET: {"collection": "legacy"}}}}
    )

    assert migrated == {"datasets": [{"dataset_id": DATASET, "collection": "legacy"}]}
    assert migrate_vector_store_config({}) == {"datasets": []}


def test_dataset_configuration_overrides_settings() -> None:
    config = DatasetConfiguration.from_settings(
        QdrantSettings(collection="shared"),
        qdrant_collection_name="override",
        embedding_size=None,
    )

    assert config.qdrant_collection_name == "override"
    assert config.embedding_size == 1536
    assert config.api_key_value() is None


def test_dataset_configuration_is_frozen() -> None:
    config = DatasetConfiguration(qdrant_url="http://q", qdrant_collection_name="c")

    with pytest.raises(ValidationError):
        config.qdrant_collection_name = "other"  # type: ignore[misc]
