"""Tests for configuration loading and store selection."""

import pytest
from pydantic import ValidationError

from subrank.core.config import (
    DEFAULT_DETAIL_LIMIT,
    DEFAULT_RANKING_LIMIT,
    StoreConfig,
    SubRankConfig,
    load_config,
)
from subrank.core.errors import ConfigurationError, MissingTokenError
from subrank.services.storage import (
    DBReviewStore,
    FirestoreReviewStore,
    InMemoryReviewStore,
    create_store,
)


class TestLoadConfig:
    """Tests for YAML loading."""

    def test_loads_yaml(self, tmp_path):
        """Values from YAML override defaults."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "store:\n"
            "  backend: memory\n"
            "fetch:\n"
            "  timeout_seconds: 2.5\n"
            "  max_concurrency: 3\n"
            "ranking:\n"
            "  limit: 10\n"
            "output_dir: ./out\n"
        )
        config = load_config(path)

        assert config.store.backend == "memory"
        assert config.fetch.timeout_seconds == 2.5
        assert config.fetch.max_concurrency == 3
        assert config.ranking.limit == 10
        assert config.ranking.detail_limit == DEFAULT_DETAIL_LIMIT
        assert config.output_dir == "./out"

    def test_empty_file_uses_defaults(self, tmp_path):
        """An empty file yields the default configuration."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        config = load_config(path)

        assert config.store.backend == "duckdb"
        assert config.store.collection == "subReviews"
        assert config.ranking.limit == DEFAULT_RANKING_LIMIT

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="not found"):
            load_config(tmp_path / "nope.yaml")


class TestValidation:
    """Tests for schema constraints."""

    def test_limit_must_be_positive(self):
        """A zero leaderboard size is rejected."""
        with pytest.raises(ValidationError):
            SubRankConfig.model_validate({"ranking": {"limit": 0}})

    def test_timeout_must_be_positive(self):
        """A zero timeout is rejected."""
        with pytest.raises(ValidationError):
            SubRankConfig.model_validate({"fetch": {"timeout_seconds": 0}})

    def test_unknown_backend(self):
        """Only known backends are accepted."""
        with pytest.raises(ValidationError):
            SubRankConfig.model_validate({"store": {"backend": "mysql"}})

    def test_empty_output_dir(self):
        """Output directory cannot be blank."""
        with pytest.raises(ValidationError, match="output_dir cannot be empty"):
            SubRankConfig(output_dir="  ")


class TestStoreConfig:
    """Tests for token lookup and store creation."""

    def test_token_from_config(self, monkeypatch):
        """An explicit token wins."""
        monkeypatch.setenv("FIRESTORE_TOKEN", "env")
        assert StoreConfig(token="cfg").get_token() == "cfg"

    def test_token_from_env(self, monkeypatch):
        """The environment supplies the token when config has none."""
        monkeypatch.setenv("FIRESTORE_TOKEN", "env")
        assert StoreConfig().get_token() == "env"

    def test_missing_token(self, monkeypatch):
        """No token anywhere is a configuration error with a suggestion."""
        monkeypatch.delenv("FIRESTORE_TOKEN", raising=False)
        with pytest.raises(MissingTokenError) as exc_info:
            StoreConfig().get_token()
        assert exc_info.value.suggestion is not None
        assert "FIRESTORE_TOKEN" in str(exc_info.value)

    def test_create_memory_store(self):
        """The memory backend builds an empty in-memory store."""
        assert isinstance(create_store(StoreConfig(backend="memory")), InMemoryReviewStore)

    async def test_create_duckdb_store(self, tmp_path):
        """The duckdb backend opens a local database."""
        store = create_store(StoreConfig(path=str(tmp_path / "r.duckdb")))
        assert isinstance(store, DBReviewStore)
        await store.close()

    async def test_create_firestore_store(self, monkeypatch):
        """The firestore backend uses project and token from config."""
        monkeypatch.setenv("FIRESTORE_TOKEN", "env")
        store = create_store(StoreConfig(backend="firestore", project_id="ezteach"))

        assert isinstance(store, FirestoreReviewStore)
        assert store.token == "env"
        assert "/projects/ezteach/" in store.query_url
        await store.close()

    def test_firestore_requires_project(self, monkeypatch):
        """A firestore backend without a project ID is rejected."""
        monkeypatch.setenv("FIRESTORE_TOKEN", "env")
        with pytest.raises(ConfigurationError, match="project_id"):
            create_store(StoreConfig(backend="firestore"))
