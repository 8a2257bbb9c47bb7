"""Configuration schemas and loading for subrank."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from subrank.core.errors import MissingTokenError

DEFAULT_RANKING_LIMIT = 100
DEFAULT_DETAIL_LIMIT = 5


class StoreConfig(BaseModel):
    """Review store backend settings.

    Attributes:
        backend: Which store to read reviews from:
            - "duckdb": local DuckDB database (see ``subrank import``).
            - "firestore": Firestore REST API.
            - "memory": empty in-memory store (no external reads).
        path: DuckDB database file (duckdb backend).
        project_id: Google Cloud project (firestore backend).
        database: Firestore database ID.
        collection: Collection holding review documents.
        token: OAuth bearer token. Falls back to FIRESTORE_TOKEN.
    """

    backend: Literal["duckdb", "firestore", "memory"] = "duckdb"
    path: str = "./reviews.duckdb"
    project_id: str | None = None
    database: str = "(default)"
    collection: str = "subReviews"
    token: str | None = None

    def get_token(self) -> str:
        """Get Firestore access token from config or environment."""
        token = self.token or os.environ.get("FIRESTORE_TOKEN")
        if not token:
            raise MissingTokenError()
        return token


class FetchConfig(BaseModel):
    """Per-school fetch fan-out settings."""

    timeout_seconds: float = Field(default=10.0, gt=0)
    max_concurrency: int = Field(default=8, ge=1)


class RankingConfig(BaseModel):
    """Leaderboard settings.

    Attributes:
        limit: Maximum entries per leaderboard (overall and per city).
        detail_limit: Reviews shown per substitute in drill-down output.
    """

    limit: int = Field(default=DEFAULT_RANKING_LIMIT, ge=1)
    detail_limit: int = Field(default=DEFAULT_DETAIL_LIMIT, ge=0)


class SubRankConfig(BaseModel):
    """Complete subrank configuration."""

    store: StoreConfig = Field(default_factory=StoreConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    output_dir: str = "./rankings"

    @field_validator("output_dir")
    @classmethod
    def validate_output_dir(cls, v: str) -> str:
        if not v or not v.strip():
            msg = "output_dir cannot be empty"
            raise ValueError(msg)
        return v


def load_config(path: str | Path) -> SubRankConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file.

    Returns:
        Validated SubRankConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValidationError: If config is invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data = yaml.safe_load(f)

    return SubRankConfig.model_validate(data or {})
