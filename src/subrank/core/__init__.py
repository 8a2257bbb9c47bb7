"""Core configuration and errors for subrank."""

from subrank.core.config import (
    DEFAULT_DETAIL_LIMIT,
    DEFAULT_RANKING_LIMIT,
    FetchConfig,
    RankingConfig,
    StoreConfig,
    SubRankConfig,
    load_config,
)
from subrank.core.errors import (
    ConfigurationError,
    InvalidScopeError,
    MissingTokenError,
    ReviewStoreError,
)

__all__ = [
    "DEFAULT_DETAIL_LIMIT",
    "DEFAULT_RANKING_LIMIT",
    "FetchConfig",
    "RankingConfig",
    "StoreConfig",
    "SubRankConfig",
    "load_config",
    "ConfigurationError",
    "InvalidScopeError",
    "MissingTokenError",
    "ReviewStoreError",
]
