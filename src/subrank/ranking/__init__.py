"""Ranking module for subrank.

Aggregates substitute reviews into leaderboards and per-substitute details.
"""

from subrank.ranking.aggregator import (
    build_item,
    group_by_substitute,
    rank,
    reviews_for,
)

__all__ = [
    "build_item",
    "group_by_substitute",
    "rank",
    "reviews_for",
]
