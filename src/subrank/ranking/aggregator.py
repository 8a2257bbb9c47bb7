"""Substitute ranking aggregation.

Turns a flat list of reviews into overall and per-city leaderboards.
Group order is first-seen order of ``sub_id`` in the input, and all sorts are
stable, so equal ``overall_value`` entries keep that discovery order.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from statistics import fmean

import structlog

from subrank.core.config import DEFAULT_RANKING_LIMIT
from subrank.models import Leaderboards, RankingItem, Review

logger = structlog.get_logger()


def group_by_substitute(reviews: Sequence[Review]) -> dict[str, list[Review]]:
    """Group reviews by ``sub_id`` keeping first-seen order of substitutes."""
    groups: dict[str, list[Review]] = {}
    for review in reviews:
        groups.setdefault(review.sub_id, []).append(review)
    return groups


def build_item(sub_id: str, group: Sequence[Review]) -> RankingItem:
    """Aggregate one substitute's reviews into a RankingItem.

    Identity fields and city come from the first review in ``group``.
    Each category mean divides by that category's own review count.

    Args:
        sub_id: Substitute identifier shared by every review in the group.
        group: Non-empty list of the substitute's reviews.

    Returns:
        The aggregated RankingItem.
    """
    first = group[0]

    scores_by_category: dict[str, list[float]] = defaultdict(list)
    complaints = 0
    compliments = 0
    for review in group:
        if review.is_complaint:
            complaints += 1
        else:
            compliments += 1
        scores_by_category[review.category].append(float(review.value_score))

    return RankingItem(
        sub_id=sub_id,
        sub_user_id=first.sub_user_id,
        sub_name=first.sub_name,
        city=first.city,
        overall_value=fmean(float(r.value_score) for r in group),
        category_breakdown={k: fmean(v) for k, v in scores_by_category.items()},
        complaint_count=complaints,
        compliment_count=compliments,
        review_count=len(group),
    )


def _by_value_desc(items: Sequence[RankingItem]) -> list[RankingItem]:
    # sorted() is stable with reverse=True, ties keep input order
    return sorted(items, key=lambda item: item.overall_value, reverse=True)


def rank(reviews: Sequence[Review], limit: int = DEFAULT_RANKING_LIMIT) -> Leaderboards:
    """Build overall and per-city Top-N leaderboards.

    Args:
        reviews: Reviews across every school in scope, in merge order.
        limit: Maximum entries per leaderboard.

    Returns:
        Leaderboards with ``overall`` and ``by_city`` views of the same items.

    Raises:
        ValueError: If limit is not positive.
    """
    if limit <= 0:
        msg = "limit must be greater than 0"
        raise ValueError(msg)

    items = [build_item(sub_id, group) for sub_id, group in group_by_substitute(reviews).items()]

    city_groups: dict[str, list[RankingItem]] = {}
    for item in items:
        city_groups.setdefault(item.city, []).append(item)

    leaderboards = Leaderboards(
        overall=_by_value_desc(items)[:limit],
        by_city={city: _by_value_desc(group)[:limit] for city, group in city_groups.items()},
    )
    logger.debug(
        "ranking_built",
        reviews=len(reviews),
        substitutes=len(items),
        cities=len(city_groups),
    )
    return leaderboards


def reviews_for(sub_id: str, reviews: Sequence[Review]) -> list[Review]:
    """Return a substitute's reviews in their original order."""
    return [r for r in reviews if r.sub_id == sub_id]
