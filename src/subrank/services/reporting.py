"""Leaderboard formatting and filtering for CLI output and reports."""

from __future__ import annotations

from collections.abc import Sequence

from tabulate import tabulate

from subrank.core.config import DEFAULT_DETAIL_LIMIT
from subrank.models import Leaderboards, RankingItem, Review, category_label

LEADERBOARD_HEADERS = (
    "Rank",
    "Substitute",
    "City",
    "Value",
    "Reviews",
    "Compliments",
    "Complaints",
)


def filter_items(items: Sequence[RankingItem], query: str | None) -> list[RankingItem]:
    """Keep items whose name or city contains ``query`` (case-insensitive)."""
    if not query:
        return list(items)
    needle = query.casefold()
    return [
        item
        for item in items
        if needle in item.sub_name.casefold() or needle in item.city.casefold()
    ]


def select_city(leaderboards: Leaderboards, city: str | None) -> tuple[str, list[RankingItem]]:
    """Pick one city's leaderboard.

    Falls back to the alphabetically first city when ``city`` is empty.
    An unknown city yields an empty list.

    Returns:
        Tuple of (city name, items).
    """
    if not city:
        cities = leaderboards.cities
        if not cities:
            return "", []
        city = cities[0]
    return city, list(leaderboards.by_city.get(city, []))


def format_breakdown(item: RankingItem) -> str:
    """Category breakdown as ``Label 4.5, Label 3.0`` sorted by category key."""
    return ", ".join(
        f"{category_label(key)} {item.category_breakdown[key]:.1f}"
        for key in sorted(item.category_breakdown)
    )


def leaderboard_rows(items: Sequence[RankingItem]) -> list[tuple]:
    """Table rows with 1-based rank and one-decimal values."""
    return [
        (
            rank,
            item.sub_name or item.sub_id,
            item.city,
            f"{item.overall_value:.1f}",
            item.review_count,
            item.compliment_count,
            item.complaint_count,
        )
        for rank, item in enumerate(items, 1)
    ]


def format_leaderboard(
    items: Sequence[RankingItem],
    title: str,
    *,
    include_breakdown: bool = False,
) -> str:
    """Render a leaderboard as a markdown section.

    Args:
        items: Ranked items, already sorted and truncated.
        title: Section heading.
        include_breakdown: Add a per-category column.

    Returns:
        Markdown content.
    """
    lines = [f"# {title}", ""]
    if not items:
        lines.append("No reviews yet.")
        return "\n".join(lines)

    headers = LEADERBOARD_HEADERS
    rows = leaderboard_rows(items)
    if include_breakdown:
        headers = (*headers, "Categories")
        rows = [(*row, format_breakdown(item)) for row, item in zip(rows, items, strict=True)]
    lines.append(tabulate(rows, headers=headers, tablefmt="github"))
    return "\n".join(lines)


def detail_rows(reviews: Sequence[Review], limit: int = DEFAULT_DETAIL_LIMIT) -> list[tuple]:
    """Rows for the complaints & compliments drill-down, first ``limit`` reviews."""
    rows = []
    for review in reviews[:limit]:
        kind = "-" if review.is_complaint else "+"
        rows.append(
            (
                kind,
                review.school_name,
                category_label(review.category),
                f"{review.value_score:.1f}",
                review.comment or "",
            )
        )
    return rows


def format_details(reviews: Sequence[Review], limit: int = DEFAULT_DETAIL_LIMIT) -> str:
    """Render the drill-down table for one substitute."""
    return tabulate(
        detail_rows(reviews, limit),
        headers=("", "School", "Category", "Score", "Comment"),
        tablefmt="github",
    )
