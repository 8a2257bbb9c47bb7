"""Shared test helpers."""

import itertools
from datetime import UTC, datetime, timedelta

import pytest

from subrank.models import Review, ReviewType

_ids = itertools.count(1)
BASE_TIME = datetime(2025, 9, 1, 8, 0, tzinfo=UTC)


def make_review(
    sub_id: str = "S1",
    score: float = 5.0,
    *,
    category: str = "punctuality",
    review_type: ReviewType = ReviewType.COMPLIMENT,
    school_id: str = "schoolA",
    school_name: str = "Lincoln Elementary",
    school_city: str = "Austin",
    sub_name: str | None = None,
    review_id: str | None = None,
    minutes: int = 0,
    comment: str | None = None,
) -> Review:
    """Build a Review with sensible defaults."""
    return Review(
        id=review_id or f"r{next(_ids):05d}",
        sub_id=sub_id,
        sub_user_id=f"user-{sub_id}",
        sub_name=sub_name if sub_name is not None else f"Sub {sub_id}",
        school_id=school_id,
        school_name=school_name,
        school_city=school_city,
        type=review_type,
        category=category,
        value_score=score,
        comment=comment,
        created_at=BASE_TIME + timedelta(minutes=minutes),
    )


@pytest.fixture
def review_factory():
    """Factory for Review records."""
    return make_review
