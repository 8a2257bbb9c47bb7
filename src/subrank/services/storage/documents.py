"""Conversion from review documents to Review records."""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any

import structlog

from subrank.models import Review, ReviewCategory, ReviewType

logger = structlog.get_logger()

_REQUIRED_TEXT_FIELDS = ("subId", "schoolId")


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_datetime(value: Any) -> datetime:
    """Coerce a stored timestamp to an aware datetime (UTC when naive)."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            value = None
    if not isinstance(value, datetime):
        return datetime.now(UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def parse_review(doc_id: str, data: dict[str, Any] | None) -> Review | None:
    """Build a Review from a camelCase review document.

    Missing optional fields fall back to defaults (type ``compliment``,
    category ``other``, empty strings). Documents without a substitute or
    school ID, with a non-numeric or non-finite ``valueScore``, or with an unknown ``type``
    are dropped.

    Args:
        doc_id: Store document identifier.
        data: Document fields, or None for an empty document.

    Returns:
        Parsed Review, or None when the document is malformed.
    """
    if not data:
        logger.warning("dropped_malformed_review", doc_id=doc_id, reason="empty document")
        return None

    for key in _REQUIRED_TEXT_FIELDS:
        value = data.get(key)
        if not isinstance(value, str) or not value.strip():
            logger.warning("dropped_malformed_review", doc_id=doc_id, reason=f"missing {key}")
            return None

    score = data.get("valueScore")
    if (
        isinstance(score, bool)
        or not isinstance(score, int | float)
        or not math.isfinite(score)
    ):
        logger.warning("dropped_malformed_review", doc_id=doc_id, reason="invalid valueScore")
        return None

    raw_type = data.get("type") or ReviewType.COMPLIMENT.value
    try:
        review_type = ReviewType(raw_type)
    except ValueError:
        logger.warning(
            "dropped_malformed_review", doc_id=doc_id, reason=f"unknown type {raw_type!r}"
        )
        return None

    comment = data.get("comment")
    return Review(
        id=doc_id,
        sub_id=data["subId"],
        sub_user_id=_as_text(data.get("subUserId")),
        sub_name=_as_text(data.get("subName")),
        school_id=data["schoolId"],
        school_name=_as_text(data.get("schoolName")),
        school_city=_as_text(data.get("schoolCity")),
        type=review_type,
        category=_as_text(data.get("category")) or ReviewCategory.OTHER.value,
        value_score=float(score),
        comment=comment if isinstance(comment, str) else None,
        created_by_user_id=_as_text(data.get("createdByUserId")),
        created_at=_as_datetime(data.get("createdAt")),
    )


def parse_reviews(documents: list[tuple[str, dict[str, Any] | None]]) -> list[Review]:
    """Parse (doc_id, data) pairs, skipping malformed documents."""
    reviews = []
    for doc_id, data in documents:
        review = parse_review(doc_id, data)
        if review is not None:
            reviews.append(review)
    return reviews


def review_to_document(review: Review) -> dict[str, Any]:
    """Inverse of parse_review, used for exports."""
    return {
        "subId": review.sub_id,
        "subUserId": review.sub_user_id,
        "subName": review.sub_name,
        "schoolId": review.school_id,
        "schoolName": review.school_name,
        "schoolCity": review.school_city,
        "type": ReviewType(review.type).value,
        "category": review.category,
        "valueScore": review.value_score,
        "comment": review.comment,
        "createdByUserId": review.created_by_user_id,
        "createdAt": review.created_at.isoformat(),
    }
