from .ranking import Leaderboards, RankingItem
from .review import (
    CATEGORY_LABELS,
    Review,
    ReviewCategory,
    ReviewType,
    category_label,
)

__all__ = [
    "CATEGORY_LABELS",
    "Leaderboards",
    "RankingItem",
    "Review",
    "ReviewCategory",
    "ReviewType",
    "category_label",
]
