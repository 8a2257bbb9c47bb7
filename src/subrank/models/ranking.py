"""Derived leaderboard models. Recomputed on every ranking pass, never stored."""

from pydantic import BaseModel, ConfigDict, Field


class RankingItem(BaseModel):
    """Aggregate scores for one substitute."""

    model_config = ConfigDict(frozen=True)

    sub_id: str
    sub_user_id: str
    sub_name: str
    city: str
    overall_value: float
    category_breakdown: dict[str, float] = Field(default_factory=dict)
    complaint_count: int = 0
    compliment_count: int = 0
    review_count: int = 0


class Leaderboards(BaseModel):
    """Overall and per-city Top-N rankings built from the same items."""

    overall: list[RankingItem] = Field(default_factory=list)
    by_city: dict[str, list[RankingItem]] = Field(default_factory=dict)

    @property
    def cities(self) -> list[str]:
        """City names in display order (alphabetical)."""
        return sorted(self.by_city)

    @property
    def is_empty(self) -> bool:
        return not self.overall
