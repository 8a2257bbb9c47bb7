"""Review store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from subrank.models import Review


class ReviewStore(ABC):
    """Abstract base class for read-only async review stores."""

    @abstractmethod
    async def fetch_reviews(self, school_id: str) -> list[Review]:
        """Fetch every review submitted by one school.

        Args:
            school_id: Exact school identifier to filter on.

        Returns:
            Parsed reviews, in no guaranteed order.

        Raises:
            ReviewStoreError: If the backend cannot answer.
        """

    async def close(self) -> None:  # noqa: B027
        """Close any resources. Override if needed."""
