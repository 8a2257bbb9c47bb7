"""Pipeline orchestration for subrank."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from subrank.core.config import SubRankConfig
from subrank.models import Leaderboards, Review
from subrank.ranking import rank, reviews_for
from subrank.services.fetch import ReviewFetcher, ReviewScope
from subrank.services.storage import ReportStore, ReviewStore, create_store

logger = structlog.get_logger()


@dataclass
class ScopeRanking:
    """Result of one ranking pass over a scope.

    Attributes:
        leaderboards: Overall and per-city Top-N lists.
        reviews: Every fetched review, in merge order, for drill-down.
        failed_school_ids: Schools whose fetch failed; their reviews are missing.
    """

    leaderboards: Leaderboards
    reviews: list[Review] = field(default_factory=list)
    failed_school_ids: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_school_ids)

    def reviews_for(self, sub_id: str) -> list[Review]:
        """All reviews of one substitute, in fetch order."""
        return reviews_for(sub_id, self.reviews)


class RankingPipeline:
    """Fetch reviews for a scope, rank them, and optionally export reports."""

    def __init__(self, config: SubRankConfig, store: ReviewStore) -> None:
        """Initialize the pipeline.

        Args:
            config: subrank configuration.
            store: Review store to read from.
        """
        self.config = config
        self.store = store
        self.fetcher = ReviewFetcher(
            store,
            timeout_seconds=config.fetch.timeout_seconds,
            max_concurrency=config.fetch.max_concurrency,
        )

    async def run(self, scope: ReviewScope, limit: int | None = None) -> ScopeRanking:
        """Run one full ranking pass.

        Args:
            scope: Schools to include.
            limit: Leaderboard size override (defaults to ``ranking.limit``).

        Returns:
            ScopeRanking with leaderboards and fetched reviews.

        Raises:
            InvalidScopeError: If the scope has no usable school IDs.
            ValueError: If limit is not positive.
        """
        fetched = await self.fetcher.fetch(scope)
        leaderboards = rank(
            fetched.reviews, limit if limit is not None else self.config.ranking.limit
        )

        if fetched.is_partial:
            logger.warning("ranking_partial", failed_schools=fetched.failed_school_ids)
        logger.info(
            "ranking_complete",
            substitutes=len(leaderboards.overall),
            cities=len(leaderboards.by_city),
        )
        return ScopeRanking(
            leaderboards=leaderboards,
            reviews=fetched.reviews,
            failed_school_ids=fetched.failed_school_ids,
        )

    async def export(self, result: ScopeRanking, output_dir: str | Path | None = None) -> Path:
        """Write leaderboards and fetched reviews under ``output_dir``.

        Returns:
            Directory the reports were written to.
        """
        report_store = ReportStore(output_dir or self.config.output_dir)
        await report_store.save_leaderboards(result.leaderboards)
        await report_store.save_reviews(result.reviews)
        logger.info("reports_saved", path=str(report_store.base_dir))
        return report_store.base_dir


async def run_ranking(
    config: SubRankConfig,
    scope: ReviewScope,
    store: ReviewStore | None = None,
    limit: int | None = None,
) -> ScopeRanking:
    """Convenience function to run a ranking pass.

    Args:
        config: subrank configuration.
        scope: Schools to include.
        store: Review store. Built from ``config.store`` when omitted and
            closed afterwards.
        limit: Optional leaderboard size override.

    Returns:
        ScopeRanking for the scope.
    """
    if limit is not None and limit <= 0:
        msg = "limit must be greater than 0"
        raise ValueError(msg)

    owns_store = store is None
    store = store or create_store(config.store)
    try:
        return await RankingPipeline(config, store).run(scope, limit)
    finally:
        if owns_store:
            await store.close()
