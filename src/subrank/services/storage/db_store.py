"""DuckDB review store using SQLModel."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from datetime import UTC
from pathlib import Path

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import NullPool
from sqlmodel import Session, SQLModel, col, create_engine, func, select

from subrank.core.errors import ReviewStoreError
from subrank.models import Review

from .base import ReviewStore

logger = structlog.get_logger()


class DBReviewStore(ReviewStore):
    """Local review database, filled by ``subrank import``."""

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the store and create tables if needed.

        Args:
            db_path: Path to the DuckDB database file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        # NullPool avoids holding the DuckDB file open between sessions
        self._engine = create_engine(f"duckdb:///{self.db_path}", poolclass=NullPool)
        SQLModel.metadata.create_all(self._engine, tables=[Review.__table__])

    async def add_reviews(self, reviews: Iterable[Review]) -> int:
        """Insert or replace reviews by ID.

        Returns:
            Number of reviews written.
        """
        batch = list(reviews)

        def _save() -> int:
            with Session(self._engine) as session:
                # merge() upserts by primary key and never attaches the caller's objects
                for review in batch:
                    session.merge(review)
                session.commit()
            return len(batch)

        written = await asyncio.to_thread(_save)
        logger.info("reviews_imported", count=written, path=str(self.db_path))
        return written

    async def fetch_reviews(self, school_id: str) -> list[Review]:
        def _get() -> list[Review]:
            with Session(self._engine) as session:
                statement = select(Review).where(col(Review.school_id) == school_id)
                results = list(session.exec(statement).all())
                for review in results:
                    session.expunge(review)
                    if review.created_at.tzinfo is None:
                        review.created_at = review.created_at.replace(tzinfo=UTC)
                return results

        try:
            return await asyncio.to_thread(_get)
        except SQLAlchemyError as e:
            raise ReviewStoreError(school_id, str(e)) from e

    async def count(self) -> int:
        """Total number of stored reviews."""

        def _count() -> int:
            with Session(self._engine) as session:
                return session.exec(select(func.count()).select_from(Review)).one()

        return await asyncio.to_thread(_count)

    async def close(self) -> None:
        """Dispose of the database engine."""
        self._engine.dispose()
