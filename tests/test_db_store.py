"""Tests for the DuckDB review store."""

from subrank.models import ReviewType
from subrank.services.storage import DBReviewStore


class TestDBReviewStore:
    """Tests for import and per-school reads."""

    async def test_add_and_fetch_by_school(self, tmp_path, review_factory):
        """Only the requested school's reviews are returned."""
        store = DBReviewStore(tmp_path / "reviews.duckdb")
        await store.add_reviews(
            [
                review_factory("S1", 8, school_id="A", review_id="r1"),
                review_factory("S2", 4, school_id="B", review_id="r2"),
                review_factory("S3", 6, school_id="A", review_id="r3"),
            ]
        )

        reviews = await store.fetch_reviews("A")
        await store.close()

        assert sorted(r.id for r in reviews) == ["r1", "r3"]

    async def test_fields_round_trip(self, tmp_path, review_factory):
        """Enum type and aware timestamps survive storage."""
        original = review_factory(
            "S1",
            2.5,
            review_type=ReviewType.COMPLAINT,
            category="attendance",
            comment="No show",
            review_id="r1",
        )
        store = DBReviewStore(tmp_path / "reviews.duckdb")
        await store.add_reviews([original])

        (review,) = await store.fetch_reviews("schoolA")
        await store.close()

        assert review.type == ReviewType.COMPLAINT
        assert review.category == "attendance"
        assert review.value_score == 2.5
        assert review.comment == "No show"
        assert review.created_at == original.created_at
        assert review.created_at.tzinfo is not None

    async def test_reimport_replaces_by_id(self, tmp_path, review_factory):
        """Importing the same ID again updates rather than duplicates."""
        store = DBReviewStore(tmp_path / "reviews.duckdb")
        await store.add_reviews([review_factory("S1", 3, review_id="r1")])
        await store.add_reviews([review_factory("S1", 9, review_id="r1")])

        reviews = await store.fetch_reviews("schoolA")
        total = await store.count()
        await store.close()

        assert total == 1
        assert reviews[0].value_score == 9.0

    async def test_unknown_school_empty(self, tmp_path):
        """A school without reviews yields an empty list."""
        store = DBReviewStore(tmp_path / "nested" / "reviews.duckdb")
        assert await store.fetch_reviews("nowhere") == []
        assert await store.count() == 0
        await store.close()

    async def test_caller_objects_left_untouched(self, tmp_path, review_factory):
        """Imported records keep their aware timestamps."""
        review = review_factory("S1", review_id="r1")
        store = DBReviewStore(tmp_path / "reviews.duckdb")
        await store.add_reviews([review])
        await store.close()

        assert review.created_at.tzinfo is not None
