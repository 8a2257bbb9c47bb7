"""Tests for the Firestore REST review store."""

import json
from datetime import UTC, datetime

import httpx
import pytest

from subrank.core.errors import ReviewStoreError
from subrank.models import ReviewType
from subrank.services.storage import FirestoreReviewStore, decode_fields, decode_value

DOC_PREFIX = "projects/ezteach/databases/(default)/documents/subReviews"


def _document(doc_id, **fields):
    return {
        "document": {
            "name": f"{DOC_PREFIX}/{doc_id}",
            "fields": fields,
        },
        "readTime": "2025-09-01T08:00:00Z",
    }


def _store(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirestoreReviewStore(project_id="ezteach", token="secret", client=client)


class TestDecodeValue:
    """Tests for typed value decoding."""

    def test_scalars(self):
        """Strings, doubles, integers, and booleans decode to Python values."""
        assert decode_value({"stringValue": "x"}) == "x"
        assert decode_value({"doubleValue": 4.5}) == 4.5
        assert decode_value({"integerValue": "7"}) == 7
        assert decode_value({"booleanValue": True}) is True
        assert decode_value({"nullValue": None}) is None

    def test_timestamp(self):
        """Timestamps decode to aware datetimes."""
        value = decode_value({"timestampValue": "2025-09-01T08:00:00.123Z"})
        assert value == datetime(2025, 9, 1, 8, 0, 0, 123000, tzinfo=UTC)

    def test_nested(self):
        """Maps and arrays decode recursively."""
        value = decode_value(
            {
                "mapValue": {
                    "fields": {
                        "tags": {"arrayValue": {"values": [{"stringValue": "a"}]}},
                        "n": {"integerValue": "1"},
                    }
                }
            }
        )
        assert value == {"tags": ["a"], "n": 1}

    def test_empty_array(self):
        """An empty array omits its values key."""
        assert decode_value({"arrayValue": {}}) == []

    def test_decode_fields(self):
        """Field maps decode key by key."""
        assert decode_fields({"a": {"stringValue": "b"}}) == {"a": "b"}


class TestFirestoreReviewStore:
    """Tests for runQuery requests and responses."""

    async def test_queries_by_school(self):
        """The request filters the collection on schoolId."""
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[{"readTime": "2025-09-01T08:00:00Z"}])

        store = _store(handler)
        reviews = await store.fetch_reviews("lincoln-elem")
        await store.close()

        assert reviews == []
        assert seen["url"].endswith(
            "/projects/ezteach/databases/(default)/documents:runQuery"
        )
        assert seen["auth"] == "Bearer secret"
        query = seen["body"]["structuredQuery"]
        assert query["from"] == [{"collectionId": "subReviews"}]
        assert query["where"]["fieldFilter"]["value"] == {"stringValue": "lincoln-elem"}

    async def test_documents_parsed(self):
        """Matching documents become Review records keyed by document ID."""
        rows = [
            _document(
                "rev1",
                subId={"stringValue": "S1"},
                subName={"stringValue": "Dana Ortiz"},
                schoolId={"stringValue": "lincoln-elem"},
                schoolCity={"stringValue": "Austin"},
                type={"stringValue": "complaint"},
                category={"stringValue": "communication"},
                valueScore={"integerValue": "3"},
                createdAt={"timestampValue": "2025-09-01T08:00:00Z"},
            ),
            _document("rev2", subId={"stringValue": "S2"}),
        ]
        store = _store(lambda request: httpx.Response(200, json=rows))
        reviews = await store.fetch_reviews("lincoln-elem")

        assert len(reviews) == 1
        review = reviews[0]
        assert review.id == "rev1"
        assert review.type == ReviewType.COMPLAINT
        assert review.value_score == 3.0
        assert review.school_city == "Austin"

    async def test_undecodable_document_skipped(self):
        """A bad document is dropped without failing the school."""
        rows = [
            _document(
                "bad",
                subId={"stringValue": "S1"},
                schoolId={"stringValue": "lincoln-elem"},
                valueScore={"integerValue": "not-a-number"},
            ),
            _document(
                "nan",
                subId={"stringValue": "S2"},
                schoolId={"stringValue": "lincoln-elem"},
                valueScore={"doubleValue": "NaN"},
            ),
            _document(
                "good",
                subId={"stringValue": "S3"},
                schoolId={"stringValue": "lincoln-elem"},
                valueScore={"doubleValue": 7.5},
            ),
        ]
        store = _store(lambda request: httpx.Response(200, json=rows))
        reviews = await store.fetch_reviews("lincoln-elem")

        assert [r.id for r in reviews] == ["good"]

    async def test_connection_error_wrapped(self):
        """Transport errors surface as ReviewStoreError."""

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        store = _store(handler)
        with pytest.raises(ReviewStoreError, match="lincoln-elem"):
            await store.fetch_reviews("lincoln-elem")

    async def test_unexpected_shape_wrapped(self):
        """A non-list response is a store error."""
        store = _store(lambda request: httpx.Response(200, json={"error": "nope"}))
        with pytest.raises(ReviewStoreError, match="unexpected runQuery response"):
            await store.fetch_reviews("lincoln-elem")

    def test_custom_collection_and_database(self):
        """Collection and database appear in the query."""
        store = FirestoreReviewStore(
            project_id="p", token="t", collection="reviews", database="staging"
        )
        assert store.query_url.endswith("/projects/p/databases/staging/documents:runQuery")
        body = store._query_body("s")
        assert body["structuredQuery"]["from"] == [{"collectionId": "reviews"}]
