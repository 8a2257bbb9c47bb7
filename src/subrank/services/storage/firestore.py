"""Firestore REST review store with retries."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import httpx
import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from subrank.core.errors import ReviewStoreError
from subrank.models import Review

from .base import ReviewStore
from .documents import parse_reviews

logger = structlog.get_logger()


def decode_value(value: dict[str, Any]) -> Any:
    """Decode one Firestore REST typed value (``{"stringValue": "x"}`` etc.)."""
    if "stringValue" in value:
        return value["stringValue"]
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "integerValue" in value:
        # int64 values arrive as JSON strings
        return int(value["integerValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "timestampValue" in value:
        return datetime.fromisoformat(value["timestampValue"].replace("Z", "+00:00"))
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    return None


def decode_fields(fields: dict[str, dict[str, Any]]) -> dict[str, Any]:
    """Decode a Firestore document ``fields`` map into plain Python values."""
    return {key: decode_value(value) for key, value in fields.items()}


class FirestoreReviewStore(ReviewStore):
    """Query the review collection through the Firestore REST API."""

    BASE_URL = "https://firestore.googleapis.com/v1"

    def __init__(
        self,
        project_id: str,
        token: str,
        collection: str = "subReviews",
        database: str = "(default)",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Firestore store.

        Args:
            project_id: Google Cloud project ID.
            token: OAuth bearer token with Firestore read access.
            collection: Collection holding review documents.
            database: Firestore database ID.
            client: Optional preconfigured HTTP client (tests inject a mock transport).
        """
        self.project_id = project_id
        self.token = token
        self.collection = collection
        self.database = database
        self.client = client or httpx.AsyncClient(timeout=30.0)

    @property
    def query_url(self) -> str:
        return (
            f"{self.BASE_URL}/projects/{self.project_id}"
            f"/databases/{self.database}/documents:runQuery"
        )

    def _query_body(self, school_id: str) -> dict[str, Any]:
        return {
            "structuredQuery": {
                "from": [{"collectionId": self.collection}],
                "where": {
                    "fieldFilter": {
                        "field": {"fieldPath": "schoolId"},
                        "op": "EQUAL",
                        "value": {"stringValue": school_id},
                    }
                },
            }
        }

    async def fetch_reviews(self, school_id: str) -> list[Review]:
        try:
            rows = await self._run_query(school_id)
        except (httpx.HTTPError, ValueError) as e:
            raise ReviewStoreError(school_id, str(e)) from e

        documents = []
        for row in rows:
            doc = row.get("document")
            if not doc:
                # runQuery emits a bare readTime row when nothing matches
                continue
            doc_id = doc.get("name", "").rsplit("/", 1)[-1]
            try:
                fields = decode_fields(doc.get("fields", {}))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning("dropped_malformed_review", doc_id=doc_id, reason=str(e))
                continue
            documents.append((doc_id, fields))

        reviews = parse_reviews(documents)
        logger.debug(
            "firestore_fetch",
            school_id=school_id,
            documents=len(documents),
            reviews=len(reviews),
        )
        return reviews

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type(httpx.HTTPStatusError),
        reraise=True,
    )
    async def _run_query(self, school_id: str) -> list[dict[str, Any]]:
        """POST a runQuery request with retries.

        Raises:
            httpx.HTTPStatusError: On API error after retries.
        """
        logger.info("firestore_query", school_id=school_id, collection=self.collection)

        response = await self.client.post(
            self.query_url,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
            },
            json=self._query_body(school_id),
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, list):
            msg = "unexpected runQuery response shape"
            raise ValueError(msg)
        return data

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()
