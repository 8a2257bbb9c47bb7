"""Leaderboard export to markdown, CSV, JSON, and JSONL files."""

from __future__ import annotations

import asyncio
import csv
import json
from collections.abc import Sequence
from pathlib import Path

import structlog

from subrank.core.slug import city_slug
from subrank.models import Leaderboards, RankingItem, Review
from subrank.services.reporting import format_leaderboard

from .documents import review_to_document

logger = structlog.get_logger()

CSV_HEADERS = [
    "rank",
    "sub_id",
    "sub_user_id",
    "sub_name",
    "city",
    "overall_value",
    "review_count",
    "compliment_count",
    "complaint_count",
    "category_breakdown",
]


class ReportStore:
    """Write ranking artifacts under an output directory."""

    def __init__(self, base_dir: str | Path) -> None:
        self.base_dir = Path(base_dir)

    def _path(self, filename: str) -> Path:
        path = self.base_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def _write_csv(path: Path, items: Sequence[RankingItem]) -> None:
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADERS)
            for i, item in enumerate(items, 1):
                writer.writerow(
                    [
                        i,
                        item.sub_id,
                        item.sub_user_id,
                        item.sub_name,
                        item.city,
                        f"{item.overall_value:.2f}",
                        item.review_count,
                        item.compliment_count,
                        item.complaint_count,
                        json.dumps(item.category_breakdown, sort_keys=True),
                    ]
                )

    async def save_leaderboards(self, leaderboards: Leaderboards) -> list[Path]:
        """Save overall and per-city leaderboards.

        Writes ``overall.{md,csv,json}``, ``by_city.{md,json}``, and one
        ``cities/<slug>.csv`` per city.

        Returns:
            Paths written.
        """

        def _save() -> list[Path]:
            written = []

            md_path = self._path("overall.md")
            md_path.write_text(
                format_leaderboard(
                    leaderboards.overall,
                    "Top Substitutes Overall",
                    include_breakdown=True,
                ),
                encoding="utf-8",
            )
            csv_path = self._path("overall.csv")
            self._write_csv(csv_path, leaderboards.overall)
            json_path = self._path("overall.json")
            with json_path.open("w", encoding="utf-8") as f:
                json.dump([item.model_dump() for item in leaderboards.overall], f, indent=2)
            written += [md_path, csv_path, json_path]

            sections = [
                format_leaderboard(leaderboards.by_city[city], f"Top Substitutes: {city}")
                for city in leaderboards.cities
            ]
            city_md = self._path("by_city.md")
            city_md.write_text("\n\n".join(sections) or "No reviews yet.", encoding="utf-8")
            city_json = self._path("by_city.json")
            with city_json.open("w", encoding="utf-8") as f:
                json.dump(
                    {
                        city: [item.model_dump() for item in leaderboards.by_city[city]]
                        for city in leaderboards.cities
                    },
                    f,
                    indent=2,
                )
            written += [city_md, city_json]

            for city in leaderboards.cities:
                path = self._path(f"cities/{city_slug(city)}.csv")
                self._write_csv(path, leaderboards.by_city[city])
                written.append(path)

            logger.debug("saved_leaderboards", path=str(self.base_dir), files=len(written))
            return written

        return await asyncio.to_thread(_save)

    async def save_reviews(self, reviews: Sequence[Review]) -> Path:
        """Save fetched reviews as JSONL documents (re-importable)."""

        def _save() -> Path:
            path = self._path("reviews.jsonl")
            with path.open("w", encoding="utf-8") as f:
                for review in reviews:
                    doc = {"id": review.id, **review_to_document(review)}
                    f.write(json.dumps(doc) + "\n")
            return path

        return await asyncio.to_thread(_save)
