"""Review records submitted by schools about substitutes."""

import uuid
from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import Column
from sqlalchemy import Enum as SAEnum
from sqlmodel import Field, SQLModel


class ReviewType(str, Enum):
    """Whether a review praises or reports a problem with a substitute."""

    COMPLAINT = "complaint"
    COMPLIMENT = "compliment"


class ReviewCategory(str, Enum):
    """Known review categories, keyed by their stored raw value."""

    ATTENDANCE = "attendance"
    HELPFULNESS = "helpfulness"
    PUNCTUALITY = "punctuality"
    CLASSROOM_MANAGEMENT = "classroom_management"
    COMMUNICATION = "communication"
    FLEXIBILITY = "flexibility"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self.value]


CATEGORY_LABELS: dict[str, str] = {
    "attendance": "Attendance",
    "helpfulness": "Helpfulness",
    "punctuality": "Punctuality",
    "classroom_management": "Classroom Management",
    "communication": "Communication",
    "flexibility": "Flexibility",
    "other": "Other",
}


def category_label(key: str) -> str:
    """Display label for a category key, or the key itself when unregistered."""
    return CATEGORY_LABELS.get(key, key)


class Review(SQLModel, table=True):
    """One school's evaluation of a substitute.

    ``category`` holds the raw key so unknown categories survive aggregation.
    """

    __tablename__ = "sub_reviews"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    sub_id: str = Field(index=True)
    sub_user_id: str = ""
    sub_name: str = ""
    school_id: str = Field(index=True)
    school_name: str = ""
    school_city: str = ""
    type: ReviewType = Field(
        default=ReviewType.COMPLIMENT,
        sa_column=Column(
            SAEnum(ReviewType, native_enum=False, values_callable=lambda e: [m.value for m in e])
        ),
    )
    category: str = ReviewCategory.OTHER.value
    value_score: float
    comment: str | None = None
    created_by_user_id: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def city(self) -> str:
        """City bucket: the school's city, or its name when the city is blank."""
        return self.school_city or self.school_name

    @property
    def is_complaint(self) -> bool:
        return self.type == ReviewType.COMPLAINT
