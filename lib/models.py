"""Influencer data model and request payloads"""
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

DEFAULT_COMMISSION_RATE = 30.0

INFLUENCER_COLUMNS = (
    "id",
    "name",
    "email",
    "phone",
    "bio",
    "affiliate_code",
    "commission_rate",
    "total_earnings",
    "remaining_balance",
    "total_clicks",
    "total_signups",
    "total_purchases",
    "conversion_rate",
    "status",
    "is_india",
    "created_at",
    "updated_at",
)


class InfluencerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class Influencer(BaseModel):
    """Row of the influencers table as returned to clients"""
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: UUID | str
    name: str
    email: str
    phone: Optional[str] = None
    bio: Optional[str] = None
    affiliate_code: str
    commission_rate: float = DEFAULT_COMMISSION_RATE
    total_earnings: float = 0.0
    remaining_balance: float = 0.0
    total_clicks: int = 0
    total_signups: int = 0
    total_purchases: int = 0
    conversion_rate: float = 0.0
    # Plain str so rows with unexpected values still serialize
    status: Optional[str] = None
    is_india: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InfluencerCreate(BaseModel):
    """POST /api/influencers body. Presence of required fields is checked by the route."""
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    affiliate_code: Optional[str] = None
    commission_rate: Optional[float] = None
    is_india: Optional[bool] = None

    @property
    def has_required_fields(self) -> bool:
        # Whitespace-only counts as missing; stored values are kept as sent
        return all(
            (value or "").strip() for value in (self.name, self.email, self.affiliate_code)
        )

    def to_insert_values(self) -> dict[str, Any]:
        """Column values for the insert, with storage defaults applied"""
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "bio": self.bio,
            "affiliate_code": self.affiliate_code,
            "commission_rate": (
                self.commission_rate
                if self.commission_rate is not None
                else DEFAULT_COMMISSION_RATE
            ),
            "is_india": bool(self.is_india) if self.is_india is not None else False,
        }


def serialize_influencer(row: dict[str, Any]) -> dict[str, Any]:
    """asyncpg row (Decimal/UUID/datetime) -> JSON-safe dict"""
    return Influencer.model_validate(row).model_dump(mode="json")
