from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, constr

from vrtravel.domain.booking_state_machine import BookingStatus
from vrtravel.domain.quote_state_machine import QuoteStatus


# ---------------------------------------------------------------------------
# Users & admin allow-list
# ---------------------------------------------------------------------------


class UserOut(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    photo_url: Optional[str] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileUpdateIn(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1)] = None
    photo_url: Optional[str] = None


class AdminGrantIn(BaseModel):
    email: constr(strip_whitespace=True, min_length=3)


class AdminEntryOut(BaseModel):
    email: str
    protected: bool = False
    granted_by: Optional[str] = None
    created_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# Destinations & reviews
# ---------------------------------------------------------------------------


class ItineraryDay(BaseModel):
    day: int = Field(..., ge=1)
    title: str
    description: str


class DestinationIn(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    location: str
    description: str = ""
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    panorama_url: Optional[str] = None
    price: float = Field(0.0, ge=0)
    rating: float = Field(0.0, ge=0, le=5)
    duration: Optional[str] = None
    accommodation: Optional[str] = None
    itinerary: List[ItineraryDay] = Field(default_factory=list)
    inclusions: List[str] = Field(default_factory=list)


class DestinationPatch(BaseModel):
    name: Optional[constr(strip_whitespace=True, min_length=1)] = None
    location: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    panorama_url: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    rating: Optional[float] = Field(None, ge=0, le=5)
    duration: Optional[str] = None
    accommodation: Optional[str] = None
    itinerary: Optional[List[ItineraryDay]] = None
    inclusions: Optional[List[str]] = None


class DestinationOut(DestinationIn):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


ExperienceType = Literal["vr", "real_life"]


class ReviewIn(BaseModel):
    rating: int
    comment: str
    experience_type: ExperienceType = "vr"


class ReviewOut(BaseModel):
    id: str
    user_id: str
    destination_id: str
    rating: int
    comment: str
    experience_type: ExperienceType
    created_at: datetime


class ReviewSummaryOut(BaseModel):
    destination_id: str
    count: int
    average_rating: Optional[float] = None
    items: List[ReviewOut]


# ---------------------------------------------------------------------------
# Packages & groups
# ---------------------------------------------------------------------------


class PackageGroupIn(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)


class PackageGroupOut(BaseModel):
    id: str
    user_id: str
    name: str
    created_at: datetime


class PackageAddIn(BaseModel):
    destination_id: constr(strip_whitespace=True, min_length=1)
    package_group_id: Optional[str] = None
    package_name: Optional[str] = None


class PackageMembershipOut(BaseModel):
    id: str
    user_id: str
    destination_id: str
    package_group_id: Optional[str] = None
    package_name: str
    created_at: datetime


class PackageAddOut(BaseModel):
    membership: PackageMembershipOut
    created: bool
    message: str


# ---------------------------------------------------------------------------
# VR bookings
# ---------------------------------------------------------------------------


class BookingIn(BaseModel):
    date: str
    time: str
    address: str
    additional_notes: Optional[str] = None


class BookingOut(BaseModel):
    id: str
    user_id: str
    date: str
    time: str
    address: str
    additional_notes: Optional[str] = None
    status: BookingStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


class BookingStatusIn(BaseModel):
    status: str


class ActiveBookingOut(BaseModel):
    has_active_booking: bool


# ---------------------------------------------------------------------------
# Quote requests
# ---------------------------------------------------------------------------


class QuoteOut(BaseModel):
    id: str
    user_id: str
    package_ids: List[str]
    status: QuoteStatus
    created_at: datetime
    updated_at: Optional[datetime] = None


class QuoteStatusIn(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Admin views
# ---------------------------------------------------------------------------


class AdminStatsOut(BaseModel):
    total_bookings: int
    active_bookings: int
    total_quotes: int
    pending_quotes: int
    total_users: int
    total_packages: int


class AuditLogOut(BaseModel):
    id: str
    actor: dict[str, Any]
    action: str
    target_type: str
    target_id: str
    diff: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class MessageOut(BaseModel):
    message: str
