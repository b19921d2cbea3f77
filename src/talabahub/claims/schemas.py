"""Claim Pydantic schemas: backend payloads and gateway view models."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field

from talabahub.claims.lifecycle import ClaimStatus
from talabahub.upstream.schemas import PageMetaResponse, UpstreamModel


class BrandRef(UpstreamModel):
    id: str | None = None
    name: str = ""
    logo: str | None = None


class ClaimDiscount(UpstreamModel):
    id: str
    title: str = ""
    discount: float | None = None
    discount_type: str | None = None
    discount_value: float | None = None
    image_url: str | None = None
    brand: BrandRef | None = None


class ClaimUser(UpstreamModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str | None = None


class DiscountClaim(UpstreamModel):
    """A claim as the backend returns it."""

    id: str
    claim_code: str
    status: ClaimStatus
    claimed_at: datetime
    expires_at: datetime
    used_at: datetime | None = None
    saved_amount: float | None = None
    verified_by: str | None = None
    verification_note: str | None = None
    discount: ClaimDiscount | None = None
    user: ClaimUser | None = None


class CountdownResponse(BaseModel):
    days: int
    hours: int
    minutes: int
    seconds: int
    total_seconds: int
    expired: bool
    display: str


class ClaimView(BaseModel):
    """One claim as the UI renders it."""

    id: str
    claim_code: str
    status: ClaimStatus
    status_label: str
    status_variant: str
    discount_id: str | None = None
    discount_title: str = ""
    brand_name: str = ""
    discount_percent: float | None = None
    image_url: str | None = None
    claimed_at: datetime
    expires_at: datetime
    used_at: datetime | None = None
    saved_amount: float | None = None
    countdown: CountdownResponse | None = None
    valid_until: date | None = None
    display_expired: bool = False
    qr_code_url: str | None = None
    actions: list[str] = []
    copied: bool = False


class ClaimStats(BaseModel):
    """Counts over the current page plus the backend total."""

    active: int = 0
    used: int = 0
    expired: int = 0
    total: int = 0


class FilterOption(BaseModel):
    value: str
    label: str


class ClaimListResponse(BaseModel):
    claims: list[ClaimView]
    filters: list[FilterOption] = []
    meta: PageMetaResponse
    stats: ClaimStats
    status_filter: str = "all"


class VerificationView(BaseModel):
    id: str
    claim_code: str
    status: ClaimStatus
    status_label: str
    status_variant: str
    student_name: str = ""
    student_email: str | None = None
    discount_title: str = ""
    claimed_at: datetime
    expires_at: datetime
    can_verify: bool


class VerificationStats(BaseModel):
    """``pending`` is the backend total; used and cancelled count the current page."""

    pending: int = 0
    used: int = 0
    cancelled: int = 0


class VerificationListResponse(BaseModel):
    verifications: list[VerificationView]
    meta: PageMetaResponse
    stats: VerificationStats


class VerifyClaimRequest(BaseModel):
    verified: bool
    note: str | None = Field(None, max_length=500)


class CopyCodeResponse(BaseModel):
    claim_id: str
    claim_code: str
    copied: bool = True
    ack_seconds: float
