"""Message Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - MessageCreate.body: 1-50000 chars, stripped, non-empty
    - Exactly one of expiration_minutes / expiration (custom "1d 5h 30m") may be set
    - ViewerRequest.email is untrusted: normalization happens in core, not here
    - Responses never include allow-lists (who may read is not public)

Design Decisions:
    - Shape checks here, domain rules (duration grammar, recipient formats) in
      core/validate_message.py so the service can be driven without HTTP
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator


class AttachmentIn(BaseModel):
    """Metadata of an attachment already uploaded to the object store."""
    url: str = Field(min_length=1, max_length=2048)
    name: str = Field(min_length=1, max_length=255)
    size: int = Field(ge=0)
    type: str = Field("", max_length=255)


class MessageCreate(BaseModel):
    """Message creation — owner-supplied content and lifecycle settings."""
    body: str = Field(min_length=1, max_length=50_000)
    view_limit: int | None = Field(None, ge=1, le=1000)
    expiration_minutes: int | None = Field(None, ge=1)
    expiration: str | None = Field(None, max_length=32)
    self_destruct: bool = False
    self_destruct_timer_seconds: int | None = Field(None, ge=1)
    allowed_recipients: list[str] = Field(default_factory=list, max_length=100)
    allowed_domains: list[str] = Field(default_factory=list, max_length=100)
    attachments: list[AttachmentIn] = Field(default_factory=list, max_length=20)

    @field_validator("body")
    @classmethod
    def strip_body(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("body cannot be empty or whitespace")
        return v

    @model_validator(mode="after")
    def validate_expiration_fields(self):
        if self.expiration_minutes is not None and self.expiration:
            raise ValueError("set either expiration_minutes or expiration, not both")
        return self


class MessageCreated(BaseModel):
    id: UUID
    link: str


class ViewerRequest(BaseModel):
    """Viewer identity for restricted messages."""
    email: str | None = Field(None, max_length=320)


class AvailabilityResponse(BaseModel):
    """Pre-reveal summary — no content."""
    id: UUID
    available: bool
    view_count: int
    view_limit: int
    self_destruct: bool
    self_destruct_timer_seconds: int | None
    requires_email: bool
    expires_at: datetime
    self_destruct_deadline: datetime | None


class AccessResponse(BaseModel):
    decision: str


class AttachmentOut(BaseModel):
    url: str
    name: str
    size: int
    type: str


class CountdownOut(BaseModel):
    days: int
    hours: int
    minutes: int
    seconds: int


class RevealResponse(BaseModel):
    content: str
    attachments: list[AttachmentOut]
    view_count: int
    view_limit: int
    destroyed: bool
    expiry_deadline: datetime | None = None
    countdown: CountdownOut | None = None


class SelfDestructResponse(BaseModel):
    destroyed: bool
    deadline: datetime | None = None
