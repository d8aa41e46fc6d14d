import uuid
from datetime import datetime

from pydantic import EmailStr, Field

from artfolio.schemas.base import ApiModel


class InvitationCreateRequest(ApiModel):
    email: EmailStr
    custom_message: str | None = Field(None, max_length=2000)


class InvitationResponse(ApiModel):
    id: uuid.UUID
    email: str
    status: str
    custom_message: str | None = None
    invited_by: str
    created_at: datetime
    expires_at: datetime
    is_expired: bool
    days_remaining: int
    invite_link: str


class InvitationSendResponse(ApiModel):
    invitation: InvitationResponse
    email_sent: bool
    email_detail: str | None = None
    copy_email_sent: bool | None = None


class InvitationListResponse(ApiModel):
    invitations: list[InvitationResponse]
    total: int


class InvitationValidationResponse(ApiModel):
    id: uuid.UUID
    email: str
    custom_message: str | None = None
    inviter_name: str
    expires_at: datetime
    status: str


class SignupCompleteRequest(ApiModel):
    token: str
    email: EmailStr
    slug: str = Field(..., max_length=64)
    display_name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., max_length=128)


class SlugCheckResponse(ApiModel):
    slug: str
    available: bool
    reason: str | None = None
