import uuid
from datetime import datetime

from artfolio.schemas.base import ApiModel


class UserCounts(ApiModel):
    total: int
    artists: int
    admins: int
    superadmins: int


class InvitationCounts(ApiModel):
    total: int
    pending: int
    expired: int
    active: int
    accepted: int
    cancelled: int


class ContentCounts(ApiModel):
    galleries: int
    items: int


class RecentInvitation(ApiModel):
    id: uuid.UUID
    email: str
    invited_by: str
    created_at: datetime
    expires_at: datetime
    is_expired: bool


class AdminStatsResponse(ApiModel):
    users: UserCounts
    invitations: InvitationCounts
    content: ContentCounts
    recent_activity: list[RecentInvitation]


class AnalyticsTotals(ApiModel):
    galleries: int
    public_galleries: int
    artworks: int
    views: int
    artworks_in_range: int


class TopGallery(ApiModel):
    id: uuid.UUID
    name: str
    slug: str
    views: int
    artworks: int


class RecentArtwork(ApiModel):
    id: uuid.UUID
    title: str
    image_url: str
    gallery_name: str
    created_at: datetime


class AnalyticsResponse(ApiModel):
    range: str
    since: datetime
    totals: AnalyticsTotals
    top_galleries: list[TopGallery]
    recent_artworks: list[RecentArtwork]
