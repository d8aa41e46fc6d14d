import uuid
from datetime import datetime

from artfolio.schemas.base import ApiModel
from artfolio.schemas.gallery import GalleryItemResponse


class ArtistSummary(ApiModel):
    id: uuid.UUID
    display_name: str | None = None
    slug: str | None = None
    profile_image_url: str | None = None


class PublicGalleryResponse(ApiModel):
    id: uuid.UUID
    name: str
    slug: str
    description: str | None = None
    created_at: datetime
    artist: ArtistSummary


class PublicGalleryDetailResponse(ApiModel):
    gallery: PublicGalleryResponse
    items: list[GalleryItemResponse]
