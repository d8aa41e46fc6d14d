import uuid
from datetime import datetime

from pydantic import Field, field_validator, model_validator

from artfolio.schemas.base import ApiModel
from artfolio.tags import decode_tags


class GalleryCreateRequest(ApiModel):
    name: str = Field(..., max_length=200, description="Display name; the slug is derived from it")
    description: str | None = None
    is_public: bool = True

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class GalleryUpdateRequest(ApiModel):
    name: str | None = Field(None, max_length=200)
    description: str | None = None
    is_public: bool | None = None
    featured_item_id: uuid.UUID | None = None

    @model_validator(mode="after")
    def validate_payload(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        if "name" in self.model_fields_set and not (self.name or "").strip():
            raise ValueError("Name cannot be empty")
        if "is_public" in self.model_fields_set and self.is_public is None:
            raise ValueError("isPublic cannot be null")
        return self


class GalleryResponse(ApiModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    name: str
    slug: str
    is_public: bool
    description: str | None = None
    featured_item_id: uuid.UUID | None = None
    view_count: int = 0
    created_at: datetime
    updated_at: datetime


class GalleryItemResponse(ApiModel):
    id: uuid.UUID
    gallery_id: uuid.UUID
    title: str
    image_url: str
    description: str | None = None
    alt_text: str | None = None
    tags: list[str] | None = None
    position: int | None = None
    artist_name: str | None = None
    artist_portfolio_slug: str | None = None
    artist_external_url: str | None = None
    is_original_work: bool = True
    created_at: datetime

    @field_validator("tags", mode="before")
    @classmethod
    def decode_stored_tags(cls, value):
        if isinstance(value, str):
            return decode_tags(value)
        return value


class GalleryItemCreateRequest(ApiModel):
    title: str = Field(..., max_length=300)
    image_url: str
    description: str | None = None
    alt_text: str | None = None
    tags: list[str] | str | None = None
    position: int | None = None
    artist_name: str | None = None
    artist_portfolio_slug: str | None = None
    artist_external_url: str | None = None
    is_original_work: bool = True

    @field_validator("title", "image_url")
    @classmethod
    def required_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("description", "alt_text", "artist_name", "artist_portfolio_slug", "artist_external_url")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class GalleryItemUpdateRequest(ApiModel):
    title: str | None = Field(None, max_length=300)
    image_url: str | None = None
    description: str | None = None
    alt_text: str | None = None
    tags: list[str] | str | None = None
    position: int | None = None
    artist_name: str | None = None
    artist_portfolio_slug: str | None = None
    artist_external_url: str | None = None
    is_original_work: bool | None = None

    @model_validator(mode="after")
    def validate_payload(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        for name in ("title", "image_url", "is_original_work"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ReorderRequest(ApiModel):
    order: list[uuid.UUID] = Field(default_factory=list)


class ReorderResponse(ApiModel):
    ok: bool = True
    updated: int


class GalleryUploadResponse(ApiModel):
    gallery: GalleryResponse
    item: GalleryItemResponse
    request_id: str
    gallery_created: bool


class GalleryDetailResponse(GalleryResponse):
    items: list[GalleryItemResponse] = Field(default_factory=list)
