"""
Gallery upload workflow

One request runs strictly in order:

    validate -> resolve or create gallery -> normalize (HEIC/HEIF) -> persist object -> record item

Nothing is retried; a failed request has to be resubmitted by the client.
Best-effort steps (HEIC transcoding, operator alerts) never fail the request.
Their outcome is reported as ``SideEffect`` records next to the primary result.
"""

import asyncio
import logging
import re
import time
import uuid
from dataclasses import dataclass, field, replace

from pydantic_settings import BaseSettings, SettingsConfigDict

from artfolio.email_service import EmailClient, send_upload_failure_alert
from artfolio.image_codecs import is_heic, transcode_to_jpeg
from artfolio.logger import RouteLogger
from artfolio.models.gallery import Gallery, GalleryItem
from artfolio.models.user import User
from artfolio.repositories.gallery_repository import GalleryRepository
from artfolio.repositories.user_repository import UserRepository
from artfolio.s3_service import AsyncS3Client
from artfolio.slugs import slugify
from artfolio.tags import encode_tags

logger = logging.getLogger(__name__)

MIB = 1024 * 1024


class UploadSettings(BaseSettings):
    # The gallery path and the profile/banner path have always used different
    # limits (20 MiB vs 10 MiB); they are kept separate on purpose.
    gallery_max_bytes: int = 20 * MIB
    profile_max_bytes: int = 10 * MIB
    jpeg_quality: int = 90
    default_extension: str = "png"

    model_config = SettingsConfigDict(env_prefix="UPLOAD_", env_file=".env", extra="ignore")


@dataclass
class SideEffect:
    """Outcome of a best-effort step that must not fail the request."""

    name: str
    ok: bool
    detail: str | None = None


class UploadError(Exception):
    status_code = 500

    def __init__(self, message: str, side_effects: list[SideEffect] | None = None):
        super().__init__(message)
        self.message = message
        self.side_effects = side_effects or []


class InvalidInput(UploadError):
    status_code = 400


class PayloadTooLarge(UploadError):
    status_code = 413


class StorageFailure(UploadError):
    status_code = 500


@dataclass
class IncomingFile:
    filename: str
    content_type: str
    data: bytes
    # Size the client declared; falls back to the body length
    declared_size: int | None = None

    @property
    def size(self) -> int:
        return self.declared_size if self.declared_size is not None else len(self.data)


@dataclass
class UploadForm:
    title: str | None = None
    description: str | None = None
    alt_text: str | None = None
    is_public: bool = True
    tags: list[str] | None = None
    gallery_name: str | None = None
    gallery_slug: str | None = None


@dataclass
class UploadOutcome:
    gallery: Gallery
    item: GalleryItem
    gallery_created: bool
    side_effects: list[SideEffect] = field(default_factory=list)

    def side_effect(self, name: str) -> SideEffect | None:
        return next((effect for effect in self.side_effects if effect.name == name), None)


_EXTENSION = re.compile(r"\.[^.]+$")


def validate_image(file: IncomingFile | None, max_bytes: int) -> IncomingFile:
    """Check declared metadata only: presence, ``image/*`` MIME type and size."""
    if file is None:
        raise InvalidInput("Missing file")
    if not (file.content_type or "").startswith("image/"):
        raise InvalidInput("Only image uploads are allowed")
    if file.size > max_bytes:
        raise PayloadTooLarge(f"File too large (max {max_bytes // MIB}MB)")
    return file


def gallery_slug_for(gallery_slug: str | None, gallery_name: str | None) -> str:
    """Explicit slug wins, then the gallery name, then ``gallery``."""
    if gallery_slug and gallery_slug.strip():
        return slugify(gallery_slug)
    return slugify(gallery_name)


def strip_extension(filename: str) -> str:
    return _EXTENSION.sub("", filename)


def item_title(title: str | None, filename: str) -> str:
    if title and title.strip():
        return title.strip()
    return strip_extension(filename) or "Untitled"


def file_extension(filename: str, default: str = "png") -> str:
    if "." not in filename:
        return default
    ext = re.sub(r"[^a-z0-9]", "", filename.rsplit(".", 1)[1].lower())
    return ext or default


def build_object_key(owner_id: uuid.UUID, ext: str, folder: str | None = None) -> str:
    """``users/{owner_id}/{millis}-{random}.{ext}``, optionally inside a subfolder."""
    prefix = f"users/{owner_id}/" + (f"{folder}/" if folder else "")
    return f"{prefix}{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}.{ext}"


async def normalize_format(file: IncomingFile, quality: int = 90) -> tuple[IncomingFile, SideEffect | None]:
    """Transcode HEIC/HEIF input to JPEG.

    Other formats pass through untouched. A failed transcode keeps the original
    bytes, name and content type and is reported as a failed side effect.
    """
    if not is_heic(file.content_type, file.filename):
        return file, None

    try:
        jpeg = await asyncio.to_thread(transcode_to_jpeg, file.data, quality)
    except Exception as e:
        logger.warning("HEIC/HEIF transcode failed for %s, storing original: %s", file.filename, e)
        return file, SideEffect("heic_transcode", ok=False, detail=str(e))

    converted = replace(file, filename=f"{strip_extension(file.filename)}.jpg", content_type="image/jpeg", data=jpeg, declared_size=len(jpeg))
    return converted, SideEffect("heic_transcode", ok=True)


async def _persist(
    storage: AsyncS3Client,
    email_client: EmailClient,
    file: IncomingFile,
    key: str,
    *,
    owner: User,
    route: str,
    log: RouteLogger,
    side_effects: list[SideEffect],
) -> str:
    """Write the object and return its public URL; alert the operator on failure."""
    try:
        await storage.upload_fileobj(file.data, key, content_type=file.content_type)
    except Exception as e:
        log.error_event("storage_upload_failed", key=key, error=str(e))
        alert = await send_upload_failure_alert(
            email_client,
            route=route,
            reason=str(e),
            status=StorageFailure.status_code,
            request_id=log.request_id,
            user_email=owner.email,
            user_id=str(owner.id),
            file_name=file.filename,
            mime=file.content_type,
            size=file.size,
        )
        if not alert.success:
            log.warning_event("failure_alert_not_sent", detail=alert.detail)
        side_effects.append(SideEffect("failure_alert", ok=alert.success, detail=alert.detail))
        raise StorageFailure(str(e), side_effects=side_effects) from e

    return storage.get_public_url(key)


class GalleryUploadService:
    ROUTE = "/api/galleries/upload"

    def __init__(
        self,
        repo: GalleryRepository,
        storage: AsyncS3Client,
        email_client: EmailClient,
        settings: UploadSettings | None = None,
        log: RouteLogger | None = None,
    ):
        self.repo = repo
        self.storage = storage
        self.email_client = email_client
        self.settings = settings or UploadSettings()
        self.log = log or RouteLogger(self.ROUTE)

    async def upload(self, owner: User, file: IncomingFile | None, form: UploadForm) -> UploadOutcome:
        file = validate_image(file, self.settings.gallery_max_bytes)
        self.log.info_event("upload_validated", user_id=str(owner.id), file_name=file.filename, mime=file.content_type, size=file.size)

        slug = gallery_slug_for(form.gallery_slug, form.gallery_name)
        gallery, created = self.repo.resolve_gallery(owner.id, slug, form.gallery_name, form.is_public)
        self.log.info_event("gallery_resolved", gallery_id=str(gallery.id), slug=gallery.slug, created=created)

        side_effects: list[SideEffect] = []
        file, transcode = await normalize_format(file, self.settings.jpeg_quality)
        if transcode is not None:
            side_effects.append(transcode)

        key = build_object_key(owner.id, file_extension(file.filename, self.settings.default_extension))
        image_url = await _persist(self.storage, self.email_client, file, key, owner=owner, route=self.ROUTE, log=self.log, side_effects=side_effects)

        item = self.repo.create_item(
            gallery.id,
            item_title(form.title, file.filename),
            image_url,
            object_key=key,
            description=form.description,
            alt_text=form.alt_text,
            tags=encode_tags(form.tags),
        )
        self.log.info_event("item_recorded", gallery_id=str(gallery.id), item_id=str(item.id), key=key)
        return UploadOutcome(gallery=gallery, item=item, gallery_created=created, side_effects=side_effects)


class ProfileImageService:
    ROUTE = "/api/uploads/profile"

    def __init__(
        self,
        users: UserRepository,
        storage: AsyncS3Client,
        email_client: EmailClient,
        settings: UploadSettings | None = None,
        log: RouteLogger | None = None,
    ):
        self.users = users
        self.storage = storage
        self.email_client = email_client
        self.settings = settings or UploadSettings()
        self.log = log or RouteLogger(self.ROUTE)

    async def upload(self, user: User, file: IncomingFile | None) -> tuple[str, list[SideEffect]]:
        file = validate_image(file, self.settings.profile_max_bytes)

        side_effects: list[SideEffect] = []
        file, transcode = await normalize_format(file, self.settings.jpeg_quality)
        if transcode is not None:
            side_effects.append(transcode)

        key = build_object_key(user.id, file_extension(file.filename, self.settings.default_extension), folder="profile")
        url = await _persist(self.storage, self.email_client, file, key, owner=user, route=self.ROUTE, log=self.log, side_effects=side_effects)

        self.users.update_profile(user, profile_image_url=url)
        self.log.info_event("profile_image_updated", user_id=str(user.id), key=key)
        return url, side_effects
