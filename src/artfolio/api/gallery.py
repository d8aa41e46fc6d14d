import logging
import uuid

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import JSONResponse

from artfolio.api.uploads import incoming_file
from artfolio.auth_utils import get_current_user
from artfolio.dependencies import get_email_client, get_gallery_repository, get_s3_client, get_user_repository
from artfolio.email_service import EmailClient
from artfolio.logger import route_logger
from artfolio.models.user import User
from artfolio.repositories.gallery_repository import GalleryRepository, SlugAllocationError
from artfolio.repositories.user_repository import UserRepository
from artfolio.s3_service import AsyncS3Client
from artfolio.schemas.gallery import (
    GalleryCreateRequest,
    GalleryDetailResponse,
    GalleryItemCreateRequest,
    GalleryItemResponse,
    GalleryResponse,
    GalleryUpdateRequest,
    GalleryUploadResponse,
    ReorderRequest,
    ReorderResponse,
)
from artfolio.slugs import slugify
from artfolio.tags import encode_tags, parse_tags
from artfolio.uploads import GalleryUploadService, UploadError, UploadForm

router = APIRouter(prefix="/api/galleries", tags=["galleries"])
logger = logging.getLogger(__name__)


def parse_is_public(raw: str | None) -> bool:
    """Only the literal ``false`` (any case) makes an upload private."""
    return (raw or "").strip().lower() != "false"


async def discard_objects(s3_client: AsyncS3Client, keys: list[str]) -> None:
    """Best-effort removal of stored objects after their rows are gone."""
    if not keys:
        return
    try:
        deleted = await s3_client.delete_files(keys)
        logger.info(f"Removed {deleted} stored objects")
    except Exception as e:
        logger.warning(f"Failed to remove {len(keys)} stored objects: {e}")


def get_owned_gallery(gallery_id: uuid.UUID, repo: GalleryRepository, current_user: User):
    gallery = repo.get_gallery_by_id_and_owner(gallery_id, current_user.id)
    if not gallery:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Gallery not found")
    return gallery


@router.post("/upload", status_code=status.HTTP_201_CREATED, response_model=GalleryUploadResponse)
async def upload_to_gallery(
    file: UploadFile | str | None = File(None),
    title: str | None = Form(None),
    description: str | None = Form(None),
    alt_text: str | None = Form(None, alias="altText"),
    is_public: str | None = Form(None, alias="isPublic"),
    tags: str | None = Form(None),
    gallery_name: str | None = Form(None, alias="galleryName"),
    gallery_slug: str | None = Form(None, alias="gallerySlug"),
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
    s3_client: AsyncS3Client = Depends(get_s3_client),
    email_client: EmailClient = Depends(get_email_client),
):
    """Upload one image into a gallery, creating the gallery on first use."""
    log = route_logger(GalleryUploadService.ROUTE)

    incoming = await incoming_file(file)

    form = UploadForm(
        title=title,
        description=description,
        alt_text=alt_text,
        is_public=parse_is_public(is_public),
        tags=parse_tags(tags),
        gallery_name=(gallery_name or "").strip() or None,
        gallery_slug=gallery_slug,
    )

    service = GalleryUploadService(repo, s3_client, email_client, log=log)
    try:
        outcome = await service.upload(current_user, incoming, form)
    except UploadError as e:
        log.warning_event("upload_rejected", status=e.status_code, error=e.message, side_effects=[effect.name for effect in e.side_effects])
        return JSONResponse(status_code=e.status_code, content={"error": e.message, "requestId": log.request_id})

    for effect in outcome.side_effects:
        if not effect.ok:
            log.warning_event("side_effect_failed", name=effect.name, detail=effect.detail)

    body = GalleryUploadResponse(
        gallery=GalleryResponse.model_validate(outcome.gallery),
        item=GalleryItemResponse.model_validate(outcome.item),
        request_id=log.request_id,
        gallery_created=outcome.gallery_created,
    )
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=body.model_dump(mode="json", by_alias=True))


@router.get("", response_model=list[GalleryResponse])
def list_galleries(
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
):
    return repo.get_galleries_by_owner(current_user.id)


@router.post("", response_model=GalleryResponse, status_code=status.HTTP_201_CREATED)
def create_gallery(
    request: GalleryCreateRequest,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
):
    try:
        gallery = repo.create_gallery(current_user.id, slugify(request.name), request.name, description=request.description, is_public=request.is_public)
    except SlugAllocationError as err:
        logger.warning(f"Slug allocation failed for owner {current_user.id}: {err}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Could not allocate a unique slug") from err
    logger.info(f"Gallery {gallery.id} created with slug {gallery.slug}")
    return gallery


@router.get("/{gallery_id}", response_model=GalleryDetailResponse)
def get_gallery_detail(
    gallery_id: uuid.UUID,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
):
    gallery = get_owned_gallery(gallery_id, repo, current_user)
    detail = GalleryDetailResponse.model_validate(gallery)
    detail.items = [GalleryItemResponse.model_validate(item) for item in repo.get_items_by_gallery_id(gallery.id)]
    return detail


@router.patch("/{gallery_id}", response_model=GalleryResponse)
def update_gallery(
    gallery_id: uuid.UUID,
    request: GalleryUpdateRequest,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
):
    gallery = get_owned_gallery(gallery_id, repo, current_user)

    fields = request.model_dump(exclude_unset=True)
    if "name" in fields:
        fields["name"] = fields["name"].strip()
    if fields.get("featured_item_id") is not None and not repo.get_item_by_id_and_gallery(fields["featured_item_id"], gallery.id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Featured item must belong to this gallery")

    return repo.update_gallery(gallery, **fields)


@router.delete("/{gallery_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_gallery(
    gallery_id: uuid.UUID,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
    s3_client: AsyncS3Client = Depends(get_s3_client),
) -> None:
    gallery = get_owned_gallery(gallery_id, repo, current_user)
    keys = repo.delete_gallery(gallery)
    logger.info(f"Gallery {gallery_id} deleted by {current_user.id}")
    await discard_objects(s3_client, keys)


@router.get("/{gallery_id}/items", response_model=list[GalleryItemResponse])
def list_gallery_items(
    gallery_id: uuid.UUID,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
):
    gallery = get_owned_gallery(gallery_id, repo, current_user)
    return repo.get_items_by_gallery_id(gallery.id)


@router.post("/{gallery_id}/items", response_model=GalleryItemResponse, status_code=status.HTTP_201_CREATED)
def create_gallery_item(
    gallery_id: uuid.UUID,
    request: GalleryItemCreateRequest,
    repo: GalleryRepository = Depends(get_gallery_repository),
    users: UserRepository = Depends(get_user_repository),
    current_user: User = Depends(get_current_user),
):
    """Add an item that points at an already hosted image."""
    gallery = get_owned_gallery(gallery_id, repo, current_user)

    if request.artist_portfolio_slug and not users.get_user_by_slug(request.artist_portfolio_slug):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Attributed artist not found")

    return repo.create_item(
        gallery.id,
        request.title,
        request.image_url,
        description=request.description,
        alt_text=request.alt_text,
        tags=encode_tags(parse_tags(request.tags)),
        position=request.position,
        artist_name=request.artist_name,
        artist_portfolio_slug=request.artist_portfolio_slug,
        artist_external_url=request.artist_external_url,
        is_original_work=request.is_original_work,
    )


@router.patch("/{gallery_id}/items/reorder", response_model=ReorderResponse)
def reorder_gallery_items(
    gallery_id: uuid.UUID,
    request: ReorderRequest,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
):
    gallery = get_owned_gallery(gallery_id, repo, current_user)
    if not request.order:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order must be a non-empty list of item ids")
    updated = repo.reorder_items(gallery.id, request.order)
    return ReorderResponse(ok=True, updated=updated)
