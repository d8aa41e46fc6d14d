import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from artfolio.dependencies import get_gallery_repository
from artfolio.repositories.gallery_repository import GalleryRepository
from artfolio.schemas.gallery import GalleryItemResponse
from artfolio.schemas.public import ArtistSummary, PublicGalleryDetailResponse, PublicGalleryResponse

router = APIRouter(prefix="/api/public", tags=["public"])
logger = logging.getLogger(__name__)


def public_gallery_response(gallery) -> PublicGalleryResponse:
    return PublicGalleryResponse(
        id=gallery.id,
        name=gallery.name,
        slug=gallery.slug,
        description=gallery.description,
        created_at=gallery.created_at,
        artist=ArtistSummary.model_validate(gallery.owner),
    )


@router.get("/galleries", response_model=list[PublicGalleryResponse])
def list_public_galleries(
    repo: GalleryRepository = Depends(get_gallery_repository),
    limit: int = Query(100, ge=1, le=500),
):
    return [public_gallery_response(gallery) for gallery in repo.get_public_galleries(limit)]


@router.get("/artists/{artist_slug}/galleries/{gallery_slug}", response_model=PublicGalleryDetailResponse)
def get_public_gallery(
    artist_slug: str,
    gallery_slug: str,
    repo: GalleryRepository = Depends(get_gallery_repository),
):
    gallery = repo.get_public_gallery(artist_slug, gallery_slug)
    if not gallery:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Gallery not found")

    repo.increment_views(gallery.id)
    items = repo.get_items_by_gallery_id(gallery.id)
    logger.info(f"Public view of gallery {gallery.id} ({artist_slug}/{gallery_slug})")
    return PublicGalleryDetailResponse(
        gallery=public_gallery_response(gallery),
        items=[GalleryItemResponse.model_validate(item) for item in items],
    )
