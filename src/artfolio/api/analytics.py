from datetime import UTC, datetime, timedelta
from typing import Literal

from fastapi import APIRouter, Depends, Query

from artfolio.auth_utils import get_current_user
from artfolio.dependencies import get_gallery_repository
from artfolio.models.user import User
from artfolio.repositories.gallery_repository import GalleryRepository
from artfolio.schemas.stats import AnalyticsResponse, AnalyticsTotals, RecentArtwork, TopGallery

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

RANGES = {"week": timedelta(days=7), "month": timedelta(days=30), "year": timedelta(days=365)}
TOP_GALLERIES = 5
RECENT_ARTWORKS = 5


@router.get("", response_model=AnalyticsResponse)
def get_analytics(
    range: Literal["week", "month", "year"] = Query("month"),
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
):
    """Portfolio numbers for the current artist over the selected range."""
    since = datetime.now(UTC) - RANGES[range]
    stats = repo.get_owner_gallery_stats(current_user.id)

    totals = AnalyticsTotals(
        galleries=len(stats),
        public_galleries=sum(1 for gallery, _ in stats if gallery.is_public),
        artworks=sum(count for _, count in stats),
        views=sum(gallery.view_count for gallery, _ in stats),
        artworks_in_range=repo.count_items(owner_id=current_user.id, since=since),
    )
    top = [TopGallery(id=gallery.id, name=gallery.name, slug=gallery.slug, views=gallery.view_count, artworks=count) for gallery, count in stats[:TOP_GALLERIES]]
    recent = [
        RecentArtwork(id=item.id, title=item.title, image_url=item.image_url, gallery_name=item.gallery.name, created_at=item.created_at)
        for item in repo.get_recent_items_by_owner(current_user.id, limit=RECENT_ARTWORKS)
    ]
    return AnalyticsResponse(range=range, since=since, totals=totals, top_galleries=top, recent_artworks=recent)
