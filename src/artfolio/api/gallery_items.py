import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status

from artfolio.api.gallery import discard_objects
from artfolio.auth_utils import get_current_user
from artfolio.dependencies import get_gallery_repository, get_s3_client, get_user_repository
from artfolio.models.user import User
from artfolio.repositories.gallery_repository import GalleryRepository
from artfolio.repositories.user_repository import UserRepository
from artfolio.s3_service import AsyncS3Client
from artfolio.schemas.gallery import GalleryItemResponse, GalleryItemUpdateRequest
from artfolio.tags import encode_tags, parse_tags

router = APIRouter(prefix="/api/gallery-items", tags=["gallery-items"])
logger = logging.getLogger(__name__)


@router.patch("/{item_id}", response_model=GalleryItemResponse)
def update_gallery_item(
    item_id: uuid.UUID,
    request: GalleryItemUpdateRequest,
    repo: GalleryRepository = Depends(get_gallery_repository),
    users: UserRepository = Depends(get_user_repository),
    current_user: User = Depends(get_current_user),
):
    item = repo.get_item_by_id_and_owner(item_id, current_user.id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

    fields = request.model_dump(exclude_unset=True)
    if "tags" in fields:
        fields["tags"] = encode_tags(parse_tags(fields["tags"]))
    if fields.get("artist_portfolio_slug") and not users.get_user_by_slug(fields["artist_portfolio_slug"]):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Attributed artist not found")

    return repo.update_item(item, **fields)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_gallery_item(
    item_id: uuid.UUID,
    repo: GalleryRepository = Depends(get_gallery_repository),
    current_user: User = Depends(get_current_user),
    s3_client: AsyncS3Client = Depends(get_s3_client),
) -> None:
    item = repo.get_item_by_id_and_owner(item_id, current_user.id)
    if not item:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")

    object_key = repo.delete_item(item)
    logger.info(f"Gallery item {item_id} deleted by {current_user.id}")
    if object_key:
        await discard_objects(s3_client, [object_key])
