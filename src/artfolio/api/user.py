from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError

from artfolio.auth_utils import get_current_user
from artfolio.dependencies import get_user_repository
from artfolio.models.user import User
from artfolio.repositories.user_repository import UserRepository
from artfolio.schemas.auth import MeResponse, UpdateMeRequest
from artfolio.slugs import artist_slug_problem

router = APIRouter(prefix="/api", tags=["user"])


def me_response(user: User) -> MeResponse:
    return MeResponse(
        id=str(user.id),
        email=user.email,
        display_name=user.display_name,
        slug=user.slug,
        role=user.role,
        profile_image_url=user.profile_image_url,
    )


@router.get("/me", response_model=MeResponse)
def get_me(current_user: User = Depends(get_current_user)):
    return me_response(current_user)


@router.put("/me", response_model=MeResponse)
def update_me(
    req: UpdateMeRequest,
    repo: UserRepository = Depends(get_user_repository),
    current_user: User = Depends(get_current_user),
):
    fields = {}
    if "display_name" in req.model_fields_set:
        fields["display_name"] = (req.display_name or "").strip() or None

    if "slug" in req.model_fields_set and req.slug != current_user.slug:
        slug = (req.slug or "").strip().lower()
        problem = artist_slug_problem(slug)
        if problem:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=problem)
        owner = repo.get_user_by_slug(slug)
        if owner and owner.id != current_user.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Artist URL is already taken")
        fields["slug"] = slug

    try:
        user = repo.update_profile(current_user, **fields)
    except IntegrityError as err:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Artist URL is already taken") from err
    return me_response(user)
