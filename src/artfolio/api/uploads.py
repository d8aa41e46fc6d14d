from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile as StarletteUploadFile

from artfolio.auth_utils import get_current_user
from artfolio.dependencies import get_email_client, get_s3_client, get_user_repository
from artfolio.email_service import EmailClient
from artfolio.logger import route_logger
from artfolio.models.user import User
from artfolio.repositories.user_repository import UserRepository
from artfolio.s3_service import AsyncS3Client
from artfolio.schemas.auth import ProfileImageResponse
from artfolio.uploads import IncomingFile, ProfileImageService, UploadError

router = APIRouter(prefix="/api/uploads", tags=["uploads"])


async def incoming_file(file: UploadFile | str | None) -> IncomingFile | None:
    """Read a multipart ``file`` field; a plain text value counts as no file."""
    if not isinstance(file, StarletteUploadFile):
        return None
    return IncomingFile(filename=file.filename or "", content_type=file.content_type or "", data=await file.read(), declared_size=file.size)


@router.post("/profile", response_model=ProfileImageResponse)
async def upload_profile_image(
    file: UploadFile | str | None = File(None),
    users: UserRepository = Depends(get_user_repository),
    current_user: User = Depends(get_current_user),
    s3_client: AsyncS3Client = Depends(get_s3_client),
    email_client: EmailClient = Depends(get_email_client),
):
    log = route_logger(ProfileImageService.ROUTE)

    incoming = await incoming_file(file)

    service = ProfileImageService(users, s3_client, email_client, log=log)
    try:
        url, _ = await service.upload(current_user, incoming)
    except UploadError as e:
        log.warning_event("upload_rejected", status=e.status_code, error=e.message)
        return JSONResponse(status_code=e.status_code, content={"error": e.message, "requestId": log.request_id})

    body = ProfileImageResponse(url=url, request_id=log.request_id)
    return JSONResponse(status_code=status.HTTP_200_OK, content=body.model_dump(by_alias=True))
