"""
Dependency injection for external clients

The storage client and the email client are constructed once by the
application lifespan (see ``artfolio.main``) and stored on ``app.state``.
Handlers receive them through ``Depends``; tests swap them out with
``app.dependency_overrides``.
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from artfolio.db import get_db
from artfolio.email_service import EmailClient
from artfolio.repositories.gallery_repository import GalleryRepository
from artfolio.repositories.invitation_repository import InvitationRepository
from artfolio.repositories.user_repository import UserRepository
from artfolio.s3_service import AsyncS3Client

logger = logging.getLogger(__name__)


def get_s3_client(request: Request) -> AsyncS3Client:
    """Return the AsyncS3Client built during application startup.

    Raises:
        RuntimeError: If the lifespan did not run
    """
    client = getattr(request.app.state, "s3_client", None)
    if client is None:
        raise RuntimeError("S3 client not initialized. Make sure the application lifespan is properly configured.")
    return client


def get_email_client(request: Request) -> EmailClient:
    """Return the EmailClient built during application startup.

    Raises:
        RuntimeError: If the lifespan did not run
    """
    client = getattr(request.app.state, "email_client", None)
    if client is None:
        raise RuntimeError("Email client not initialized. Make sure the application lifespan is properly configured.")
    return client


def get_gallery_repository(db: Session = Depends(get_db)) -> GalleryRepository:
    return GalleryRepository(db)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_invitation_repository(db: Session = Depends(get_db)) -> InvitationRepository:
    return InvitationRepository(db)
