# Repositories package

from .base_repository import BaseRepository
from .gallery_repository import GalleryRepository, SlugAllocationError
from .invitation_repository import InvitationRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "GalleryRepository",
    "InvitationRepository",
    "SlugAllocationError",
    "UserRepository",
]
