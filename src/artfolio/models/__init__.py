from artfolio.models.gallery import Gallery, GalleryItem
from artfolio.models.invitation import ArtistInvitation, InvitationStatus
from artfolio.models.user import User, UserRole

__all__ = ["ArtistInvitation", "Gallery", "GalleryItem", "InvitationStatus", "User", "UserRole"]
