"""Admin panel for artfolio."""

from artfolio.admin.auth import AdminAuth
from artfolio.admin.views import ArtistInvitationAdmin, GalleryAdmin, GalleryItemAdmin, UserAdmin, setup_admin

__all__ = ["AdminAuth", "UserAdmin", "GalleryAdmin", "GalleryItemAdmin", "ArtistInvitationAdmin", "setup_admin"]
