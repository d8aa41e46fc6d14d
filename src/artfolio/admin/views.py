"""Admin views for artfolio models."""

from fastapi import FastAPI
from sqladmin import Admin, ModelView
from sqlalchemy.engine.base import Engine

from artfolio.admin.auth import AdminAuth
from artfolio.models.gallery import Gallery, GalleryItem
from artfolio.models.invitation import ArtistInvitation
from artfolio.models.user import User


class UserAdmin(ModelView, model=User):
    name = "User"
    name_plural = "Users"
    icon = "fa-solid fa-user"

    column_list = [User.id, User.email, User.display_name, User.slug, User.role, User.created_at]
    column_searchable_list = [User.email, User.display_name, User.slug]
    column_sortable_list = [User.email, User.role, User.created_at]
    column_default_sort = [(User.created_at, True)]

    column_details_list = [User.id, User.email, User.display_name, User.slug, User.role, User.profile_image_url, User.created_at, User.galleries]

    # Password hashes never leave the API
    form_excluded_columns = [User.password_hash, User.password_reset_token_hash, User.password_reset_expires_at, User.created_at, User.galleries]

    # Accounts are created through signup only
    can_create = False
    can_edit = True
    can_delete = True
    can_view_details = True


class GalleryAdmin(ModelView, model=Gallery):
    name = "Gallery"
    name_plural = "Galleries"
    icon = "fa-solid fa-images"

    column_list = [Gallery.id, Gallery.name, Gallery.slug, Gallery.owner_id, Gallery.is_public, Gallery.view_count, Gallery.created_at]
    column_searchable_list = [Gallery.name, Gallery.slug]
    column_sortable_list = [Gallery.created_at, Gallery.name, Gallery.view_count]
    column_default_sort = [(Gallery.created_at, True)]

    column_details_list = [
        Gallery.id,
        Gallery.name,
        Gallery.slug,
        Gallery.owner,
        Gallery.is_public,
        Gallery.description,
        Gallery.featured_item_id,
        Gallery.view_count,
        Gallery.created_at,
        Gallery.updated_at,
        Gallery.items,
    ]

    form_excluded_columns = [Gallery.created_at, Gallery.updated_at, Gallery.items, Gallery.featured_item, Gallery.view_count]

    can_create = False
    can_edit = True
    can_delete = True
    can_view_details = True


class GalleryItemAdmin(ModelView, model=GalleryItem):
    name = "Gallery Item"
    name_plural = "Gallery Items"
    icon = "fa-solid fa-image"

    column_list = [GalleryItem.id, GalleryItem.title, GalleryItem.gallery_id, GalleryItem.position, GalleryItem.is_original_work, GalleryItem.created_at]
    column_searchable_list = [GalleryItem.title, GalleryItem.artist_name]
    column_sortable_list = [GalleryItem.created_at, GalleryItem.position, GalleryItem.title]
    column_default_sort = [(GalleryItem.created_at, True)]

    column_details_list = [
        GalleryItem.id,
        GalleryItem.gallery,
        GalleryItem.title,
        GalleryItem.image_url,
        GalleryItem.object_key,
        GalleryItem.description,
        GalleryItem.alt_text,
        GalleryItem.tags,
        GalleryItem.position,
        GalleryItem.artist_name,
        GalleryItem.artist_portfolio_slug,
        GalleryItem.artist_external_url,
        GalleryItem.is_original_work,
        GalleryItem.created_at,
    ]

    form_excluded_columns = [GalleryItem.created_at, GalleryItem.gallery, GalleryItem.object_key]

    # Items are uploaded through the API; stored objects are not touched from here
    can_create = False
    can_edit = True
    can_delete = True
    can_view_details = True


class ArtistInvitationAdmin(ModelView, model=ArtistInvitation):
    name = "Invitation"
    name_plural = "Invitations"
    icon = "fa-solid fa-envelope"

    column_list = [ArtistInvitation.id, ArtistInvitation.email, ArtistInvitation.status, ArtistInvitation.expires_at, ArtistInvitation.created_at]
    column_searchable_list = [ArtistInvitation.email]
    column_sortable_list = [ArtistInvitation.created_at, ArtistInvitation.expires_at, ArtistInvitation.status]
    column_default_sort = [(ArtistInvitation.created_at, True)]

    column_details_list = [
        ArtistInvitation.id,
        ArtistInvitation.email,
        ArtistInvitation.status,
        ArtistInvitation.custom_message,
        ArtistInvitation.invited_by,
        ArtistInvitation.expires_at,
        ArtistInvitation.accepted_at,
        ArtistInvitation.created_at,
    ]

    form_excluded_columns = [ArtistInvitation.token, ArtistInvitation.created_at, ArtistInvitation.accepted_at, ArtistInvitation.invited_by]

    # Invitations go out through the admin API so the email is sent
    can_create = False
    can_edit = True
    can_delete = True
    can_view_details = True


def setup_admin(app: FastAPI, engine: Engine, secret_key: str) -> Admin:
    admin = Admin(app, engine, title="artfolio admin", authentication_backend=AdminAuth(secret_key=secret_key))
    for view in (UserAdmin, GalleryAdmin, GalleryItemAdmin, ArtistInvitationAdmin):
        admin.add_view(view)
    return admin
