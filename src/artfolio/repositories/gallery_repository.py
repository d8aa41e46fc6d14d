import logging
import uuid
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from artfolio.models.gallery import Gallery, GalleryItem
from artfolio.models.user import User
from artfolio.repositories.base_repository import BaseRepository
from artfolio.slugs import humanize_slug, slug_candidate

logger = logging.getLogger(__name__)

MAX_SLUG_ATTEMPTS = 100

GALLERY_UPDATABLE_FIELDS = ("name", "description", "is_public", "featured_item_id")
ITEM_UPDATABLE_FIELDS = ("title", "description", "image_url", "alt_text", "position", "tags", "artist_name", "artist_portfolio_slug", "artist_external_url", "is_original_work")


class SlugAllocationError(Exception):
    """No free slug could be claimed for the owner."""


def _is_slug_conflict(error: IntegrityError) -> bool:
    message = str(error.orig).lower()
    return "galleries_owner_id_slug_key" in message or ("unique" in message and "slug" in message)


class GalleryRepository(BaseRepository):
    def _try_insert(self, gallery: Gallery) -> bool:
        """Insert ``gallery`` inside a savepoint.

        Returns False when the (owner_id, slug) unique constraint rejects the
        row; any other integrity error propagates.
        """
        try:
            with self.db.begin_nested():
                self.db.add(gallery)
                self.db.flush()
        except IntegrityError as err:
            if not _is_slug_conflict(err):
                raise
            return False
        return True

    def get_gallery_by_slug(self, owner_id: uuid.UUID, slug: str) -> Gallery | None:
        stmt = select(Gallery).where(Gallery.owner_id == owner_id, Gallery.slug == slug)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_gallery_by_id_and_owner(self, gallery_id: uuid.UUID, owner_id: uuid.UUID) -> Gallery | None:
        stmt = select(Gallery).where(Gallery.id == gallery_id, Gallery.owner_id == owner_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_gallery(
        self,
        owner_id: uuid.UUID,
        base_slug: str,
        name: str,
        description: str | None = None,
        is_public: bool = True,
    ) -> Gallery:
        """Create a gallery under the first free slug of ``base``, ``base-1``, ``base-2``, ...

        The unique constraint decides which slug is free, so two concurrent
        creates with the same name end up with different suffixes.
        """
        for attempt in range(MAX_SLUG_ATTEMPTS):
            candidate = slug_candidate(base_slug, attempt)
            gallery = Gallery(id=uuid.uuid4(), owner_id=owner_id, name=name, slug=candidate, description=description, is_public=is_public)
            if self._try_insert(gallery):
                self.db.commit()
                self.db.refresh(gallery)
                return gallery
            logger.debug("Slug %s already taken for owner %s", candidate, owner_id)

        raise SlugAllocationError(f"Could not allocate a slug for {base_slug!r} after {MAX_SLUG_ATTEMPTS} attempts")

    def resolve_gallery(self, owner_id: uuid.UUID, slug: str, name: str | None = None, is_public: bool = True) -> tuple[Gallery, bool]:
        """Return the owner's gallery at ``slug``, creating it if needed.

        Returns ``(gallery, created)``. The display name of a new gallery is
        ``name`` or the humanized slug. When a concurrent request claims the
        slug between the lookup and the insert, that gallery is reused.
        """
        existing = self.get_gallery_by_slug(owner_id, slug)
        if existing:
            return existing, False

        gallery = Gallery(id=uuid.uuid4(), owner_id=owner_id, name=(name or "").strip() or humanize_slug(slug), slug=slug, description=None, is_public=is_public)
        if self._try_insert(gallery):
            self.db.commit()
            self.db.refresh(gallery)
            logger.info("Created gallery %s (%s) for owner %s", gallery.id, slug, owner_id)
            return gallery, True

        existing = self.get_gallery_by_slug(owner_id, slug)
        if existing is None:
            raise SlugAllocationError(f"Slug {slug!r} conflicted but no gallery was found")
        logger.info("Gallery %s was created concurrently, reusing %s", slug, existing.id)
        return existing, False

    def get_galleries_by_owner(self, owner_id: uuid.UUID) -> list[Gallery]:
        stmt = select(Gallery).where(Gallery.owner_id == owner_id).order_by(Gallery.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def update_gallery(self, gallery: Gallery, **fields) -> Gallery:
        for name in GALLERY_UPDATABLE_FIELDS:
            if name in fields:
                setattr(gallery, name, fields[name])
        return self.save(gallery)

    def delete_gallery(self, gallery: Gallery) -> list[str]:
        """Delete the gallery and its items; returns the storage keys that were referenced."""
        stmt = select(GalleryItem.object_key).where(GalleryItem.gallery_id == gallery.id, GalleryItem.object_key.is_not(None))
        object_keys = list(self.db.execute(stmt).scalars().all())

        self.db.delete(gallery)
        self.db.commit()
        return object_keys

    def get_items_by_gallery_id(self, gallery_id: uuid.UUID) -> list[GalleryItem]:
        stmt = select(GalleryItem).where(GalleryItem.gallery_id == gallery_id).order_by(GalleryItem.position.asc().nulls_last(), GalleryItem.created_at.desc())
        return list(self.db.execute(stmt).scalars().all())

    def get_item_by_id_and_gallery(self, item_id: uuid.UUID, gallery_id: uuid.UUID) -> GalleryItem | None:
        stmt = select(GalleryItem).where(GalleryItem.id == item_id, GalleryItem.gallery_id == gallery_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_item_by_id_and_owner(self, item_id: uuid.UUID, owner_id: uuid.UUID) -> GalleryItem | None:
        stmt = select(GalleryItem).join(GalleryItem.gallery).where(GalleryItem.id == item_id, Gallery.owner_id == owner_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def create_item(
        self,
        gallery_id: uuid.UUID,
        title: str,
        image_url: str,
        *,
        object_key: str | None = None,
        description: str | None = None,
        alt_text: str | None = None,
        tags: str | None = None,
        position: int | None = None,
        artist_name: str | None = None,
        artist_portfolio_slug: str | None = None,
        artist_external_url: str | None = None,
        is_original_work: bool = True,
    ) -> GalleryItem:
        item = GalleryItem(
            gallery_id=gallery_id,
            title=title,
            image_url=image_url,
            object_key=object_key,
            description=description,
            alt_text=alt_text,
            tags=tags,
            position=position,
            artist_name=artist_name,
            artist_portfolio_slug=artist_portfolio_slug,
            artist_external_url=artist_external_url,
            is_original_work=is_original_work,
        )
        return self.save(item)

    def update_item(self, item: GalleryItem, **fields) -> GalleryItem:
        for name in ITEM_UPDATABLE_FIELDS:
            if name in fields:
                setattr(item, name, fields[name])
        return self.save(item)

    def delete_item(self, item: GalleryItem) -> str | None:
        """Delete one item; returns its storage key, if any."""
        object_key = item.object_key
        self.db.execute(update(Gallery).where(Gallery.featured_item_id == item.id).values(featured_item_id=None))
        self.db.delete(item)
        self.db.commit()
        return object_key

    def reorder_items(self, gallery_id: uuid.UUID, order: list[uuid.UUID]) -> int:
        """Assign positions 1..n following ``order``.

        Ids that do not belong to the gallery (and repeated ids) are skipped.
        Returns the number of items repositioned.
        """
        stmt = select(GalleryItem).where(GalleryItem.gallery_id == gallery_id, GalleryItem.id.in_(order))
        items = {item.id: item for item in self.db.execute(stmt).scalars().all()}

        position = 1
        seen: set[uuid.UUID] = set()
        for item_id in order:
            if item_id not in items or item_id in seen:
                continue
            seen.add(item_id)
            items[item_id].position = position
            position += 1

        self.db.commit()
        return len(seen)

    def get_public_galleries(self, limit: int = 100) -> list[Gallery]:
        stmt = select(Gallery).where(Gallery.is_public.is_(True)).options(selectinload(Gallery.owner)).order_by(Gallery.created_at.desc()).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def get_public_gallery(self, artist_slug: str, gallery_slug: str) -> Gallery | None:
        stmt = (
            select(Gallery)
            .join(Gallery.owner)
            .where(User.slug == artist_slug, Gallery.slug == gallery_slug, Gallery.is_public.is_(True))
            .options(selectinload(Gallery.owner))
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def increment_views(self, gallery_id: uuid.UUID) -> None:
        stmt = update(Gallery).where(Gallery.id == gallery_id).values(view_count=Gallery.view_count + 1)
        self.db.execute(stmt)
        self.db.commit()

    def count_galleries(self, owner_id: uuid.UUID | None = None) -> int:
        stmt = select(func.count()).select_from(Gallery)
        if owner_id is not None:
            stmt = stmt.where(Gallery.owner_id == owner_id)
        return self.db.execute(stmt).scalar_one()

    def count_items(self, owner_id: uuid.UUID | None = None, since: datetime | None = None) -> int:
        stmt = select(func.count()).select_from(GalleryItem)
        if owner_id is not None:
            stmt = stmt.join(GalleryItem.gallery).where(Gallery.owner_id == owner_id)
        if since is not None:
            stmt = stmt.where(GalleryItem.created_at >= since)
        return self.db.execute(stmt).scalar_one()

    def get_owner_gallery_stats(self, owner_id: uuid.UUID) -> list[tuple[Gallery, int]]:
        """Every gallery of the owner with its item count, most viewed first."""
        item_count = func.count(GalleryItem.id)
        stmt = (
            select(Gallery, item_count)
            .outerjoin(GalleryItem, GalleryItem.gallery_id == Gallery.id)
            .where(Gallery.owner_id == owner_id)
            .group_by(Gallery.id)
            .order_by(Gallery.view_count.desc(), item_count.desc())
        )
        return [(gallery, count) for gallery, count in self.db.execute(stmt).all()]

    def get_recent_items_by_owner(self, owner_id: uuid.UUID, limit: int = 5) -> list[GalleryItem]:
        stmt = (
            select(GalleryItem)
            .join(GalleryItem.gallery)
            .where(Gallery.owner_id == owner_id)
            .options(selectinload(GalleryItem.gallery))
            .order_by(GalleryItem.created_at.desc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())
