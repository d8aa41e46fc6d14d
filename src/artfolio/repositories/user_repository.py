import hashlib
import logging
import secrets
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from artfolio.models.user import User, UserRole
from artfolio.repositories.base_repository import BaseRepository
from artfolio.repositories.gallery_repository import MAX_SLUG_ATTEMPTS, SlugAllocationError
from artfolio.slugs import slug_candidate

logger = logging.getLogger(__name__)


def _is_user_slug_conflict(error: IntegrityError) -> bool:
    return "slug" in str(error.orig).lower()


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class UserRepository(BaseRepository):
    def create_user(
        self,
        email: str,
        password_hash: str,
        display_name: str | None = None,
        slug: str | None = None,
        role: UserRole = UserRole.ARTIST,
    ) -> User:
        user = User(
            id=uuid.uuid4(),
            email=email,
            password_hash=password_hash,
            display_name=display_name,
            slug=slug,
            role=role.value,
        )
        self.db.add(user)
        try:
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise
        return user

    def create_user_with_default_slug(
        self,
        email: str,
        password_hash: str,
        base_slug: str,
        display_name: str | None = None,
        role: UserRole = UserRole.ARTIST,
    ) -> User:
        """Create a user at the first free slug among ``base``, ``base-1``, ...

        Each candidate is inserted inside a savepoint; only slug conflicts
        are retried, a duplicate email propagates as ``IntegrityError``.
        """
        for attempt in range(MAX_SLUG_ATTEMPTS):
            candidate = slug_candidate(base_slug, attempt)
            user = User(id=uuid.uuid4(), email=email, password_hash=password_hash, display_name=display_name, slug=candidate, role=role.value)
            try:
                with self.db.begin_nested():
                    self.db.add(user)
                    self.db.flush()
            except IntegrityError as err:
                if not _is_user_slug_conflict(err):
                    self.db.rollback()
                    raise
                logger.debug("Artist slug %s already taken", candidate)
                continue
            self.db.commit()
            self.db.refresh(user)
            return user

        self.db.rollback()
        raise SlugAllocationError(f"Could not allocate an artist slug for {base_slug!r} after {MAX_SLUG_ATTEMPTS} attempts")

    def get_user_by_email(self, email: str) -> User | None:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def get_user_by_id(self, user_id: uuid.UUID) -> User | None:
        stmt = select(User).where(User.id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_user_by_slug(self, slug: str) -> User | None:
        stmt = select(User).where(User.slug == slug)
        return self.db.execute(stmt).scalar_one_or_none()

    def update_profile(self, user: User, **fields) -> User:
        """Apply ``display_name`` / ``slug`` / ``profile_image_url`` updates."""
        for name in ("display_name", "slug", "profile_image_url"):
            if name in fields:
                setattr(user, name, fields[name])
        self.db.add(user)
        try:
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise
        return user

    def update_user_password(self, user: User, password_hash: str) -> User:
        user.password_hash = password_hash
        user.password_reset_token_hash = None
        user.password_reset_expires_at = None
        return self.save(user)

    def start_password_reset(self, user: User, expire_minutes: int) -> str:
        """Store a fresh reset token for ``user`` and return it in plain text.

        Only the SHA-256 digest is persisted; a new request replaces any
        earlier token.
        """
        token = secrets.token_hex(32)
        user.password_reset_token_hash = hash_reset_token(token)
        user.password_reset_expires_at = datetime.now(UTC) + timedelta(minutes=expire_minutes)
        self.save(user)
        return token

    def reset_token_matches(self, user: User, token: str) -> bool:
        if not user.password_reset_token_hash:
            return False
        return secrets.compare_digest(user.password_reset_token_hash, hash_reset_token(token))

    def count_users_by_role(self) -> dict[str, int]:
        stmt = select(User.role, func.count()).group_by(User.role)
        return {role: count for role, count in self.db.execute(stmt).all()}
