"""Admin authentication backend for SQLAdmin."""

import asyncio
import uuid

from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request

from artfolio.api.auth import verify_password
from artfolio.db import get_session_maker
from artfolio.repositories.user_repository import UserRepository


class AdminAuth(AuthenticationBackend):
    """Session-based login for admin and superadmin accounts."""

    async def login(self, request: Request) -> bool:
        form = await request.form()
        email = form.get("username")  # SQLAdmin uses 'username' field
        password = form.get("password")
        if not email or not password:
            return False

        user_id = await asyncio.to_thread(self._check_credentials, str(email), str(password))
        if not user_id:
            return False

        request.session.update({"user_id": user_id})
        return True

    def _check_credentials(self, email: str, password: str) -> str | None:
        with get_session_maker()() as db:
            user = UserRepository(db).get_user_by_email(email)
            if not user or not user.is_admin or not verify_password(password, user.password_hash):
                return None
            return str(user.id)

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        user_id = request.session.get("user_id")
        if not user_id:
            return False
        return await asyncio.to_thread(self._is_admin, user_id)

    def _is_admin(self, user_id: str) -> bool:
        """Verify the user still exists and still has an admin role."""
        try:
            user_uuid = uuid.UUID(user_id)
        except ValueError:
            return False
        with get_session_maker()() as db:
            user = UserRepository(db).get_user_by_id(user_uuid)
            return bool(user and user.is_admin)
