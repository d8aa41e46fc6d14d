import logging
import uuid
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError

from artfolio.auth_utils import authsettings, get_current_user
from artfolio.dependencies import get_email_client, get_user_repository
from artfolio.email_service import EmailClient, send_password_reset_email
from artfolio.models.user import User, UserRole
from artfolio.repositories.gallery_repository import SlugAllocationError
from artfolio.repositories.user_repository import UserRepository
from artfolio.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    PasswordResetRequest,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    ResetStatusResponse,
    ResetTokenRequest,
    ResetTokenValidResponse,
    TokenPair,
)
from artfolio.slugs import base_from_email

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account with that email exists, a password reset link has been sent."


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with a random salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against its bcrypt hash."""
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


def create_access_token(user_id: str) -> str:
    payload = {"sub": user_id, "exp": datetime.now(UTC) + timedelta(minutes=authsettings.access_token_expire_minutes), "type": "access"}
    return jwt.encode(payload, authsettings.jwt_secret_key, algorithm=authsettings.jwt_algorithm)


def create_refresh_token(user_id: str) -> str:
    payload = {"sub": user_id, "exp": datetime.now(UTC) + timedelta(minutes=authsettings.refresh_token_expire_minutes), "type": "refresh"}
    return jwt.encode(payload, authsettings.jwt_secret_key, algorithm=authsettings.jwt_algorithm)


def token_pair(user_id: str) -> TokenPair:
    return TokenPair(access_token=create_access_token(user_id), refresh_token=create_refresh_token(user_id), token_type="bearer")


def role_for_email(email: str) -> UserRole:
    if authsettings.superadmin_email and email.lower() == authsettings.superadmin_email.lower():
        return UserRole.SUPERADMIN
    return UserRole.ARTIST


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_user(request: RegisterRequest, repo: UserRepository = Depends(get_user_repository)):
    if repo.get_user_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    try:
        user = repo.create_user_with_default_slug(
            request.email,
            hash_password(request.password),
            base_from_email(request.email),
            display_name=request.display_name,
            role=role_for_email(request.email),
        )
    except IntegrityError as err:
        raise HTTPException(status_code=400, detail="Email already registered") from err
    except SlugAllocationError as err:
        logger.warning(f"Artist slug allocation failed for {request.email}: {err}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Could not allocate a unique slug") from err
    return RegisterResponse(id=str(user.id), email=user.email, slug=user.slug)


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
def login_user(request: LoginRequest, repo: UserRepository = Depends(get_user_repository)):
    user = repo.get_user_by_email(request.email)
    if not user or not verify_password(request.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return LoginResponse(id=str(user.id), email=user.email, tokens=token_pair(str(user.id)))


@router.post("/refresh", response_model=TokenPair, status_code=status.HTTP_200_OK)
def refresh_token(request: RefreshRequest, repo: UserRepository = Depends(get_user_repository)):
    try:
        payload = jwt.decode(request.refresh_token, authsettings.jwt_secret_key, algorithms=[authsettings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Refresh token expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid refresh token") from None

    if payload.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid token type")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    try:
        user = repo.get_user_by_id(uuid.UUID(user_id))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid token") from None
    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    return token_pair(str(user.id))


@router.post("/change-password", status_code=status.HTTP_200_OK)
def change_password(
    req: ChangePasswordRequest,
    repo: UserRepository = Depends(get_user_repository),
    current_user: User = Depends(get_current_user),
):
    if req.new_password != req.confirm_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="New password and confirmation do not match")
    if not verify_password(req.current_password, current_user.password_hash):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
    repo.update_user_password(current_user, hash_password(req.new_password))
    return {"message": "Password updated successfully"}


def verify_reset_token(repo: UserRepository, email: str, token: str) -> User:
    """Return the user whose pending reset ``token`` matches, or raise 400."""
    user = repo.get_user_by_email(email)
    if not user:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")
    if not repo.reset_token_matches(user, token):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired token")
    if user.password_reset_expired:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token has expired. Please request a new password reset.")
    return user


@router.post("/reset-password-request", response_model=ResetStatusResponse, status_code=status.HTTP_200_OK)
async def request_password_reset(
    request: PasswordResetRequest,
    repo: UserRepository = Depends(get_user_repository),
    email_client: EmailClient = Depends(get_email_client),
):
    """Email a reset link. The response is the same whether or not the account exists."""
    user = repo.get_user_by_email(request.email)
    if user:
        expire_minutes = authsettings.password_reset_expire_minutes
        token = repo.start_password_reset(user, expire_minutes)
        result = await send_password_reset_email(email_client, email=user.email, token=token, expire_minutes=expire_minutes)
        if not result.success:
            logger.warning(f"Password reset email for user {user.id} was not sent: {result.detail}")
    else:
        logger.info("Password reset requested for unknown email")
    return ResetStatusResponse(ok=True, message=RESET_REQUESTED_MESSAGE)


@router.post("/validate-reset-token", response_model=ResetTokenValidResponse, status_code=status.HTTP_200_OK)
def validate_reset_token(request: ResetTokenRequest, repo: UserRepository = Depends(get_user_repository)):
    verify_reset_token(repo, request.email, request.token)
    return ResetTokenValidResponse(valid=True, message="Token is valid")


@router.post("/reset-password", response_model=ResetStatusResponse, status_code=status.HTTP_200_OK)
def reset_password(request: ResetPasswordRequest, repo: UserRepository = Depends(get_user_repository)):
    user = verify_reset_token(repo, request.email, request.token)
    repo.update_user_password(user, hash_password(request.password))
    logger.info(f"Password reset completed for user {user.id}")
    return ResetStatusResponse(ok=True, message="Password updated successfully")
