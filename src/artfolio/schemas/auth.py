from pydantic import EmailStr, Field

from artfolio.schemas.base import ApiModel


class RegisterRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    display_name: str | None = Field(None, max_length=255)


class RegisterResponse(ApiModel):
    id: str
    email: EmailStr
    slug: str | None = None


class LoginRequest(ApiModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)


class TokenPair(ApiModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResponse(ApiModel):
    id: str
    email: EmailStr
    tokens: TokenPair


class RefreshRequest(ApiModel):
    refresh_token: str


class ChangePasswordRequest(ApiModel):
    current_password: str = Field(min_length=8)
    new_password: str = Field(min_length=8)
    confirm_password: str = Field(min_length=8)


class PasswordResetRequest(ApiModel):
    email: EmailStr


class ResetTokenRequest(ApiModel):
    token: str = Field(min_length=1)
    email: EmailStr


class ResetPasswordRequest(ResetTokenRequest):
    password: str = Field(min_length=8, max_length=128)


class ResetStatusResponse(ApiModel):
    ok: bool
    message: str


class ResetTokenValidResponse(ApiModel):
    valid: bool
    message: str


class MeResponse(ApiModel):
    id: str
    email: EmailStr
    display_name: str | None = None
    slug: str | None = None
    role: str
    profile_image_url: str | None = None


class UpdateMeRequest(ApiModel):
    display_name: str | None = Field(None, max_length=255)
    slug: str | None = Field(None, max_length=64)


class ProfileImageResponse(ApiModel):
    url: str
    request_id: str
