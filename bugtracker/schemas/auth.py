"""Request/response schemas for auth and account endpoints."""

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """New account: display name, email and password (all required)."""

    name: str | None = Field(default=None, description="Display name")
    email: str | None = Field(default=None, description="Email (account identity)")
    password: str | None = Field(default=None, description="Password")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(default="", description="Email")
    password: str = Field(default="", description="Password")


class AccountOut(BaseModel):
    """Account projection returned to clients (never includes credential material)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str
    avatar_url: str | None = None


class LoginResponse(BaseModel):
    """Signed bearer token and the account it was issued for."""

    token: str = Field(..., description="JWT access token; send as 'Authorization: Bearer <token>'")
    user: AccountOut


class Principal(BaseModel):
    """Authenticated identity taken from verified token claims (no DB lookup)."""

    account_id: int
    email: str


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted or null fields are left unchanged."""

    name: str | None = Field(default=None, max_length=255)
    avatar_url: str | None = Field(default=None, max_length=2048)


class SuccessResponse(BaseModel):
    success: bool = True


class AvatarResponse(SuccessResponse):
    avatar_url: str
