"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import UserPublic, UserRole


class LoginRequest(BaseModel):
    """Credentials for login, optionally tied to the login tab (user or admin)."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")
    role: UserRole | None = Field(
        default=None,
        description="Expected role; login fails when the account has a different role.",
    )


class TokenResponse(BaseModel):
    """JWT access token returned after successful login or registration."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserPublic


class CurrentUser(BaseModel):
    """Authenticated actor (id, username, role) for dependency injection."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class MessageResponse(BaseModel):
    message: str
