"""Pydantic request/response schemas."""

from app.schemas.auth import CurrentUser, LoginRequest, MessageResponse, TokenResponse
from app.schemas.health import HealthResponse
from app.schemas.submission import (
    SubmissionCreate,
    SubmissionRecord,
    SubmissionStatus,
    SubmissionType,
    SubmissionUpdate,
)
from app.schemas.template import OrganizationProfile, TemplateCreate, TemplateRecord
from app.schemas.upload import UploadResponse
from app.schemas.user import (
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    RoleUpdate,
    UserCreate,
    UserPublic,
    UserRecord,
    UserRole,
)

__all__ = [
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "OrganizationProfile",
    "PasswordChange",
    "ProfileUpdate",
    "RegisterRequest",
    "RoleUpdate",
    "SubmissionCreate",
    "SubmissionRecord",
    "SubmissionStatus",
    "SubmissionType",
    "SubmissionUpdate",
    "TemplateCreate",
    "TemplateRecord",
    "TokenResponse",
    "UploadResponse",
    "UserCreate",
    "UserPublic",
    "UserRecord",
    "UserRole",
]
