"""Pydantic schemas for user records and user-management requests."""

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)

UserRole = Literal["user", "admin"]

FULL_NAME_MIN_LEN = 3
FULL_NAME_MAX_LEN = 255
EMAIL_MAX_LEN = 320
PHONE_MAX_LEN = 32

# Pragmatic syntax check: local@domain.tld, no whitespace.
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
# NIK is the 16-digit Indonesian national identity number.
_NIK_RE = re.compile(r"^\d{16}$")
_PHONE_RE = re.compile(r"^\+?[0-9][0-9 \-]{4,30}$")


def validate_email(value: str) -> str:
    value = value.strip()
    if not _EMAIL_RE.match(value):
        raise ValueError("Format email tidak valid")
    return value


def _validate_nik(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not _NIK_RE.match(value):
        raise ValueError("NIK harus terdiri dari 16 digit angka")
    return value


def _validate_phone(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if not _PHONE_RE.match(value):
        raise ValueError("Format nomor telepon tidak valid")
    return value


class UserPublic(BaseModel):
    """Client-visible user shape (credential never included)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str
    email: str
    nik: str | None = None
    phone: str | None = None
    role: UserRole
    created_at: datetime


class UserRecord(UserPublic):
    """Persisted user including the opaque password hash. Never returned to clients."""

    password_hash: str

    def to_public(self) -> UserPublic:
        return UserPublic.model_validate(self.model_dump(exclude={"password_hash"}))


class RegisterRequest(BaseModel):
    """Self-registration payload; the resulting role is always 'user'."""

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    full_name: str = Field(..., min_length=FULL_NAME_MIN_LEN, max_length=FULL_NAME_MAX_LEN)
    email: str = Field(..., max_length=EMAIL_MAX_LEN)
    nik: str | None = Field(default=None, description="16-digit national identity number")
    phone: str | None = Field(default=None, max_length=PHONE_MAX_LEN)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < USERNAME_MIN_LEN:
            raise ValueError("Username minimal 3 karakter")
        if any(ch.isspace() for ch in v):
            raise ValueError("Username tidak boleh mengandung spasi")
        return v

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < FULL_NAME_MIN_LEN:
            raise ValueError("Nama lengkap minimal 3 karakter")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)

    @field_validator("nik")
    @classmethod
    def check_nik(cls, v: str | None) -> str | None:
        return _validate_nik(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        return _validate_phone(v)


class UserCreate(RegisterRequest):
    """Admin-provisioned user; the admin picks the role."""

    role: UserRole = "user"


class ProfileUpdate(BaseModel):
    """Self-service profile fields. Role and username are not accepted here."""

    model_config = ConfigDict(extra="forbid")

    full_name: str | None = Field(default=None, max_length=FULL_NAME_MAX_LEN)
    email: str | None = Field(default=None, max_length=EMAIL_MAX_LEN)
    phone: str | None = Field(default=None, max_length=PHONE_MAX_LEN)

    @field_validator("full_name")
    @classmethod
    def check_full_name(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if len(v) < FULL_NAME_MIN_LEN:
            raise ValueError("Nama lengkap minimal 3 karakter")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str | None) -> str | None:
        return None if v is None else validate_email(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        return _validate_phone(v)


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class RoleUpdate(BaseModel):
    role: UserRole


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    users: list[UserPublic]


class NewUser(BaseModel):
    """Validated candidate handed to the identity store; password already hashed."""

    username: str
    password_hash: str
    full_name: str
    email: str
    nik: str | None = None
    phone: str | None = None
    role: UserRole = "user"
