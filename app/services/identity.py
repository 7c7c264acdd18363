"""Identity operations: registration, login, profile, password and role management."""

import logging

from app.core.errors import NotFound, Unauthenticated, ValidationFailed
from app.core.security import CredentialVerifier
from app.schemas.auth import CurrentUser
from app.schemas.user import (
    NewUser,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    UserCreate,
    UserRecord,
    UserRole,
)
from app.services.access_policy import Action, authorize
from app.storage.base import USER_NOT_FOUND, IdentityStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Username atau password salah"


def _candidate(body: RegisterRequest, password_hash: str, role: UserRole) -> NewUser:
    return NewUser(
        username=body.username,
        password_hash=password_hash,
        full_name=body.full_name,
        email=body.email,
        nik=body.nik,
        phone=body.phone,
        role=role,
    )


def register_user(
    store: IdentityStore,
    verifier: CredentialVerifier,
    body: RegisterRequest,
) -> UserRecord:
    """Self-registration. The role is always 'user', whatever the caller sent."""
    user = store.create(_candidate(body, verifier.hash(body.password), "user"))
    logger.info("User registered", extra={"user_id": user.id, "role": user.role})
    return user


def create_user(
    store: IdentityStore,
    verifier: CredentialVerifier,
    actor: CurrentUser | None,
    body: UserCreate,
) -> UserRecord:
    """Admin-provisioned account with an admin-chosen role."""
    authorize(actor, Action.CREATE_USER)
    user = store.create(_candidate(body, verifier.hash(body.password), body.role))
    logger.info(
        "User created by admin",
        extra={"user_id": user.id, "role": user.role, "admin_id": actor.id},
    )
    return user


def authenticate(
    store: IdentityStore,
    verifier: CredentialVerifier,
    username: str,
    password: str,
    expected_role: UserRole | None = None,
) -> UserRecord:
    """
    Verify credentials. When ``expected_role`` is given (the login tab the
    user picked) the account must have that role.

    Raises Unauthenticated on any failure.
    """
    user = store.get_by_username(username)
    if user is None or not verifier.verify(password, user.password_hash):
        raise Unauthenticated(INVALID_CREDENTIALS)
    if expected_role is not None and user.role != expected_role:
        if expected_role == "admin":
            raise Unauthenticated("Akun ini bukan akun administrator")
        raise Unauthenticated("Silakan login sebagai admin")
    return user


def list_users(store: IdentityStore, actor: CurrentUser | None) -> list[UserRecord]:
    authorize(actor, Action.LIST_USERS)
    return store.list_all()


def get_user(store: IdentityStore, actor: CurrentUser | None, user_id: int) -> UserRecord:
    """Own account for everyone; any account for admins."""
    authorize(actor, Action.READ_USER, owner_id=user_id)
    user = store.get_by_id(user_id)
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    return user


def update_profile(
    store: IdentityStore,
    actor: CurrentUser | None,
    user_id: int,
    body: ProfileUpdate,
) -> UserRecord:
    """Self-service merge of full_name, email and phone. Email stays unique."""
    authorize(actor, Action.UPDATE_PROFILE, owner_id=user_id)
    changes = body.model_dump(exclude_unset=True)
    # full_name and email are required attributes; null means "leave as is".
    for key in ("full_name", "email"):
        if changes.get(key) is None:
            changes.pop(key, None)
    if not changes:
        user = store.get_by_id(user_id)
        if user is None:
            raise NotFound(USER_NOT_FOUND)
        return user
    user = store.update(user_id, changes)
    logger.info("Profile updated", extra={"user_id": user_id, "fields": sorted(changes)})
    return user


def change_password(
    store: IdentityStore,
    verifier: CredentialVerifier,
    actor: CurrentUser | None,
    user_id: int,
    body: PasswordChange,
) -> None:
    """Re-verify the current password, then store a fresh hash."""
    authorize(actor, Action.CHANGE_PASSWORD, owner_id=user_id)
    user = store.get_by_id(user_id)
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    if not verifier.verify(body.current_password, user.password_hash):
        raise ValidationFailed("Password saat ini tidak valid")
    store.update(user_id, {"password_hash": verifier.hash(body.new_password)})
    logger.info("Password changed", extra={"user_id": user_id})


def change_role(
    store: IdentityStore,
    actor: CurrentUser | None,
    user_id: int,
    role: UserRole,
) -> UserRecord:
    """Admin-only role assignment, kept apart from the profile update surface."""
    authorize(actor, Action.CHANGE_ROLE)
    if actor.id == user_id and role != actor.role:
        raise ValidationFailed("Administrator tidak dapat mengubah perannya sendiri")
    user = store.update(user_id, {"role": role})
    logger.info(
        "User role changed",
        extra={"user_id": user_id, "role": role, "admin_id": actor.id},
    )
    return user


def ensure_default_admin(
    store: IdentityStore,
    verifier: CredentialVerifier,
    username: str,
    password: str,
    full_name: str,
    email: str,
) -> UserRecord | None:
    """Create the first admin account when no user has ``username``. Returns it if created."""
    if store.get_by_username(username) is not None:
        return None
    user = store.create(
        NewUser(
            username=username,
            password_hash=verifier.hash(password),
            full_name=full_name,
            email=email,
            role="admin",
        )
    )
    logger.info("Default admin account created", extra={"user_id": user.id})
    return user
