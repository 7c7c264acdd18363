"""JWT login, registration, own-account endpoints and auth dependencies."""

from functools import lru_cache
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import Settings, get_settings
from app.core.errors import Unauthenticated
from app.core.security import (
    BcryptCredentialVerifier,
    CredentialVerifier,
    create_access_token,
    decode_access_token,
)
from app.schemas.auth import CurrentUser, LoginRequest, MessageResponse, TokenResponse
from app.schemas.user import PasswordChange, ProfileUpdate, RegisterRequest, UserPublic
from app.services import identity
from app.storage import Stores, get_stores

router = APIRouter()
security = HTTPBearer(auto_error=False)


@lru_cache
def get_credential_verifier() -> CredentialVerifier:
    """Dependency: password hashing service (override in tests for cheaper rounds)."""
    return BcryptCredentialVerifier()


def get_optional_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    stores: Annotated[Stores, Depends(get_stores)],
) -> CurrentUser | None:
    """
    Dependency: the actor behind a Bearer JWT, or None for anonymous callers.

    A token that is present but invalid, expired or for a deleted user is an
    error, not an anonymous request. The role is read from the store so role
    changes apply to existing tokens.
    """
    if credentials is None:
        return None
    try:
        payload = decode_access_token(credentials.credentials)
    except jwt.PyJWTError as e:
        raise Unauthenticated("Sesi tidak valid atau telah berakhir", cause=e) from e
    sub = payload.get("sub")
    try:
        user_id = int(sub)
    except (TypeError, ValueError) as e:
        raise Unauthenticated("Sesi tidak valid", cause=e) from e
    user = stores.identity.get_by_id(user_id)
    if user is None:
        raise Unauthenticated("Pengguna tidak ditemukan")
    return CurrentUser(id=user.id, username=user.username, role=user.role)


def get_current_user(
    actor: Annotated[CurrentUser | None, Depends(get_optional_user)],
) -> CurrentUser:
    """Dependency: require an authenticated actor. Raises Unauthenticated (401) otherwise."""
    if actor is None:
        raise Unauthenticated()
    return actor


Actor = Annotated[CurrentUser | None, Depends(get_optional_user)]
StoresDep = Annotated[Stores, Depends(get_stores)]
VerifierDep = Annotated[CredentialVerifier, Depends(get_credential_verifier)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


@router.post("", response_model=TokenResponse)
def login(body: LoginRequest, stores: StoresDep, verifier: VerifierDep) -> TokenResponse:
    """
    Authenticate with username and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <access_token>

    Set ``role`` to the login tab (user/admin) to reject accounts of the other role.
    """
    user = identity.authenticate(
        stores.identity, verifier, body.username, body.password, expected_role=body.role
    )
    token = create_access_token(sub=user.id, role=user.role)
    return TokenResponse(access_token=token, user=user.to_public())


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, stores: StoresDep, verifier: VerifierDep) -> TokenResponse:
    """Citizen self-registration. Signs the new user in right away."""
    user = identity.register_user(stores.identity, verifier, body)
    token = create_access_token(sub=user.id, role=user.role)
    return TokenResponse(access_token=token, user=user.to_public())


@router.get("/me", response_model=UserPublic)
def read_me(
    actor: Annotated[CurrentUser, Depends(get_current_user)],
    stores: StoresDep,
) -> UserPublic:
    return identity.get_user(stores.identity, actor, actor.id).to_public()


@router.patch("/me", response_model=UserPublic)
def update_me(body: ProfileUpdate, actor: Actor, stores: StoresDep) -> UserPublic:
    """Update own full name, email or phone."""
    if actor is None:
        raise Unauthenticated()
    return identity.update_profile(stores.identity, actor, actor.id, body).to_public()


@router.post("/me/password", response_model=MessageResponse)
def change_my_password(
    body: PasswordChange,
    actor: Actor,
    stores: StoresDep,
    verifier: VerifierDep,
) -> MessageResponse:
    """Change own password; the current password must be supplied."""
    if actor is None:
        raise Unauthenticated()
    identity.change_password(stores.identity, verifier, actor, actor.id, body)
    return MessageResponse(message="Password berhasil diperbarui")
