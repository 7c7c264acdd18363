"""Admin user management: list, provision, inspect and change roles."""

from fastapi import APIRouter, status

from app.api.v1.auth import Actor, StoresDep, VerifierDep
from app.schemas.submission import SubmissionsListResponse
from app.schemas.user import RoleUpdate, UserCreate, UserPublic, UsersListResponse
from app.services import identity, submissions

router = APIRouter()


@router.get("", response_model=UsersListResponse)
def list_users(actor: Actor, stores: StoresDep) -> UsersListResponse:
    """List all users (admin only)."""
    users = identity.list_users(stores.identity, actor)
    return UsersListResponse(users=[u.to_public() for u in users])


@router.post("", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserCreate,
    actor: Actor,
    stores: StoresDep,
    verifier: VerifierDep,
) -> UserPublic:
    """Create a user with any role (admin only)."""
    return identity.create_user(stores.identity, verifier, actor, body).to_public()


@router.get("/{user_id}", response_model=UserPublic)
def get_user(user_id: int, actor: Actor, stores: StoresDep) -> UserPublic:
    return identity.get_user(stores.identity, actor, user_id).to_public()


@router.put("/{user_id}/role", response_model=UserPublic)
def change_role(user_id: int, body: RoleUpdate, actor: Actor, stores: StoresDep) -> UserPublic:
    """Assign a role (admin only). Profile updates never touch the role."""
    return identity.change_role(stores.identity, actor, user_id, body.role).to_public()


@router.get("/{user_id}/submissions", response_model=SubmissionsListResponse)
def list_submissions_of_user(
    user_id: int,
    actor: Actor,
    stores: StoresDep,
) -> SubmissionsListResponse:
    """Submissions owned by one user, newest first (the user themself or an admin)."""
    records = submissions.list_user_submissions(stores.submissions, actor, user_id)
    return SubmissionsListResponse(submissions=records)
