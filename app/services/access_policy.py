"""Central authorization gate: who may do what, consulted before every store access."""

from enum import Enum

from app.core.errors import Forbidden, Unauthenticated
from app.schemas.auth import CurrentUser


class Action(str, Enum):
    LIST_ALL_SUBMISSIONS = "list_all_submissions"
    LIST_OWN_SUBMISSIONS = "list_own_submissions"
    READ_SUBMISSION = "read_submission"
    CREATE_SUBMISSION = "create_submission"
    UPDATE_SUBMISSION = "update_submission"
    LIST_USERS = "list_users"
    READ_USER = "read_user"
    CREATE_USER = "create_user"
    CHANGE_ROLE = "change_role"
    UPDATE_PROFILE = "update_profile"
    CHANGE_PASSWORD = "change_password"
    UPLOAD_FILES = "upload_files"
    READ_UPLOAD = "read_upload"
    LIST_TEMPLATES = "list_templates"
    MANAGE_TEMPLATES = "manage_templates"
    READ_ORGANIZATION = "read_organization"
    UPDATE_ORGANIZATION = "update_organization"


ADMIN_ONLY: frozenset[Action] = frozenset(
    {
        Action.LIST_ALL_SUBMISSIONS,
        Action.UPDATE_SUBMISSION,
        Action.LIST_USERS,
        Action.CREATE_USER,
        Action.CHANGE_ROLE,
        Action.MANAGE_TEMPLATES,
        Action.UPDATE_ORGANIZATION,
    }
)

# Owner or admin.
OWNER_OR_ADMIN: frozenset[Action] = frozenset(
    {
        Action.LIST_OWN_SUBMISSIONS,
        Action.READ_SUBMISSION,
        Action.READ_USER,
    }
)

# Strictly the actor's own account, admins included.
SELF_ONLY: frozenset[Action] = frozenset(
    {
        Action.UPDATE_PROFILE,
        Action.CHANGE_PASSWORD,
    }
)

ANY_AUTHENTICATED: frozenset[Action] = frozenset(
    {
        Action.CREATE_SUBMISSION,
        Action.UPLOAD_FILES,
        Action.READ_UPLOAD,
        Action.LIST_TEMPLATES,
        Action.READ_ORGANIZATION,
    }
)


def is_allowed(actor: CurrentUser | None, action: Action, owner_id: int | None = None) -> bool:
    """Return True when ``actor`` may perform ``action`` on a target owned by ``owner_id``."""
    if actor is None:
        return False
    if action in ANY_AUTHENTICATED:
        return True
    if action in ADMIN_ONLY:
        return actor.is_admin
    if action in OWNER_OR_ADMIN:
        return actor.is_admin or owner_id == actor.id
    if action in SELF_ONLY:
        return owner_id == actor.id
    return False


def authorize(
    actor: CurrentUser | None,
    action: Action,
    owner_id: int | None = None,
) -> CurrentUser:
    """
    Gate an operation. Returns the actor so callers can chain it.

    Raises Unauthenticated when there is no actor and Forbidden when the actor
    lacks permission for this action or target.
    """
    if actor is None:
        raise Unauthenticated()
    if not is_allowed(actor, action, owner_id):
        raise Forbidden()
    return actor
