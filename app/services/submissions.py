"""Submission operations: every call is gated by the access policy before touching the store."""

import logging

from app.core.config import Settings, get_settings
from app.core.errors import NotFound
from app.schemas.auth import CurrentUser
from app.schemas.submission import SubmissionCreate, SubmissionRecord, SubmissionUpdate
from app.services.access_policy import Action, authorize
from app.services.uploads import ensure_uploaded
from app.storage.base import SUBMISSION_NOT_FOUND, SubmissionStore

logger = logging.getLogger(__name__)


def create_submission(
    store: SubmissionStore,
    actor: CurrentUser | None,
    body: SubmissionCreate,
    settings: Settings | None = None,
) -> SubmissionRecord:
    """
    Create a pending submission owned by the actor (admins submit as themselves too).

    Each document reference must name a file that is already uploaded.
    """
    actor = authorize(actor, Action.CREATE_SUBMISSION)
    ensure_uploaded(body.documents, settings or get_settings())
    record = store.create(
        owner_id=actor.id,
        type=body.type,
        title=body.title,
        description=body.description,
        documents=body.documents,
    )
    logger.info(
        "Submission created",
        extra={"submission_id": record.id, "user_id": actor.id, "type": record.type},
    )
    return record


def list_all_submissions(
    store: SubmissionStore,
    actor: CurrentUser | None,
) -> list[SubmissionRecord]:
    authorize(actor, Action.LIST_ALL_SUBMISSIONS)
    return store.list_all()


def list_user_submissions(
    store: SubmissionStore,
    actor: CurrentUser | None,
    user_id: int | None = None,
) -> list[SubmissionRecord]:
    """Submissions owned by ``user_id`` (defaults to the actor). Admins may name any user."""
    if actor is not None and user_id is None:
        user_id = actor.id
    authorize(actor, Action.LIST_OWN_SUBMISSIONS, owner_id=user_id)
    return store.list_for_user(user_id)


def get_submission(
    store: SubmissionStore,
    actor: CurrentUser | None,
    submission_id: str,
) -> SubmissionRecord:
    """
    Owner or admin read.

    An anonymous caller is rejected before the lookup; for a signed-in caller
    a missing id is NotFound and someone else's submission is Forbidden.
    """
    authorize(actor, Action.READ_SUBMISSION, owner_id=actor.id if actor else None)
    record = store.get(submission_id)
    if record is None:
        raise NotFound(SUBMISSION_NOT_FOUND)
    authorize(actor, Action.READ_SUBMISSION, owner_id=record.user_id)
    return record


def update_submission(
    store: SubmissionStore,
    actor: CurrentUser | None,
    submission_id: str,
    body: SubmissionUpdate,
    settings: Settings | None = None,
) -> SubmissionRecord:
    """Admin status/notes/files update; the store validates the transition."""
    actor = authorize(actor, Action.UPDATE_SUBMISSION)
    if body.admin_files:
        ensure_uploaded(body.admin_files, settings or get_settings())
    record = store.update(submission_id, body)
    logger.info(
        "Submission updated",
        extra={
            "submission_id": record.id,
            "status": record.status,
            "admin_id": actor.id,
        },
    )
    return record
