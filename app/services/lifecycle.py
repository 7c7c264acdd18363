"""
Submission lifecycle: the status state machine and the admin update merge.

pending -> processing | completed | rejected
processing -> completed | rejected
completed, rejected: terminal

Re-setting the current status is accepted as a no-op transition, so admins can
still edit notes or attach result files on a finished submission.
"""

import logging
from datetime import datetime, timedelta

from app.core.errors import InvalidTransition
from app.schemas.submission import SubmissionRecord, SubmissionUpdate

logger = logging.getLogger(__name__)

INITIAL_STATUS = "pending"

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"processing", "completed", "rejected"}),
    "processing": frozenset({"completed", "rejected"}),
    "completed": frozenset(),
    "rejected": frozenset(),
}

TERMINAL_STATUSES: frozenset[str] = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)

_TICK = timedelta(microseconds=1)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: str, requested: str) -> bool:
    """True when ``requested`` is reachable from ``current`` (self-transition included)."""
    if current == requested:
        return True
    return requested in ALLOWED_TRANSITIONS.get(current, frozenset())


def validate_transition(current: str, requested: str) -> None:
    """Raise InvalidTransition when the allow-list does not permit the change."""
    if not can_transition(current, requested):
        raise InvalidTransition(current=current, requested=requested)


def next_updated_at(previous: datetime, now: datetime) -> datetime:
    """Timestamp for a mutation: ``now``, but strictly after ``previous``."""
    if now > previous:
        return now
    return previous + _TICK


def apply_update(
    record: SubmissionRecord,
    update: SubmissionUpdate,
    now: datetime,
) -> SubmissionRecord:
    """
    Validate and merge an admin update into a stored submission.

    Only fields explicitly set on ``update`` are applied; admin_notes and
    admin_files replace the previous values. updated_at always advances.
    Raises InvalidTransition for a status change outside the allow-list.
    """
    changes = update.model_dump(exclude_unset=True)
    requested = changes.get("status")
    if requested is None:
        changes.pop("status", None)
    else:
        try:
            validate_transition(record.status, requested)
        except InvalidTransition:
            logger.warning(
                "Rejected submission status change",
                extra={
                    "submission_id": record.id,
                    "from_status": record.status,
                    "to_status": requested,
                },
            )
            raise
    if "admin_files" in changes and changes["admin_files"] is None:
        changes["admin_files"] = []
    changes["updated_at"] = next_updated_at(record.updated_at, now)
    return record.model_copy(update=changes)
