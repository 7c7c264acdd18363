"""Process-lifetime, dict-backed stores. Each store serializes its writes with an RLock."""

import threading
from typing import Any

from app.core.errors import Conflict, NotFound
from app.schemas.submission import SubmissionRecord, SubmissionUpdate
from app.schemas.template import OrganizationProfile, TemplateRecord
from app.schemas.user import NewUser, UserRecord
from app.services.lifecycle import INITIAL_STATUS, apply_update
from app.storage.base import (
    EMAIL_TAKEN,
    NIK_TAKEN,
    SUBMISSION_NOT_FOUND,
    TEMPLATE_NOT_FOUND,
    USER_NOT_FOUND,
    USER_UPDATABLE_FIELDS,
    USERNAME_TAKEN,
    Clock,
    IdentityStore,
    format_submission_id,
    newest_first,
    utcnow,
)


class MemoryIdentityStore:
    """Users keyed by sequential id; username/email lookups are case-insensitive."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._users: dict[int, UserRecord] = {}
        self._next_id = 1
        self._lock = threading.RLock()
        self._clock = clock

    def get_by_id(self, user_id: int) -> UserRecord | None:
        with self._lock:
            return self._users.get(user_id)

    def get_by_username(self, username: str) -> UserRecord | None:
        needle = username.lower()
        with self._lock:
            return next(
                (u for u in self._users.values() if u.username.lower() == needle),
                None,
            )

    def get_by_email(self, email: str) -> UserRecord | None:
        needle = email.lower()
        with self._lock:
            return next(
                (u for u in self._users.values() if u.email.lower() == needle),
                None,
            )

    def get_by_nik(self, nik: str) -> UserRecord | None:
        with self._lock:
            return next((u for u in self._users.values() if u.nik == nik), None)

    def list_all(self) -> list[UserRecord]:
        with self._lock:
            return [self._users[k] for k in sorted(self._users)]

    def create(self, candidate: NewUser) -> UserRecord:
        """Check uniqueness and insert under one lock; raises Conflict without mutating."""
        with self._lock:
            if self.get_by_username(candidate.username) is not None:
                raise Conflict(USERNAME_TAKEN)
            if self.get_by_email(candidate.email) is not None:
                raise Conflict(EMAIL_TAKEN)
            if candidate.nik and self.get_by_nik(candidate.nik) is not None:
                raise Conflict(NIK_TAKEN)
            user = UserRecord(
                id=self._next_id,
                created_at=self._clock(),
                **candidate.model_dump(),
            )
            self._users[user.id] = user
            self._next_id += 1
            return user

    def update(self, user_id: int, changes: dict[str, Any]) -> UserRecord:
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFound(USER_NOT_FOUND)
            merged = {k: v for k, v in changes.items() if k in USER_UPDATABLE_FIELDS}
            email = merged.get("email")
            if email is not None:
                owner = self.get_by_email(email)
                if owner is not None and owner.id != user_id:
                    raise Conflict(EMAIL_TAKEN)
            updated = user.model_copy(update=merged)
            self._users[user_id] = updated
            return updated


class MemorySubmissionStore:
    """
    Submissions keyed by their AK-<year>-<sequence> id.

    The sequence restarts at 0001 each calendar year and never reuses a value
    within a year.
    """

    def __init__(self, identity: IdentityStore, clock: Clock = utcnow) -> None:
        self._identity = identity
        self._submissions: dict[str, SubmissionRecord] = {}
        self._sequences: dict[int, int] = {}
        self._lock = threading.RLock()
        self._clock = clock

    def _enrich(self, record: SubmissionRecord) -> SubmissionRecord:
        owner = self._identity.get_by_id(record.user_id)
        return record.model_copy(
            update={"user": owner.to_public() if owner is not None else None}
        )

    def create(
        self,
        owner_id: int,
        type: str,
        title: str,
        description: str,
        documents: list[str],
    ) -> SubmissionRecord:
        with self._lock:
            now = self._clock()
            sequence = self._sequences.get(now.year, 0) + 1
            self._sequences[now.year] = sequence
            record = SubmissionRecord(
                id=format_submission_id(now.year, sequence),
                user_id=owner_id,
                type=type,
                title=title,
                description=description,
                documents=list(documents),
                status=INITIAL_STATUS,
                admin_notes=None,
                admin_files=[],
                created_at=now,
                updated_at=now,
            )
            self._submissions[record.id] = record
        return self._enrich(record)

    def get(self, submission_id: str) -> SubmissionRecord | None:
        with self._lock:
            record = self._submissions.get(submission_id)
        return self._enrich(record) if record is not None else None

    def list_all(self) -> list[SubmissionRecord]:
        with self._lock:
            records = list(self._submissions.values())
        return [self._enrich(r) for r in newest_first(records)]

    def list_for_user(self, user_id: int) -> list[SubmissionRecord]:
        with self._lock:
            records = [r for r in self._submissions.values() if r.user_id == user_id]
        return [self._enrich(r) for r in newest_first(records)]

    def update(self, submission_id: str, update: SubmissionUpdate) -> SubmissionRecord:
        with self._lock:
            record = self._submissions.get(submission_id)
            if record is None:
                raise NotFound(SUBMISSION_NOT_FOUND)
            updated = apply_update(record, update, self._clock())
            self._submissions[submission_id] = updated
        return self._enrich(updated)


class MemoryTemplateStore:
    def __init__(self) -> None:
        self._templates: dict[str, TemplateRecord] = {}
        self._lock = threading.RLock()

    def list_all(self) -> list[TemplateRecord]:
        with self._lock:
            return sorted(self._templates.values(), key=lambda t: t.created_at)

    def get(self, template_id: str) -> TemplateRecord | None:
        with self._lock:
            return self._templates.get(template_id)

    def create(self, record: TemplateRecord) -> TemplateRecord:
        with self._lock:
            self._templates[record.id] = record
        return record

    def delete(self, template_id: str) -> None:
        with self._lock:
            if self._templates.pop(template_id, None) is None:
                raise NotFound(TEMPLATE_NOT_FOUND)


class MemoryOrganizationStore:
    def __init__(self, initial: OrganizationProfile) -> None:
        self._profile = initial
        self._lock = threading.RLock()

    def get(self) -> OrganizationProfile:
        with self._lock:
            return self._profile

    def save(self, profile: OrganizationProfile) -> OrganizationProfile:
        with self._lock:
            self._profile = profile
        return profile
