"""SQLAlchemy-backed stores. Each operation runs in its own short session."""

import logging
import threading
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from app.core.errors import Conflict, NotFound
from app.models import DocumentTemplate, OrganizationSetting, Submission, User
from app.schemas.submission import SubmissionRecord, SubmissionUpdate
from app.schemas.template import OrganizationProfile, TemplateRecord
from app.schemas.user import NewUser, UserRecord
from app.services.lifecycle import INITIAL_STATUS, apply_update
from app.storage.base import (
    EMAIL_TAKEN,
    NIK_TAKEN,
    SUBMISSION_ID_PREFIX,
    SUBMISSION_ID_TAKEN,
    SUBMISSION_NOT_FOUND,
    TEMPLATE_NOT_FOUND,
    USER_NOT_FOUND,
    USER_UPDATABLE_FIELDS,
    USERNAME_TAKEN,
    Clock,
    as_utc,
    format_submission_id,
    newest_first,
    parse_submission_sequence,
    utcnow,
)

ORGANIZATION_ROW_ID = 1
ID_ALLOCATION_ATTEMPTS = 3

logger = logging.getLogger(__name__)


def _user_record(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        username=row.username,
        password_hash=row.password_hash,
        full_name=row.full_name,
        email=row.email,
        nik=row.nik,
        phone=row.phone,
        role=row.role,
        created_at=as_utc(row.created_at),
    )


def _submission_record(row: Submission, owner: User | None) -> SubmissionRecord:
    return SubmissionRecord(
        id=row.id,
        user_id=row.user_id,
        type=row.type,
        title=row.title,
        description=row.description,
        documents=list(row.documents or []),
        status=row.status,
        admin_notes=row.admin_notes,
        admin_files=list(row.admin_files or []),
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
        user=_user_record(owner).to_public() if owner is not None else None,
    )


def _template_record(row: DocumentTemplate) -> TemplateRecord:
    return TemplateRecord(
        id=row.id,
        name=row.name,
        type=row.type,
        description=row.description,
        files=list(row.files or []),
        created_by=row.created_by,
        created_at=as_utc(row.created_at),
    )


class SqlIdentityStore:
    def __init__(self, session_factory: sessionmaker, clock: Clock = utcnow) -> None:
        self._session_factory = session_factory
        self._clock = clock
        # Serializes check-then-insert within this process; DB indexes cover the rest.
        self._write_lock = threading.Lock()

    @staticmethod
    def _find_username(db: Session, username: str) -> User | None:
        return db.query(User).filter(func.lower(User.username) == username.lower()).first()

    @staticmethod
    def _find_email(db: Session, email: str) -> User | None:
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()

    def get_by_id(self, user_id: int) -> UserRecord | None:
        with self._session_factory() as db:
            row = db.get(User, user_id)
            return _user_record(row) if row is not None else None

    def get_by_username(self, username: str) -> UserRecord | None:
        with self._session_factory() as db:
            row = self._find_username(db, username)
            return _user_record(row) if row is not None else None

    def get_by_email(self, email: str) -> UserRecord | None:
        with self._session_factory() as db:
            row = self._find_email(db, email)
            return _user_record(row) if row is not None else None

    def get_by_nik(self, nik: str) -> UserRecord | None:
        with self._session_factory() as db:
            row = db.query(User).filter(User.nik == nik).first()
            return _user_record(row) if row is not None else None

    def list_all(self) -> list[UserRecord]:
        with self._session_factory() as db:
            return [_user_record(row) for row in db.query(User).order_by(User.id).all()]

    def create(self, candidate: NewUser) -> UserRecord:
        with self._write_lock, self._session_factory() as db:
            if self._find_username(db, candidate.username) is not None:
                raise Conflict(USERNAME_TAKEN)
            if self._find_email(db, candidate.email) is not None:
                raise Conflict(EMAIL_TAKEN)
            if candidate.nik and db.query(User).filter(User.nik == candidate.nik).first():
                raise Conflict(NIK_TAKEN)
            row = User(created_at=self._clock(), **candidate.model_dump())
            db.add(row)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise Conflict("Username, email, atau NIK sudah terdaftar", cause=e) from e
            db.refresh(row)
            return _user_record(row)

    def update(self, user_id: int, changes: dict[str, Any]) -> UserRecord:
        with self._write_lock, self._session_factory() as db:
            row = db.get(User, user_id)
            if row is None:
                raise NotFound(USER_NOT_FOUND)
            merged = {k: v for k, v in changes.items() if k in USER_UPDATABLE_FIELDS}
            email = merged.get("email")
            if email is not None:
                owner = self._find_email(db, email)
                if owner is not None and owner.id != user_id:
                    raise Conflict(EMAIL_TAKEN)
            for key, value in merged.items():
                setattr(row, key, value)
            try:
                db.commit()
            except IntegrityError as e:
                db.rollback()
                raise Conflict(EMAIL_TAKEN, cause=e) from e
            db.refresh(row)
            return _user_record(row)


class SqlSubmissionStore:
    """
    Submissions in the ``submissions`` table.

    The per-year sequence is derived from the highest stored id for the
    current year, under a process-wide lock.
    """

    def __init__(self, session_factory: sessionmaker, clock: Clock = utcnow) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._write_lock = threading.Lock()

    @staticmethod
    def _next_sequence(db: Session, year: int) -> int:
        prefix = f"{SUBMISSION_ID_PREFIX}-{year}-"
        ids = db.query(Submission.id).filter(Submission.id.like(f"{prefix}%")).all()
        highest = 0
        for (submission_id,) in ids:
            parsed = parse_submission_sequence(submission_id)
            if parsed is not None and parsed[1] > highest:
                highest = parsed[1]
        return highest + 1

    @staticmethod
    def _with_owners(db: Session, rows: list[Submission]) -> list[SubmissionRecord]:
        owner_ids = {row.user_id for row in rows}
        owners = {
            u.id: u for u in db.query(User).filter(User.id.in_(owner_ids)).all()
        } if owner_ids else {}
        return [_submission_record(row, owners.get(row.user_id)) for row in rows]

    def create(
        self,
        owner_id: int,
        type: str,
        title: str,
        description: str,
        documents: list[str],
    ) -> SubmissionRecord:
        last_error: IntegrityError | None = None
        with self._write_lock:
            # Another process may take the same id between read and insert; re-derive it.
            for _ in range(ID_ALLOCATION_ATTEMPTS):
                with self._session_factory() as db:
                    now = self._clock()
                    submission_id = format_submission_id(
                        now.year, self._next_sequence(db, now.year)
                    )
                    row = Submission(
                        id=submission_id,
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
                    db.add(row)
                    try:
                        db.commit()
                    except IntegrityError as e:
                        db.rollback()
                        last_error = e
                        logger.warning(
                            "Submission id already taken, retrying",
                            extra={"submission_id": submission_id},
                        )
                        continue
                    db.refresh(row)
                    return _submission_record(row, db.get(User, row.user_id))
        raise Conflict(SUBMISSION_ID_TAKEN, cause=last_error)

    def get(self, submission_id: str) -> SubmissionRecord | None:
        with self._session_factory() as db:
            row = db.get(Submission, submission_id)
            if row is None:
                return None
            return _submission_record(row, db.get(User, row.user_id))

    def list_all(self) -> list[SubmissionRecord]:
        with self._session_factory() as db:
            return newest_first(self._with_owners(db, db.query(Submission).all()))

    def list_for_user(self, user_id: int) -> list[SubmissionRecord]:
        with self._session_factory() as db:
            rows = db.query(Submission).filter(Submission.user_id == user_id).all()
            return newest_first(self._with_owners(db, rows))

    def update(self, submission_id: str, update: SubmissionUpdate) -> SubmissionRecord:
        with self._write_lock, self._session_factory() as db:
            row = db.get(Submission, submission_id)
            if row is None:
                raise NotFound(SUBMISSION_NOT_FOUND)
            updated = apply_update(_submission_record(row, None), update, self._clock())
            row.status = updated.status
            row.admin_notes = updated.admin_notes
            row.admin_files = list(updated.admin_files)
            row.updated_at = updated.updated_at
            db.commit()
            db.refresh(row)
            return _submission_record(row, db.get(User, row.user_id))


class SqlTemplateStore:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def list_all(self) -> list[TemplateRecord]:
        with self._session_factory() as db:
            rows = db.query(DocumentTemplate).order_by(DocumentTemplate.created_at).all()
            return [_template_record(row) for row in rows]

    def get(self, template_id: str) -> TemplateRecord | None:
        with self._session_factory() as db:
            row = db.get(DocumentTemplate, template_id)
            return _template_record(row) if row is not None else None

    def create(self, record: TemplateRecord) -> TemplateRecord:
        with self._session_factory() as db:
            db.add(DocumentTemplate(**record.model_dump()))
            db.commit()
        return record

    def delete(self, template_id: str) -> None:
        with self._session_factory() as db:
            row = db.get(DocumentTemplate, template_id)
            if row is None:
                raise NotFound(TEMPLATE_NOT_FOUND)
            db.delete(row)
            db.commit()


class SqlOrganizationStore:
    """Returns ``default`` until an admin saves a profile."""

    def __init__(self, session_factory: sessionmaker, default: OrganizationProfile) -> None:
        self._session_factory = session_factory
        self._default = default

    def get(self) -> OrganizationProfile:
        with self._session_factory() as db:
            row = db.get(OrganizationSetting, ORGANIZATION_ROW_ID)
            if row is None:
                return self._default
            return OrganizationProfile(
                name=row.name, address=row.address, phone=row.phone, email=row.email
            )

    def save(self, profile: OrganizationProfile) -> OrganizationProfile:
        with self._session_factory() as db:
            row = db.get(OrganizationSetting, ORGANIZATION_ROW_ID)
            if row is None:
                row = OrganizationSetting(id=ORGANIZATION_ROW_ID)
                db.add(row)
            row.name = profile.name
            row.address = profile.address
            row.phone = profile.phone
            row.email = profile.email
            db.commit()
        return profile
