"""Repository interfaces shared by the in-memory and SQL backends."""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Callable, Protocol

from app.schemas.submission import SubmissionRecord, SubmissionUpdate
from app.schemas.template import OrganizationProfile, TemplateRecord
from app.schemas.user import NewUser, UserRecord

Clock = Callable[[], datetime]

SUBMISSION_ID_PREFIX = "AK"
SEQUENCE_WIDTH = 4

# Fields the identity store will merge in update(); everything else is ignored.
USER_UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {"full_name", "email", "phone", "password_hash", "role"}
)


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on read)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def format_submission_id(year: int, sequence: int) -> str:
    """AK-<year>-<zero-padded sequence>, e.g. AK-2026-0001."""
    return f"{SUBMISSION_ID_PREFIX}-{year}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_submission_sequence(submission_id: str) -> tuple[int, int] | None:
    """Return (year, sequence) for a well-formed id, else None."""
    parts = submission_id.split("-")
    if len(parts) != 3 or parts[0] != SUBMISSION_ID_PREFIX:
        return None
    try:
        return int(parts[1]), int(parts[2])
    except ValueError:
        return None


def newest_first(records: list[SubmissionRecord]) -> list[SubmissionRecord]:
    """Descending created_at; ties fall back to ascending id."""
    by_id = sorted(records, key=lambda r: r.id)
    return sorted(by_id, key=lambda r: r.created_at, reverse=True)


class IdentityStore(Protocol):
    def get_by_id(self, user_id: int) -> UserRecord | None: ...

    def get_by_username(self, username: str) -> UserRecord | None: ...

    def get_by_email(self, email: str) -> UserRecord | None: ...

    def get_by_nik(self, nik: str) -> UserRecord | None: ...

    def list_all(self) -> list[UserRecord]: ...

    def create(self, candidate: NewUser) -> UserRecord: ...

    def update(self, user_id: int, changes: dict[str, Any]) -> UserRecord: ...


class SubmissionStore(Protocol):
    def create(
        self,
        owner_id: int,
        type: str,
        title: str,
        description: str,
        documents: list[str],
    ) -> SubmissionRecord: ...

    def get(self, submission_id: str) -> SubmissionRecord | None: ...

    def list_all(self) -> list[SubmissionRecord]: ...

    def list_for_user(self, user_id: int) -> list[SubmissionRecord]: ...

    def update(self, submission_id: str, update: SubmissionUpdate) -> SubmissionRecord: ...


class TemplateStore(Protocol):
    def list_all(self) -> list[TemplateRecord]: ...

    def get(self, template_id: str) -> TemplateRecord | None: ...

    def create(self, record: TemplateRecord) -> TemplateRecord: ...

    def delete(self, template_id: str) -> None: ...


class OrganizationStore(Protocol):
    def get(self) -> OrganizationProfile: ...

    def save(self, profile: OrganizationProfile) -> OrganizationProfile: ...


@dataclass
class Stores:
    """The repositories backing one running portal."""

    backend: str
    identity: IdentityStore
    submissions: SubmissionStore
    templates: TemplateStore
    organization: OrganizationStore


USERNAME_TAKEN = "Username sudah digunakan"
EMAIL_TAKEN = "Email sudah digunakan"
NIK_TAKEN = "NIK sudah terdaftar"
USER_NOT_FOUND = "Pengguna tidak ditemukan"
SUBMISSION_NOT_FOUND = "Pengajuan tidak ditemukan"
SUBMISSION_ID_TAKEN = "Nomor pengajuan bentrok, silakan coba lagi"
TEMPLATE_NOT_FOUND = "Template tidak ditemukan"
