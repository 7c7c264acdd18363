"""Shared builders for tests: a controllable clock, users and submission payloads."""

from datetime import UTC, datetime, timedelta

from app.schemas.auth import CurrentUser
from app.schemas.submission import SubmissionCreate
from app.schemas.user import NewUser, UserRecord


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 1, 8, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def new_user(
    username: str = "budi",
    email: str | None = None,
    role: str = "user",
    **kwargs: object,
) -> NewUser:
    """Build a NewUser with a placeholder hash (stores never inspect it)."""
    defaults = {
        "password_hash": "hashed",
        "full_name": f"{username.title()} Santoso",
        "nik": None,
        "phone": None,
    }
    defaults.update(kwargs)
    return NewUser(
        username=username,
        email=email or f"{username.lower()}@example.id",
        role=role,
        **defaults,
    )


def actor_for(user: UserRecord) -> CurrentUser:
    return CurrentUser(id=user.id, username=user.username, role=user.role)


def submission_body(**kwargs: object) -> SubmissionCreate:
    defaults = {
        "type": "ktp",
        "title": "Pembaruan KTP hilang",
        "description": "KTP saya hilang saat banjir",
        "documents": [],
    }
    defaults.update(kwargs)
    return SubmissionCreate(**defaults)
