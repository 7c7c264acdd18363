"""Storage backends for users, submissions, templates and the organization profile."""

from functools import lru_cache
from typing import TYPE_CHECKING

from sqlalchemy.orm import sessionmaker

from app.schemas.template import OrganizationProfile
from app.storage.base import Stores
from app.storage.memory import (
    MemoryIdentityStore,
    MemoryOrganizationStore,
    MemorySubmissionStore,
    MemoryTemplateStore,
)
from app.storage.sql import (
    SqlIdentityStore,
    SqlOrganizationStore,
    SqlSubmissionStore,
    SqlTemplateStore,
)

if TYPE_CHECKING:
    from app.core.config import Settings


def default_organization(settings: "Settings") -> OrganizationProfile:
    return OrganizationProfile(
        name=settings.ORGANIZATION_NAME,
        address=settings.ORGANIZATION_ADDRESS,
        phone=settings.ORGANIZATION_PHONE,
        email=settings.ORGANIZATION_EMAIL,
    )


def build_stores(
    settings: "Settings",
    session_factory: sessionmaker | None = None,
) -> Stores:
    """Create the repositories for the configured STORAGE_BACKEND."""
    organization = default_organization(settings)
    if settings.STORAGE_BACKEND == "database":
        if session_factory is None:
            from app.core.database import SessionLocal

            session_factory = SessionLocal
        identity = SqlIdentityStore(session_factory)
        return Stores(
            backend="database",
            identity=identity,
            submissions=SqlSubmissionStore(session_factory),
            templates=SqlTemplateStore(session_factory),
            organization=SqlOrganizationStore(session_factory, organization),
        )
    identity = MemoryIdentityStore()
    return Stores(
        backend="memory",
        identity=identity,
        submissions=MemorySubmissionStore(identity),
        templates=MemoryTemplateStore(),
        organization=MemoryOrganizationStore(organization),
    )


@lru_cache
def get_stores() -> Stores:
    """Process-wide stores (FastAPI dependency; override in tests)."""
    from app.core.config import get_settings

    return build_stores(get_settings())


__all__ = ["Stores", "build_stores", "default_organization", "get_stores"]
