"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.submission import DocumentTemplate, OrganizationSetting, Submission
from app.models.user import User

__all__ = ["Base", "DocumentTemplate", "OrganizationSetting", "Submission", "User"]
