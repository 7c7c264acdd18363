"""ORM models for document-request submissions, templates and the organization profile."""

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text

from app.models.base import Base


class Submission(Base):
    """
    One citizen document request.

    id is the human-readable AK-<year>-<sequence> identifier. documents and
    admin_files hold ordered lists of upload references.
    """

    __tablename__ = "submissions"

    id = Column(String(32), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    documents = Column(JSON, nullable=False, default=list)
    status = Column(String(32), nullable=False, default="pending", index=True)
    admin_notes = Column(Text, nullable=True)
    admin_files = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)


class DocumentTemplate(Base):
    """Blank form or example document an admin publishes for a submission type."""

    __tablename__ = "document_templates"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    type = Column(String(32), nullable=False)
    description = Column(Text, nullable=False)
    files = Column(JSON, nullable=False, default=list)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)


class OrganizationSetting(Base):
    """Single-row table (id=1) with the village office contact details."""

    __tablename__ = "organization_settings"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    phone = Column(String(32), nullable=False)
    email = Column(String(320), nullable=False)
