"""Pydantic schemas for document templates and the organization profile."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.schemas.submission import SubmissionType, validate_document_refs
from app.schemas.user import validate_email


class TemplateRecord(BaseModel):
    id: str
    name: str
    type: SubmissionType
    description: str
    files: list[str] = Field(default_factory=list)
    created_by: int
    created_at: datetime


class TemplateCreate(BaseModel):
    """Admin payload; files must already be uploaded."""

    name: str = Field(..., min_length=3, max_length=255)
    type: SubmissionType
    description: str = Field(..., min_length=5, max_length=2_000)
    files: list[str] = Field(..., min_length=1, max_length=10)

    @field_validator("files")
    @classmethod
    def check_files(cls, v: list[str]) -> list[str]:
        return validate_document_refs(v)


class TemplatesListResponse(BaseModel):
    templates: list[TemplateRecord]


class OrganizationProfile(BaseModel):
    """Village office contact details shown on the portal."""

    name: str = Field(..., min_length=3, max_length=255)
    address: str = Field(..., min_length=5, max_length=1_000)
    phone: str = Field(..., min_length=5, max_length=32)
    email: str = Field(..., max_length=320)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(v)
