"""Pydantic schemas for document-request submissions: types, statuses, records and requests."""

import re
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.schemas.user import UserPublic

SubmissionType = Literal[
    "na",
    "ktp",
    "kk",
    "usaha",
    "domisili",
    "tidak_sengketa",
    "pengantar",
    "lainnya",
]

SubmissionStatus = Literal["pending", "processing", "completed", "rejected"]

# Display labels, in catalog order.
SUBMISSION_TYPE_LABELS: dict[str, str] = {
    "na": "Surat Nikah (NA)",
    "ktp": "Pembaruan KTP",
    "kk": "Pembaruan KK",
    "usaha": "Keterangan Usaha",
    "domisili": "Keterangan Domisili",
    "tidak_sengketa": "Keterangan Tidak Bersengketa",
    "pengantar": "Surat Pengantar",
    "lainnya": "Layanan Lainnya",
}

STATUS_LABELS: dict[str, str] = {
    "pending": "Menunggu",
    "processing": "Diproses",
    "completed": "Selesai",
    "rejected": "Ditolak",
}

# Matches AK-<4-digit year>-<4+ digit sequence>.
SUBMISSION_ID_RE = re.compile(r"^AK-\d{4}-\d{4,}$")

TITLE_MIN_LENGTH = 5
TITLE_MAX_LENGTH = 255
DESCRIPTION_MIN_LENGTH = 10
DESCRIPTION_MAX_LENGTH = 5_000
ADMIN_NOTES_MAX_LENGTH = 5_000
MAX_DOCUMENTS = 20

# References produced by the upload service: /uploads/<stored file name>.
_DOCUMENT_REF_RE = re.compile(r"^/uploads/[A-Za-z0-9_\-]+(\.[A-Za-z0-9]+)?$")


def validate_document_refs(refs: list[str]) -> list[str]:
    """Ensure each reference has the /uploads/<name> shape the upload service hands out."""
    for ref in refs:
        if not _DOCUMENT_REF_RE.match(ref):
            raise ValueError(f"Referensi dokumen tidak valid: {ref!r}")
    return refs


class SubmissionRecord(BaseModel):
    """
    Stored submission, optionally enriched with a snapshot of the owner's profile.

    ``user`` is a read-time join; only ``user_id`` is persisted.
    """

    id: str
    user_id: int
    type: SubmissionType
    title: str
    description: str
    documents: list[str] = Field(default_factory=list)
    status: SubmissionStatus = "pending"
    admin_notes: str | None = None
    admin_files: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    user: UserPublic | None = None


class SubmissionCreate(BaseModel):
    """Citizen request body; the owner is always the authenticated actor."""

    type: SubmissionType
    title: str = Field(..., max_length=TITLE_MAX_LENGTH)
    description: str = Field(..., max_length=DESCRIPTION_MAX_LENGTH)
    documents: list[str] = Field(default_factory=list, max_length=MAX_DOCUMENTS)

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        v = v.strip()
        if len(v) < TITLE_MIN_LENGTH:
            raise ValueError("Judul pengajuan minimal 5 karakter")
        return v

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        v = v.strip()
        if len(v) < DESCRIPTION_MIN_LENGTH:
            raise ValueError("Deskripsi minimal 10 karakter")
        return v

    @field_validator("documents")
    @classmethod
    def check_documents(cls, v: list[str]) -> list[str]:
        return validate_document_refs(v)


class SubmissionUpdate(BaseModel):
    """
    Admin update. Omitted fields are left untouched; admin_notes and admin_files
    replace the previous values when given.
    """

    status: SubmissionStatus | None = None
    admin_notes: str | None = Field(default=None, max_length=ADMIN_NOTES_MAX_LENGTH)
    admin_files: list[str] | None = Field(default=None, max_length=MAX_DOCUMENTS)

    @field_validator("admin_files")
    @classmethod
    def check_admin_files(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else validate_document_refs(v)


class SubmissionsListResponse(BaseModel):
    submissions: list[SubmissionRecord]


class SubmissionTypeItem(BaseModel):
    id: SubmissionType
    label: str


class SubmissionTypesResponse(BaseModel):
    types: list[SubmissionTypeItem]
