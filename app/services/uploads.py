"""Local file uploads: validate a batch, store it under UPLOAD_DIR, hand back stable references."""

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from app.core.errors import NotFound, UploadRejected

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads/"

ALLOWED_MIME_TYPES: frozenset[str] = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/jpg",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)

# Clients that cannot sniff the type send this; the extension check still applies.
_GENERIC_MIME_TYPES = frozenset({"", "application/octet-stream"})


@dataclass(frozen=True)
class IncomingFile:
    """One file from a multipart request, already read into memory."""

    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def extension(self) -> str:
        return Path(self.filename).suffix.lower()


def validate_batch(files: list[IncomingFile], settings: "Settings") -> None:
    """Reject the whole batch if any file breaks the count, size or type limits."""
    if not files:
        raise UploadRejected("Tidak ada file yang diunggah")
    if len(files) > settings.UPLOAD_MAX_FILES:
        raise UploadRejected(f"Maksimal {settings.UPLOAD_MAX_FILES} file diperbolehkan")
    max_mb = settings.UPLOAD_MAX_FILE_BYTES / (1024 * 1024)
    for f in files:
        if len(f.content) > settings.UPLOAD_MAX_FILE_BYTES:
            raise UploadRejected(
                f"File {f.filename} melebihi batas ukuran maksimal {max_mb:g}MB"
            )
        if f.extension not in settings.UPLOAD_ALLOWED_EXTENSIONS:
            raise UploadRejected(
                f"File {f.filename} tidak sesuai dengan format yang diperbolehkan"
            )
        content_type = (f.content_type or "").split(";")[0].strip().lower()
        if content_type not in _GENERIC_MIME_TYPES and content_type not in ALLOWED_MIME_TYPES:
            raise UploadRejected(f"Tipe file {content_type} tidak diizinkan")


def store_batch(files: list[IncomingFile], settings: "Settings") -> list[str]:
    """
    Validate, then write each file as <uuid4 hex><ext>.

    Returns references in input order. Nothing is written when validation fails.
    """
    try:
        validate_batch(files, settings)
    except UploadRejected as e:
        logger.warning("Upload rejected", extra={"file_count": len(files), "reason": e.message})
        raise
    upload_dir = Path(settings.UPLOAD_DIR)
    upload_dir.mkdir(parents=True, exist_ok=True)
    refs: list[str] = []
    for f in files:
        stored_name = f"{uuid.uuid4().hex}{f.extension}"
        (upload_dir / stored_name).write_bytes(f.content)
        refs.append(f"{UPLOAD_URL_PREFIX}{stored_name}")
    logger.info(
        "Stored uploaded files",
        extra={"file_count": len(refs), "total_bytes": sum(len(f.content) for f in files)},
    )
    return refs


def resolve_upload(name: str, settings: "Settings") -> Path:
    """Path of a stored upload. Anything outside UPLOAD_DIR or missing is NotFound."""
    upload_dir = Path(settings.UPLOAD_DIR).resolve()
    if not name or name.startswith(".") or "/" in name or "\\" in name:
        raise NotFound("File tidak ditemukan")
    path = (upload_dir / name).resolve()
    if path.parent != upload_dir or not path.is_file():
        raise NotFound("File tidak ditemukan")
    return path


def ensure_uploaded(refs: list[str], settings: "Settings") -> None:
    """Every reference must name a file already stored under UPLOAD_DIR."""
    for ref in refs:
        try:
            resolve_upload(ref.removeprefix(UPLOAD_URL_PREFIX), settings)
        except NotFound as e:
            raise UploadRejected(f"Dokumen {ref} belum diunggah", cause=e) from e
