"""Request/response schemas for the upload endpoint."""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    """Response after successfully storing uploaded files."""

    message: str = Field(default="File berhasil diunggah")
    file_urls: list[str] = Field(
        default_factory=list,
        description="Stable references (/uploads/<name>) usable in submission and template fields.",
    )
