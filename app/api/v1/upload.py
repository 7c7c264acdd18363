"""Upload endpoint (multipart ``files``) and authenticated download of stored uploads."""

from typing import Annotated

from fastapi import APIRouter, File, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse

from app.api.v1.auth import Actor, SettingsDep
from app.schemas.upload import UploadResponse
from app.services.access_policy import Action, authorize
from app.services.uploads import IncomingFile, resolve_upload, store_batch

router = APIRouter()
files_router = APIRouter()


@router.post("", response_model=UploadResponse)
async def upload_files(
    actor: Actor,
    settings: SettingsDep,
    files: Annotated[list[UploadFile] | None, File()] = None,
) -> UploadResponse:
    """
    Store up to UPLOAD_MAX_FILES files (pdf, jpg, jpeg, png, doc, docx; at most
    UPLOAD_MAX_FILE_BYTES each) and return their references.

    The batch is all-or-nothing: one bad file rejects every file.
    """
    authorize(actor, Action.UPLOAD_FILES)
    incoming: list[IncomingFile] = []
    for f in files or []:
        # Read one byte past the limit so oversize files are detected without buffering them fully.
        content = await f.read(settings.UPLOAD_MAX_FILE_BYTES + 1)
        incoming.append(
            IncomingFile(
                filename=f.filename or "",
                content=content,
                content_type=f.content_type,
            )
        )
    # store_batch does blocking file I/O.
    refs = await run_in_threadpool(store_batch, incoming, settings)
    return UploadResponse(file_urls=refs)


@files_router.get("/uploads/{name}", include_in_schema=False)
def download_upload(name: str, actor: Actor, settings: SettingsDep) -> FileResponse:
    """Serve a stored upload to any signed-in user."""
    authorize(actor, Action.READ_UPLOAD)
    return FileResponse(resolve_upload(name, settings))
