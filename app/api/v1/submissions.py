"""Submission endpoints: citizens create and track requests, admins review and resolve them."""

from fastapi import APIRouter, status

from app.api.v1.auth import Actor, SettingsDep, StoresDep
from app.schemas.submission import (
    SUBMISSION_TYPE_LABELS,
    SubmissionCreate,
    SubmissionRecord,
    SubmissionsListResponse,
    SubmissionTypeItem,
    SubmissionTypesResponse,
    SubmissionUpdate,
)
from app.services import submissions

router = APIRouter()


@router.get("/types", response_model=SubmissionTypesResponse)
def list_submission_types() -> SubmissionTypesResponse:
    """Catalog of document types with their display labels."""
    return SubmissionTypesResponse(
        types=[
            SubmissionTypeItem(id=type_id, label=label)
            for type_id, label in SUBMISSION_TYPE_LABELS.items()
        ]
    )


@router.post("", response_model=SubmissionRecord, status_code=status.HTTP_201_CREATED)
def create_submission(
    body: SubmissionCreate,
    actor: Actor,
    stores: StoresDep,
    settings: SettingsDep,
) -> SubmissionRecord:
    """
    Submit a document request as the signed-in user.

    Upload supporting files first (POST /upload) and pass the returned
    references in ``documents``. The new submission is always ``pending``.
    """
    return submissions.create_submission(stores.submissions, actor, body, settings=settings)


@router.get("", response_model=SubmissionsListResponse)
def list_all_submissions(actor: Actor, stores: StoresDep) -> SubmissionsListResponse:
    """Every submission, newest first (admin only)."""
    return SubmissionsListResponse(
        submissions=submissions.list_all_submissions(stores.submissions, actor)
    )


@router.get("/me", response_model=SubmissionsListResponse)
def list_my_submissions(actor: Actor, stores: StoresDep) -> SubmissionsListResponse:
    return SubmissionsListResponse(
        submissions=submissions.list_user_submissions(stores.submissions, actor)
    )


@router.get("/{submission_id}", response_model=SubmissionRecord)
def get_submission(submission_id: str, actor: Actor, stores: StoresDep) -> SubmissionRecord:
    return submissions.get_submission(stores.submissions, actor, submission_id)


@router.patch("/{submission_id}", response_model=SubmissionRecord)
def update_submission(
    submission_id: str,
    body: SubmissionUpdate,
    actor: Actor,
    stores: StoresDep,
    settings: SettingsDep,
) -> SubmissionRecord:
    """
    Change status, notes or result files (admin only).

    Allowed status changes: pending -> processing/completed/rejected and
    processing -> completed/rejected. Completed and rejected are final;
    anything else returns 409.
    """
    return submissions.update_submission(
        stores.submissions, actor, submission_id, body, settings=settings
    )
