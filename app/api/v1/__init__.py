"""API v1 routes."""

from fastapi import APIRouter

from app.api.v1 import auth, health, settings, submissions, templates, upload, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(submissions.router, prefix="/submissions", tags=["submissions"])
router.include_router(upload.router, prefix="/upload", tags=["upload"])
router.include_router(templates.router, prefix="/templates", tags=["templates"])
router.include_router(settings.router, prefix="/settings", tags=["settings"])

files_router = upload.files_router
