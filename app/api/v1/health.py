"""Health check endpoint with a database connectivity check for the SQL backend."""

from fastapi import APIRouter, Depends

from app.core.config import settings
from app.schemas.health import HealthResponse
from app.storage import Stores, get_stores

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(stores: Stores = Depends(get_stores)) -> HealthResponse:
    """
    Return service health status, the active storage backend and, for the
    database backend, database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = None
    if stores.backend == "database":
        from app.core.database import SessionLocal, check_db_connected

        with SessionLocal() as db:
            db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        storage=stores.backend,
        database=db_status,
    )
