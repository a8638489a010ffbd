"""Health check endpoint with optional database connectivity check."""

import time
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from userapi.core.config import settings
from userapi.core.database import check_db_connected, get_db
from userapi.schemas.health import HealthResponse

router = APIRouter()

_STARTED_AT = time.monotonic()


@router.get("", response_model=HealthResponse)
def get_health(db: Session = Depends(get_db)) -> HealthResponse:
    """
    Return service health status, uptime and database connectivity.
    Used by load balancers and monitoring.
    """
    db_status = "connected" if check_db_connected(db) else "disconnected"

    return HealthResponse(
        status="OK",
        timestamp=datetime.now(UTC),
        uptime=round(time.monotonic() - _STARTED_AT, 3),
        environment=settings.APP_ENV,
        database=db_status,
    )
