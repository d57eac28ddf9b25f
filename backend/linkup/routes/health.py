"""
LinkUp Backend: Health Check Route
====================================

What:  GET /health for Docker health checks and load balancer probes.
How:   Runs `SELECT 1` against the app's engine; the service is only
       healthy when the database answers.
"""

import logging
import time

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text

from linkup import __version__
from linkup.context import AppContext
from linkup.dependencies import get_context
from linkup.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Module-level: initialized once when the module loads
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    context: AppContext = Depends(get_context),
) -> HealthResponse:
    """
    Probe the database and report aggregate status.

    Returns 200 when healthy and 503 when the database is unreachable so
    load balancers stop routing to this instance.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        async with context.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if overall != "healthy":
        response.status_code = 503

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
