import logging

from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api import state
from storage import db
from storage.postgres_store import PostgresLectureStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint for container orchestration."""
    health = {
        "status": "healthy",
        "storage": "postgres" if isinstance(state.lecture_store, PostgresLectureStore) else "in-memory",
        "calendar": "enabled" if state.calendar.enabled else "disabled",
    }

    if health["storage"] == "postgres":
        health["database"] = await db.health_check()
        if health["database"]["status"] != "healthy":
            health["status"] = "degraded"

    return health


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
