import logging
import os
import time

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api import state
from api.metrics import REQUESTS_TOTAL, REQUEST_LATENCY_SECONDS
from api.routers import lectures, ops, processing, tasks
from integration.calendar_integration import CalendarIntegration, load_credentials
from lecture_ai.errors import LectureAIError
from storage import db
from storage.postgres_store import PostgresLectureStore, PostgresTaskStore

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Logging configuration
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Lecture AI")

app.include_router(lectures.router)
app.include_router(processing.router)
app.include_router(tasks.router)
app.include_router(ops.router)


@app.exception_handler(LectureAIError)
async def lecture_ai_error_handler(request: Request, exc: LectureAIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc)})


@app.middleware("http")
async def record_request_metrics(request: Request, call_next):
    start = time.time()
    response = await call_next(request)

    # Label by route template so ids don't explode the label space.
    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    REQUESTS_TOTAL.labels(endpoint=endpoint, status=str(response.status_code)).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
    return response


@app.on_event("startup")
async def startup() -> None:
    if db.DATABASE_URL:
        await db.init_db_pool()
        await db.init_schema()
        state.lecture_store = PostgresLectureStore()
        state.task_store = PostgresTaskStore()
        state.processor = state.build_processor(state.lecture_store, state.task_store)
        logger.info("Using PostgreSQL storage")
    else:
        logger.info("DATABASE_URL not set, using in-memory storage")

    state.calendar = CalendarIntegration(load_credentials())
    logger.info(f"Google Calendar sync {'enabled' if state.calendar.enabled else 'disabled'}")


@app.on_event("shutdown")
async def shutdown() -> None:
    await db.close_db_pool()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
