# formarchive/main.py
import time
import uuid

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from formarchive.core.logging_config import (
    bind_request_context,
    clear_request_context,
    logger,
    setup_logging,
)
from formarchive.core.settings import load_config
from formarchive.routers import intake, submissions

setup_logging(load_config().log_level)

# ----------------------------------------------------
# App init
# ----------------------------------------------------
# No CORSMiddleware: /submissions answers its own preflight and sets the
# CORS headers on every response.
app = FastAPI(title="formarchive", version="0.1.0")

logger.info("startup", service="formarchive-api")


# ----------------------------------------------------
# Health
# ----------------------------------------------------
@app.get("/health", include_in_schema=True)
def health() -> dict:
    return {"status": "ok"}


# ----------------------------------------------------
# Logging middleware
# ----------------------------------------------------
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    start = time.time()

    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    client_ip = request.client.host if request.client else "unknown"

    bind_request_context(
        request_id=request_id,
        ip=client_ip,
        endpoint=str(request.url.path),
        method=request.method,
    )

    logger.info("request_started")
    try:
        response = await call_next(request)
        latency_ms = round((time.time() - start) * 1000, 2)

        logger.bind(status_code=response.status_code, latency_ms=latency_ms).info(
            "request_finished"
        )
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        clear_request_context()


# ----------------------------------------------------
# Routers
# ----------------------------------------------------
app.include_router(submissions.router)
app.include_router(intake.router)
app.add_exception_handler(StarletteHTTPException, submissions.submissions_http_exception_handler)
