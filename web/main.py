"""FastAPI application entrypoint."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from core.env import env_list
from core.logging import get_logger, setup_logging
from web import routers
from web.middleware.auth_context import auth_context_middleware

setup_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="vidshare API",
    description="Video library and shareable link service.",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=env_list("CORS_ALLOW_ORIGINS", ["http://localhost:3000"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def attach_auth_context(request: Request, call_next):
    """Populate request.state.user from the bearer token, when one is sent."""
    return await auth_context_middleware(request, call_next)


@app.get("/", summary="Health Check", tags=["Default"])
def health_check():
    return {"status": "ok", "message": "vidshare API is running."}


@app.get("/healthz", include_in_schema=False)
def liveness_probe():
    db_ok, db_error = routers.health.ping_database()
    payload = {"status": "ok" if db_ok else "unhealthy", "database": {"ok": db_ok}}
    if db_error:
        payload["database"]["error"] = db_error
    status_code = status.HTTP_200_OK if db_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=payload)


@app.get("/metrics", include_in_schema=False)
def prometheus_metrics():
    """Expose Prometheus metrics."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(routers.share.router, prefix="/api/v1")
app.include_router(routers.videos.router, prefix="/api/v1")
app.include_router(routers.account.router, prefix="/api/v1")
app.include_router(routers.health.router, prefix="/api/v1")
