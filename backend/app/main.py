from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
from datetime import datetime

from app.core.config import settings
from app.routers import (
    quiz,
    recommendations,
    services,
    products,
    podcasts,
)
from app.database import init_db
from app.scheduler import start_scheduler, stop_scheduler

# ----------------------------
# Logging
# ----------------------------
logger = logging.getLogger("wellness")
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Server fingerprint for debugging
SERVER_BOOT_ID = f"wellness-backend::{os.getpid()}::{datetime.utcnow().isoformat()}"

app = FastAPI(title="Wellness Marketplace API", debug=settings.DEBUG)

BUILD_ID = os.getenv("BUILD_ID", "missing")


# ----------------------------
# CORS
# ----------------------------
cors_origins = settings.cors_origins_list
logger.info("[CORS] allow_origins=%s", cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_build_header(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Wellness-Build"] = BUILD_ID
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("[UNHANDLED] %s %s", request.method, request.url.path)

    response = JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error"}
    )

    # Ensure CORS headers are present in error responses
    origin = request.headers.get("origin")
    if origin and origin in cors_origins:
        response.headers["Access-Control-Allow-Origin"] = origin
        response.headers["Access-Control-Allow-Credentials"] = "true"

    return response


# ----------------------------
# Routers
# ----------------------------
app.include_router(quiz.router, prefix="/api")
app.include_router(recommendations.router, prefix="/api")
app.include_router(services.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(podcasts.router, prefix="/api")


@app.on_event("startup")
def on_startup() -> None:
    logger.info("[BOOT] %s", SERVER_BOOT_ID)
    init_db()
    if settings.ENABLE_RETENTION_SWEEP:
        start_scheduler()


@app.on_event("shutdown")
def on_shutdown() -> None:
    stop_scheduler()


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/api/health")
def api_health_check():
    return {"status": "ok"}


@app.get("/api/_debug/server-id")
def server_id():
    return {"server_id": SERVER_BOOT_ID, "build_id": BUILD_ID}
