"""FastAPI application entrypoint."""
import os

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from csv_preview_api.logging import configure_logging
from csv_preview_api.routers import health, previews
from csv_preview_api.settings import get_settings
from csv_preview_core import __version__

configure_logging(get_settings().log_level)
logger = structlog.get_logger()

app = FastAPI(title="CSV Preview API", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api")
app.include_router(previews.router, prefix="/api")


@app.on_event("startup")
def startup():
    """Prepare the upload directory."""
    upload_dir = get_settings().upload_dir
    os.makedirs(upload_dir, exist_ok=True)
    logger.info("upload_dir_ready", upload_dir=upload_dir)


@app.on_event("shutdown")
def shutdown():
    """Drop every open preview session."""
    previews.close_all_sessions()
