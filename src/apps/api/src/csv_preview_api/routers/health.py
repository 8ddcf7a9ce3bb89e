"""Health check endpoint."""
from fastapi import APIRouter

from csv_preview_api.routers.previews import SESSIONS

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Health check with the number of open preview sessions."""
    return {"status": "ok", "sessions": len(SESSIONS)}
