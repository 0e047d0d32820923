"""Health check endpoint."""

from fastapi import APIRouter

from authgate import __version__

router = APIRouter()


@router.get("/health")
async def health_check():
    """Liveness probe. Does not touch the user store."""
    return {"status": "ok", "version": __version__}
