"""
Health check endpoint for API v1.
"""

from typing import Dict

from fastapi import APIRouter


router = APIRouter()


@router.get("/health")
async def health() -> Dict[str, str]:
    """Report that the service is up.  No authentication required."""
    return {"status": "ok"}
