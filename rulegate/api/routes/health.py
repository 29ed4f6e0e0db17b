"""
Health Check Route — GET /health
"""

from __future__ import annotations

from fastapi import APIRouter

from rulegate.config import settings
from rulegate.core.registry import RULESET_VERSION

router = APIRouter()


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "1.0.0",
        "ruleset_version": RULESET_VERSION,
        "default_profile": settings.default_profile,
        "engine": "deterministic",
    }
