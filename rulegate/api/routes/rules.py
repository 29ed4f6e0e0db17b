"""
Rules Route — GET /rules

Lists the rules of a profile in registry (priority) order.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from rulegate.config import settings
from rulegate.core.errors import UnknownProfileError
from rulegate.core.registry import PROFILES, get_registry
from rulegate.models.api_models import RuleInfo, RuleListResponse

router = APIRouter()


@router.get("/rules", response_model=RuleListResponse)
async def list_rules(profile: str | None = None):
    """Rule metadata for one profile."""
    try:
        registry = get_registry(profile or settings.default_profile)
    except UnknownProfileError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return RuleListResponse(
        profile=registry.profile,
        version=registry.version,
        fingerprint=registry.fingerprint,
        rules=[RuleInfo(**rule.describe()) for rule in registry],
    )


@router.get("/profiles")
async def list_profiles():
    """Names of the available rule set profiles."""
    return {"profiles": sorted(PROFILES), "default": settings.default_profile}
