import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from app.config import get_settings
from app.db import SessionDep
from app.services.github import load_projects

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok", "degraded"]
    version: str
    environment: str
    report_generation_configured: bool
    github_projects: int


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Report document store connectivity and which integrations are configured."""
    settings = get_settings()
    status: Literal["ok", "degraded"] = "ok"

    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: document store connectivity failed")
        status = "degraded"

    return HealthResponse(
        status=status,
        version=settings.app_version,
        environment=settings.environment,
        report_generation_configured=bool(settings.gemini_api_key),
        github_projects=len(load_projects(settings)),
    )
