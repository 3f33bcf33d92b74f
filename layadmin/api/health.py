"""Health check endpoint."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from layadmin.api.deps import get_page_resolver
from layadmin.exceptions import PageConfigError
from layadmin.services.page_service import PageConfigResolver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    pages: str
    page_count: int


@router.get("/api/health", response_model=HealthResponse)
async def health_check(
    resolver: Annotated[PageConfigResolver, Depends(get_page_resolver)],
) -> HealthResponse:
    """Health check endpoint for monitoring and load balancers."""
    pages_status = "ok"
    page_count = 0
    try:
        page_count = len(resolver.resolve_table())
    except PageConfigError:
        logger.warning("Health check page configuration load failed", exc_info=True)
        pages_status = "error"

    return HealthResponse(
        status="ok" if pages_status == "ok" else "degraded",
        version=resolver.version(),
        pages=pages_status,
        page_count=page_count,
    )
