"""Admin page views."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, Response
from starlette.templating import Jinja2Templates

from layadmin.api.deps import get_page_resolver, get_templates
from layadmin.exceptions import PageNotFoundError
from layadmin.services.page_service import PageConfigResolver
from layadmin.services.view_service import render_not_found, render_page

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


@router.get("", response_class=HTMLResponse, include_in_schema=False)
@router.get("/{page_path:path}", response_class=HTMLResponse, include_in_schema=False)
async def admin_view(
    request: Request,
    resolver: Annotated[PageConfigResolver, Depends(get_page_resolver)],
    templates: Annotated[Jinja2Templates, Depends(get_templates)],
) -> Response:
    """Render the admin page configured for the request path."""
    path = request.url.path.rstrip("/") or "/"
    try:
        context = resolver.bootstrap_context(path, dict(request.query_params))
    except PageNotFoundError:
        logger.info("No page configuration for %s", path)
        return render_not_found(request, templates)
    return render_page(request, templates, context)
