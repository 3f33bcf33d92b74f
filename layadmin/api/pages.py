"""Page configuration API endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from layadmin.api.deps import get_page_resolver
from layadmin.schemas.page import BootstrapContext, PageDescriptor, PagesResponse
from layadmin.services.page_service import PageConfigResolver

router = APIRouter(tags=["pages"])


@router.get("/pages", response_model=PagesResponse)
async def list_pages(
    resolver: Annotated[PageConfigResolver, Depends(get_page_resolver)],
) -> PagesResponse:
    """List every page definition keyed by its file path."""
    return PagesResponse(pages=resolver.resolve_table().entries)


@router.get("/pages/lookup", response_model=PageDescriptor)
async def lookup_page(
    path: Annotated[str, Query(min_length=1, max_length=2048)],
    resolver: Annotated[PageConfigResolver, Depends(get_page_resolver)],
) -> PageDescriptor:
    """Get the page definition serving a request path."""
    page = resolver.lookup(path)
    if page is None:
        raise HTTPException(status_code=400, detail="Not an admin route")
    return page


@router.get("/bootstrap", response_model=BootstrapContext)
async def bootstrap(
    request: Request,
    path: Annotated[str, Query(min_length=1, max_length=2048)],
    resolver: Annotated[PageConfigResolver, Depends(get_page_resolver)],
) -> BootstrapContext:
    """Get the view bootstrap payload for a request path.

    Query parameters other than ``path`` are passed through as ``params``.
    """
    params = {key: value for key, value in request.query_params.items() if key != "path"}
    return resolver.bootstrap_context(path, params)
