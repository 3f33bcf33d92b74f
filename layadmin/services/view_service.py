"""View service: Jinja2 template setup and admin page rendering."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import (
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PrefixLoader,
    TemplateNotFound,
    select_autoescape,
)
from starlette.templating import Jinja2Templates

from layadmin import VERSION

if TYPE_CHECKING:
    from jinja2 import BaseLoader
    from starlette.requests import Request
    from starlette.responses import Response

    from layadmin.config import Settings
    from layadmin.schemas.page import BootstrapContext

logger = logging.getLogger(__name__)

BUNDLED_VIEWS_DIR = Path(__file__).resolve().parent.parent / "resources" / "views"
VIEW_NAMESPACE = "layadmin"
NOT_FOUND_VIEW = f"{VIEW_NAMESPACE}/errors/404.html"


def _layadmin_globals(request: Request) -> dict[str, Any]:
    """Expose package-wide values to every template."""
    settings: Settings = request.app.state.settings
    return {"layadmin_version": VERSION, "layadmin_title": settings.title}


def create_templates(settings: Settings) -> Jinja2Templates:
    """Build the template engine.

    Host views in ``settings.views_dir`` are searched first, so a host can
    override any bundled ``layadmin/...`` template by shadowing its path.
    """
    loaders: list[BaseLoader] = []
    if settings.views_dir is not None:
        loaders.append(FileSystemLoader(str(settings.views_dir)))
    loaders.append(PrefixLoader({VIEW_NAMESPACE: FileSystemLoader(str(BUNDLED_VIEWS_DIR))}))

    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    return Jinja2Templates(env=env, context_processors=[_layadmin_globals])


def view_exists(templates: Jinja2Templates, name: str) -> bool:
    """Check whether *name* resolves to a template."""
    try:
        templates.env.get_template(name)
    except TemplateNotFound:
        return False
    return True


def render_not_found(
    request: Request, templates: Jinja2Templates, context: dict[str, Any] | None = None
) -> Response:
    """Render the 404 fallback view."""
    return templates.TemplateResponse(
        request,
        NOT_FOUND_VIEW,
        {"path": request.url.path, **(context or {})},
        status_code=404,
    )


def render_page(
    request: Request, templates: Jinja2Templates, context: BootstrapContext
) -> Response:
    """Render the view declared by the page, or the 404 view if it has none."""
    page = context.page
    view = page.view if page is not None else None
    if page is None or view is None or not view_exists(templates, view):
        logger.debug("No renderable view for %s (view=%r)", request.url.path, view)
        return render_not_found(request, templates, {"version": context.version})

    return templates.TemplateResponse(
        request,
        view,
        {
            "version": context.version,
            "params": context.params,
            "page": page.as_view_dict(),
            "layadmin": context.model_dump(mode="json"),
        },
    )
