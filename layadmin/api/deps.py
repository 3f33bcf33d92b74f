"""Shared API dependencies: settings, page resolver, templates."""

from __future__ import annotations

from fastapi import Request
from starlette.templating import Jinja2Templates

from layadmin.config import Settings
from layadmin.services.page_service import PageConfigResolver


def get_settings(request: Request) -> Settings:
    """Get application settings from app state."""
    settings: Settings = request.app.state.settings
    return settings


def get_page_resolver(request: Request) -> PageConfigResolver:
    """Get the page configuration resolver from app state."""
    resolver: PageConfigResolver = request.app.state.page_resolver
    return resolver


def get_templates(request: Request) -> Jinja2Templates:
    """Get the template engine from app state."""
    templates: Jinja2Templates = request.app.state.templates
    return templates
