"""HTTPS enforcement for admin and admin API routes."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp

    from layadmin.config import Settings

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = (80, 443)


class HTTPSRedirectForAdminMiddleware(BaseHTTPMiddleware):
    """Redirect plain-HTTP admin requests to their https:// URL.

    Only paths under the web or API route prefix are affected, and only when
    ``settings.force_https`` is on.  GET/HEAD get a 307, everything else a 308
    so the method and body survive the redirect.

    Prefixes match with a plain ``startswith``, the same test
    ``PageConfigResolver.is_admin_route`` uses, so ``/administrator`` is
    protected along with ``/admin/...``.
    """

    def __init__(self, app: ASGIApp, settings: Settings) -> None:
        super().__init__(app)
        self.settings = settings

    def _is_protected(self, path: str) -> bool:
        return path.startswith((self.settings.web_route_prefix, self.settings.api_route_prefix))

    def _scheme(self, request: Request) -> str:
        if self.settings.trust_forwarded_proto:
            forwarded = request.headers.get("x-forwarded-proto")
            if forwarded:
                return forwarded.split(",", 1)[0].strip().lower()
        return request.url.scheme

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if (
            not self.settings.force_https
            or not self._is_protected(request.url.path)
            or self._scheme(request) != "http"
        ):
            return await call_next(request)

        port = request.url.port
        if port in _DEFAULT_PORTS:
            port = None
        target = request.url.replace(scheme="https", port=port)
        status_code = 307 if request.method in ("GET", "HEAD") else 308
        logger.debug("Redirecting %s to %s", request.url.path, target)
        return RedirectResponse(str(target), status_code=status_code)
