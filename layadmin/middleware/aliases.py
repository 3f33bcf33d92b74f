"""Middleware registered under stable alias names.

``Settings.middleware`` lists aliases; ``apply_middleware`` installs them in
order, so hosts can enable or drop LayAdmin middleware from configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.middleware.gzip import GZipMiddleware

from layadmin.middleware.https import HTTPSRedirectForAdminMiddleware

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from fastapi import FastAPI

    from layadmin.config import Settings


def _https(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(HTTPSRedirectForAdminMiddleware, settings=settings)


def _gzip(app: FastAPI, settings: Settings) -> None:
    app.add_middleware(GZipMiddleware, minimum_size=500)


MIDDLEWARE_ALIASES: dict[str, Callable[[FastAPI, Settings], None]] = {
    "layadmin.https": _https,
    "layadmin.gzip": _gzip,
}


def apply_middleware(app: FastAPI, names: Iterable[str], settings: Settings) -> None:
    """Install the middleware behind each alias in *names*.

    Raises ValueError for an unknown alias.
    """
    for name in names:
        installer = MIDDLEWARE_ALIASES.get(name)
        if installer is None:
            known = ", ".join(sorted(MIDDLEWARE_ALIASES))
            raise ValueError(f"Unknown middleware alias {name!r} (known: {known})")
        installer(app, settings)
