"""Application-level exception types.

Convention:
- ``ConfigParseError`` and ``ConfigValidationError`` describe a broken page
  configuration directory.  They abort the whole table rebuild; the global
  handler logs the full message (which names the offending file) and returns
  a generic 500 to the client.
- ``PageNotFoundError`` means the path is an admin route but no page
  definition claims it.  It maps to a 404.
- A path outside the admin prefix is not an error at all: lookups return
  ``None`` for it.
"""

from __future__ import annotations


class PageConfigError(Exception):
    """Base class for page configuration failures."""


class ConfigParseError(PageConfigError):
    """Raised when a page definition file is not valid JSON."""

    def __init__(self, file: str, message: str) -> None:
        self.file = file
        self.message = message
        super().__init__(f"[{file}] parse error: {message}")


class ConfigValidationError(PageConfigError):
    """Raised when a page definition violates the schema.

    Also wraps unexpected cache backend failures, in which case ``file`` is
    ``None`` and the original exception is chained as ``__cause__``.
    """

    def __init__(self, file: str | None, message: str) -> None:
        self.file = file
        self.message = message
        if file is None:
            super().__init__(f"Invalid page configuration: {message}")
        else:
            super().__init__(f"[{file}] {message}")


class PageNotFoundError(PageConfigError):
    """Raised when an admin route has no matching page definition."""

    def __init__(self, request_path: str) -> None:
        self.request_path = request_path
        super().__init__(f"No page configuration for {request_path}")
