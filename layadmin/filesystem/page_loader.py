"""Page configuration directory scanner and validator."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from layadmin.exceptions import ConfigParseError, ConfigValidationError
from layadmin.schemas.page import PageDescriptor

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

ID_DELIMITER = "-"


def discover_page_files(root: Path) -> list[Path]:
    """Recursively discover every page definition file under *root*.

    Files are returned sorted by path so scan order is stable across runs.
    """
    if not root.is_dir():
        return []
    return sorted(p for p in root.rglob("*") if p.is_file())


def relative_key(path: Path, root: Path) -> str:
    """Return the table key for *path*: its POSIX path relative to *root*."""
    return path.relative_to(root).as_posix()


def normalize_uri(uri: str, prefix: str) -> str:
    """Prefix *uri* with the admin route prefix unless it already has it.

    ``dashboard`` and ``/dashboard`` both become ``/admin/dashboard``.
    """
    if uri.startswith(f"{prefix}/"):
        return uri
    return f"{prefix}/{uri.lstrip('/')}"


def page_id_for(uri: str) -> str:
    """Derive a stable page id by replacing path separators in *uri*."""
    return uri.replace("/", ID_DELIMITER)


def validate_page_config(
    key: str, config: Any, prefix: str, default_title: str
) -> PageDescriptor:
    """Validate one parsed page file and merge in the defaults.

    Values present in the file win over the defaults, except ``uri`` which is
    always stored in its prefixed form.
    """
    if not isinstance(config, dict):
        raise ConfigValidationError(key, "page configuration must be a JSON object")
    if "uri" not in config:
        raise ConfigValidationError(key, "missing uri")
    uri = config["uri"]
    if not isinstance(uri, str) or not uri.strip("/"):
        raise ConfigValidationError(key, "uri must be a non-empty string")

    uri = normalize_uri(uri, prefix)
    merged: dict[str, Any] = {
        "id": page_id_for(uri),
        "title": default_title,
        "styles": [],
        "scripts": [],
        "components": [],
        **config,
        "uri": uri,
    }
    try:
        return PageDescriptor.from_config(merged)
    except ValidationError as exc:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
        raise ConfigValidationError(key, f"invalid fields: {fields}") from exc


def load_page_file(path: Path, root: Path) -> Any:
    """Read and parse one page definition file as UTF-8 JSON."""
    key = relative_key(path, root)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigParseError(key, str(exc)) from exc


def parse_page_configs(root: Path, prefix: str, default_title: str) -> dict[str, PageDescriptor]:
    """Scan *root* and return every page descriptor keyed by relative path.

    The first malformed or invalid file aborts the whole scan.
    """
    pages: dict[str, PageDescriptor] = {}
    for path in discover_page_files(root):
        key = relative_key(path, root)
        config = load_page_file(path, root)
        pages[key] = validate_page_config(key, config, prefix, default_title)
    logger.debug("Parsed %d page definitions from %s", len(pages), root)
    return pages
