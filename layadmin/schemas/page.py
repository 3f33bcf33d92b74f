"""Page-related schemas."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

KNOWN_PAGE_FIELDS = ("uri", "id", "title", "styles", "scripts", "components")


class PageDescriptor(BaseModel):
    """Normalized admin page definition.

    Keys outside the known set are kept verbatim in ``extra`` so templates
    still see everything the page file declared.
    """

    model_config = ConfigDict(frozen=True)

    uri: str = Field(min_length=1)
    id: str
    title: str
    styles: list[str] = Field(default_factory=list)
    scripts: list[str] = Field(default_factory=list)
    components: list[str] = Field(default_factory=list)
    extra: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> PageDescriptor:
        """Split a merged page object into known fields and extras."""
        known = {key: config[key] for key in KNOWN_PAGE_FIELDS if key in config}
        extra = {key: value for key, value in config.items() if key not in KNOWN_PAGE_FIELDS}
        return cls(**known, extra=extra)

    @property
    def view(self) -> str | None:
        """Template name declared by the page, if any."""
        view = self.extra.get("view")
        return view if isinstance(view, str) and view else None

    def as_view_dict(self) -> dict[str, Any]:
        """Flatten back into the open-schema shape templates consume."""
        return {**self.extra, **self.model_dump(exclude={"extra"})}


class PagesResponse(BaseModel):
    """All page descriptors keyed by their relative file path."""

    pages: dict[str, PageDescriptor]


class BootstrapContext(BaseModel):
    """Per-request payload handed to admin views."""

    version: str
    params: dict[str, Any] = Field(default_factory=dict)
    page: PageDescriptor | None = None
