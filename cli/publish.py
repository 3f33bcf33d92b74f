"""Publish bundled LayAdmin resources into a host project and manage its cache."""

from __future__ import annotations

import argparse
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

import layadmin
from layadmin.config import Settings
from layadmin.services.cache_service import InMemoryCacheStore, get_cache_store
from layadmin.services.page_service import PageConfigResolver

if TYPE_CHECKING:
    from collections.abc import Callable

RESOURCES_DIR = Path(layadmin.__file__).resolve().parent / "resources"
DEFAULT_VIEWS_DIR = Path("./resources/views")


@dataclass(frozen=True)
class PublishTag:
    """A group of bundled files and where they land in the host project."""

    source: Path
    destination: Callable[[Settings], Path]


TAGS: dict[str, PublishTag] = {
    "assets": PublishTag(RESOURCES_DIR / "assets", lambda s: s.public_dir / "layadmin"),
    "samples": PublishTag(RESOURCES_DIR / "samples", lambda s: s.page_config_dir),
    "views": PublishTag(
        RESOURCES_DIR / "views", lambda s: (s.views_dir or DEFAULT_VIEWS_DIR) / "layadmin"
    ),
}


@dataclass
class PublishResult:
    copied: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)


def publish_tree(source: Path, destination: Path, force: bool = False) -> PublishResult:
    """Copy every file under *source* into *destination*.

    Existing files are left alone unless *force* is set.
    """
    if not source.is_dir():
        raise FileNotFoundError(f"Nothing to publish: {source} does not exist")

    result = PublishResult()
    for src in sorted(p for p in source.rglob("*") if p.is_file()):
        target = destination / src.relative_to(source)
        if target.exists() and not force:
            result.skipped.append(target)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, target)
        result.copied.append(target)
    return result


def publish(
    tags: list[str], settings: Settings, dest: Path | None = None, force: bool = False
) -> PublishResult:
    """Publish the named tags, optionally into an explicit *dest*."""
    if dest is not None and len(tags) != 1:
        raise ValueError("--dest can only be used when publishing a single tag")

    combined = PublishResult()
    for name in tags:
        tag = TAGS[name]
        destination = dest if dest is not None else tag.destination(settings)
        result = publish_tree(tag.source, destination, force=force)
        combined.copied.extend(result.copied)
        combined.skipped.extend(result.skipped)
    return combined


def clear_cache(settings: Settings) -> bool:
    """Forget the cached page table. Returns False if the store is process-local."""
    store = get_cache_store(settings)
    PageConfigResolver(settings, store).flush()
    return not isinstance(store, InMemoryCacheStore)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="layadmin-publish",
        description="Publish LayAdmin resources into the current project",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    publish_parser = subparsers.add_parser("publish", help="Copy bundled resources")
    publish_parser.add_argument(
        "--tag",
        "-t",
        choices=(*TAGS.keys(), "all"),
        default="all",
        help="Resource group to publish (default: all)",
    )
    publish_parser.add_argument("--dest", "-d", type=Path, help="Override destination directory")
    publish_parser.add_argument(
        "--force", "-f", action="store_true", help="Overwrite files that already exist"
    )

    subparsers.add_parser("clear-cache", help="Forget the cached page configuration table")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = _parse_args(argv)
    settings = Settings()

    if args.command == "clear-cache":
        if not clear_cache(settings):
            print(
                f"Cache store {settings.cache_store!r} is process-local; "
                "restart the server to drop its cached pages."
            )
            return 0
        print("Page configuration cache cleared")
        return 0

    tags = list(TAGS) if args.tag == "all" else [args.tag]
    try:
        result = publish(tags, settings, dest=args.dest, force=args.force)
    except (ValueError, FileNotFoundError) as exc:
        print(f"Error: {exc}")
        return 1

    for path in result.copied:
        print(f"Published {path}")
    for path in result.skipped:
        print(f"Skipped {path} (exists, use --force to overwrite)")
    print(f"{len(result.copied)} published, {len(result.skipped)} skipped")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
