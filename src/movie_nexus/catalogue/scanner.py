from __future__ import annotations

"""Catalogue builder.

Walks the media directory once at startup and turns every video that has a
valid sidecar into a catalogue entry. Entries whose metadata cannot be used
are left out; a directory that cannot be read aborts the whole scan.
"""

from dataclasses import dataclass
import logging
import os
from pathlib import Path

from movie_nexus.models.catalogue import (
    CatalogueItem,
    DirectoryItem,
    RelativizedPath,
    VideoItem,
)
from movie_nexus.models.sidecar import SidecarConfig
from movie_nexus.util.duration import parse_duration_ms
from movie_nexus.util.io import read_toml
from movie_nexus.util.logging import log_indent
from movie_nexus.util.paths import has_undecodable_name

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanOptions:
    video_extension: str = ".mp4"
    metadata_extension: str = ".toml"
    subtitle_extension: str = ".vtt"
    default_language: str = "en"


def _read_video(
    root_path: Path, path: Path, options: ScanOptions
) -> VideoItem | None:
    metadata_path = path.with_suffix(options.metadata_extension)
    if not metadata_path.is_file():
        LOGGER.debug("skip %s: no %s sidecar", path.name, options.metadata_extension)
        return None

    try:
        config = read_toml(metadata_path, SidecarConfig)
        duration_ms = parse_duration_ms(config.duration)
    except ValueError as exc:
        LOGGER.debug("skip %s: unusable sidecar (%s)", path.name, exc)
        return None

    text_tracks: dict[str, RelativizedPath] = {}
    subtitle_path = path.with_suffix(options.subtitle_extension)
    if subtitle_path.is_file():
        language = config.text_track_language or options.default_language
        text_tracks[language] = RelativizedPath.new(root_path, subtitle_path)

    return VideoItem(
        path=RelativizedPath.new(root_path, path),
        title=config.title,
        subtitle=config.subtitle,
        duration_ms=duration_ms,
        text_tracks=text_tracks,
    )


def scan_directory(
    root_path: Path, path: Path, options: ScanOptions = ScanOptions()
) -> tuple[CatalogueItem, ...]:
    """Build the catalogue for ``path``, relativizing against ``root_path``.

    Raises ``OSError`` when a directory (or a sidecar) cannot be read.
    """
    items: list[CatalogueItem] = []
    with os.scandir(path) as entries:
        for entry in entries:
            if has_undecodable_name(entry.name):
                LOGGER.warning(
                    "skip %r in %s: file name is not valid text", entry.name, path
                )
                continue
            child_path = Path(entry.path)
            if entry.is_dir(follow_symlinks=False):
                LOGGER.debug("directory %s", entry.name)
                with log_indent():
                    contents = scan_directory(root_path, child_path, options)
                items.append(DirectoryItem(title=entry.name, contents=contents))
            elif entry.is_file(follow_symlinks=False):
                if child_path.suffix != options.video_extension:
                    continue
                video = _read_video(root_path, child_path, options)
                if video is not None:
                    LOGGER.debug("video %s", entry.name)
                    items.append(video)
    return tuple(items)


def count_videos(catalogue: tuple[CatalogueItem, ...]) -> int:
    total = 0
    for item in catalogue:
        if isinstance(item, DirectoryItem):
            total += count_videos(item.contents)
        else:
            total += 1
    return total
