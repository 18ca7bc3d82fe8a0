from __future__ import annotations

from pathlib import Path

from movie_nexus.catalogue.served_files import ServedFileIndex
from movie_nexus.models.catalogue import RelativizedPath


def write_sidecar(path: Path, body: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    return path


def write_video(
    directory: Path,
    stem: str,
    title: str = "A Movie",
    duration: str = "PT1H2M3.5S",
    content: bytes = b"0123456789",
    subtitle: str | None = None,
    language: str | None = None,
    with_sidecar: bool = True,
    with_track: bool = False,
) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    video_path = directory / f"{stem}.mp4"
    video_path.write_bytes(content)
    if with_sidecar:
        lines = [f'title = "{title}"', f'duration = "{duration}"']
        if subtitle is not None:
            lines.append(f'subtitle = "{subtitle}"')
        if language is not None:
            lines.append(f'text-track-language = "{language}"')
        write_sidecar(directory / f"{stem}.toml", "\n".join(lines) + "\n")
    if with_track:
        (directory / f"{stem}.vtt").write_text("WEBVTT\n", encoding="utf-8")
    return video_path


def served_index(root: Path, *paths: Path) -> ServedFileIndex:
    return ServedFileIndex(RelativizedPath.new(root, path) for path in paths)
