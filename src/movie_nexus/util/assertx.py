from __future__ import annotations

from pathlib import Path


class ValidationError(RuntimeError):
    pass


def assert_dir_exists(path: Path, message: str | None = None) -> None:
    if not path.is_dir():
        raise ValidationError(message or f"Expected directory to exist: {path}")
