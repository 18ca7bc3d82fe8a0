from __future__ import annotations

from pathlib import Path
import tomllib
from typing import TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


def read_toml(path: Path, model_type: type[T]) -> T:
    """Load and validate a TOML document.

    I/O failures surface as ``OSError``; undecodable text, TOML syntax errors
    and schema violations all surface as ``ValueError`` subclasses.
    """
    payload = tomllib.loads(path.read_bytes().decode("utf-8"))
    return model_type.model_validate(payload)


def write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
