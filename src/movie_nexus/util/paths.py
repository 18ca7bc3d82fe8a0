from __future__ import annotations

from pathlib import PurePath
from urllib.parse import unquote_to_bytes


def public_path(relative_path: PurePath) -> str:
    """Join the segments of a catalogue-relative path with ``/``.

    Only ordinary name segments are allowed; an anchored path, a ``..``
    segment or an empty path is rejected rather than normalised.
    """
    if relative_path.anchor:
        raise ValueError(f"Path {relative_path} is not relative")
    parts = relative_path.parts
    if not parts:
        raise ValueError("Path is empty")
    for part in parts:
        if part in (".", ".."):
            raise ValueError(
                f"Path {relative_path} does not consist only of normal components"
            )
    return "/".join(parts)


def has_undecodable_name(name: str) -> bool:
    """True when the OS handed back bytes that are not valid text."""
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        return True
    return False


def decode_request_path(raw_path: bytes) -> str:
    """Percent-decode a raw URL path, requiring the result to be UTF-8."""
    return unquote_to_bytes(raw_path).decode("utf-8")
