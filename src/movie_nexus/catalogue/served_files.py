from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from movie_nexus.models.catalogue import CatalogueItem, DirectoryItem, RelativizedPath


def extract_served_files(catalogue: Iterable[CatalogueItem]) -> set[RelativizedPath]:
    """Collect every file a client may request: videos and their text tracks."""
    served: set[RelativizedPath] = set()
    for item in catalogue:
        if isinstance(item, DirectoryItem):
            served |= extract_served_files(item.contents)
        else:
            served.update(item.served_paths())
    return served


class ServedFileIndex:
    """Read-only lookup of served files by their public relative path."""

    def __init__(self, files: Iterable[RelativizedPath]) -> None:
        self._by_public_path: Mapping[str, RelativizedPath] = MappingProxyType(
            {served.public_path(): served for served in files}
        )

    @classmethod
    def from_catalogue(cls, catalogue: Iterable[CatalogueItem]) -> "ServedFileIndex":
        return cls(extract_served_files(catalogue))

    def lookup(self, public_path: str) -> RelativizedPath | None:
        return self._by_public_path.get(public_path)

    def __contains__(self, public_path: object) -> bool:
        return public_path in self._by_public_path

    def __iter__(self) -> Iterator[RelativizedPath]:
        return iter(self._by_public_path.values())

    def __len__(self) -> int:
        return len(self._by_public_path)
