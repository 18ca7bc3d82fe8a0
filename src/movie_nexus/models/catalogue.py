from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    model_serializer,
)

from movie_nexus.util.paths import public_path


class RelativizedPath(BaseModel):
    """A physical file paired with its path relative to the catalogue root."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: Path
    relative_path: Path

    @classmethod
    def new(cls, root_path: Path, path: Path) -> "RelativizedPath":
        return cls(path=path, relative_path=path.relative_to(root_path))

    def public_path(self) -> str:
        return public_path(self.relative_path)

    @model_serializer
    def _serialize(self) -> str:
        return self.public_path()


class DirectoryItem(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["directory"] = "directory"
    title: str
    contents: tuple["CatalogueItem", ...] = ()


class VideoItem(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    type: Literal["file"] = "file"
    path: RelativizedPath
    title: str
    subtitle: str | None = None
    duration_ms: int = Field(..., ge=0, serialization_alias="duration")
    text_tracks: dict[str, RelativizedPath] = Field(
        default_factory=dict, serialization_alias="text-tracks"
    )
    thumbnails: tuple[Path, ...] = ()

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        if self.subtitle is None:
            data.pop("subtitle", None)
        if not self.text_tracks:
            data.pop("text-tracks", None)
            data.pop("text_tracks", None)
        if not self.thumbnails:
            data.pop("thumbnails", None)
        return data

    def served_paths(self) -> list[RelativizedPath]:
        return [self.path, *self.text_tracks.values()]


CatalogueItem = Annotated[
    Union[DirectoryItem, VideoItem], Field(discriminator="type")
]

DirectoryItem.model_rebuild()
