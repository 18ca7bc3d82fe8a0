from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class SidecarConfig(BaseModel):
    """Metadata stored next to a video as ``<stem>.toml``."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    title: StrictStr
    subtitle: StrictStr | None = None
    duration: StrictStr = Field(..., description="ISO-8601 duration, e.g. PT1H32M")
    text_track_language: StrictStr | None = Field(None, alias="text-track-language")
