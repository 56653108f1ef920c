"""Port interface for turning audio-source descriptors into playable input."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from phantom_radio.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.value_objects import AudioSource


class ResolvedAudio(BaseModel):
    """Input ready to hand to FFmpeg."""

    model_config = ConfigDict(frozen=True)

    input: NonEmptyStr
    is_stream: bool = False
    before_options: str | None = None
    options: str | None = None


class AudioSourceResolver(ABC):
    """Interface for resolving a track's audio source."""

    @abstractmethod
    async def resolve(self, source: "AudioSource") -> ResolvedAudio:
        """Resolve a local file or stream reference.

        Raises ``AudioSourceUnresolvableError`` when nothing playable is found.
        """
        ...
