"""Inbound events produced by the transport and consumed by the pipeline."""
from dataclasses import dataclass

from transcribot.constants import DEFAULT_AUDIO_SUFFIX


@dataclass(frozen=True)
class SelectionEvent:
    requester_id: str
    backend_name: str


@dataclass(frozen=True)
class AudioEvent:
    requester_id: str
    remote_ref: str
    content_id: str
    suffix: str = DEFAULT_AUDIO_SUFFIX
