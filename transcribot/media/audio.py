"""AudioAsset and Waveform — the two artifacts a pipeline run carries."""
import wave
from dataclasses import dataclass
from pathlib import Path

from transcribot.constants import (
    WAVEFORM_CHANNELS,
    WAVEFORM_SAMPLE_RATE,
    WAVEFORM_SAMPLE_WIDTH,
)


@dataclass(frozen=True)
class AudioAsset:
    """Raw downloaded audio, named after the remote file's identifier."""

    path: Path
    content_id: str
    size: int


@dataclass(frozen=True)
class Waveform:
    """A WAV file of linear PCM samples, as read from its header."""

    path: Path
    sample_rate: int
    channels: int
    sample_width: int
    frames: int

    @classmethod
    def from_file(cls, path: Path) -> "Waveform":
        """Read the WAV header. Raises wave.Error or OSError on unreadable files."""
        with wave.open(str(path), "rb") as wav:
            return cls(
                path=path,
                sample_rate=wav.getframerate(),
                channels=wav.getnchannels(),
                sample_width=wav.getsampwidth(),
                frames=wav.getnframes(),
            )

    @property
    def is_canonical(self) -> bool:
        return (self.sample_rate, self.channels, self.sample_width) == (
            WAVEFORM_SAMPLE_RATE,
            WAVEFORM_CHANNELS,
            WAVEFORM_SAMPLE_WIDTH,
        )

    @property
    def duration(self) -> float:
        match self.sample_rate:
            case 0:
                return 0.0
            case rate:
                return self.frames / rate

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()
