import wave
from pathlib import Path

import pytest

from transcribot.media.audio import Waveform


def write_wav(path: Path, *, seconds: float = 3.0, rate: int = 16000, channels: int = 1) -> Path:
    """Silent 16-bit PCM WAV."""
    frames = int(seconds * rate)
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(rate)
        wav.writeframes(b"\x00\x00" * frames * channels)
    return path


@pytest.fixture
def make_wav():
    return write_wav


@pytest.fixture
def canonical_wav(tmp_path) -> Path:
    return write_wav(tmp_path / "clip.wav")


@pytest.fixture
def waveform(canonical_wav) -> Waveform:
    return Waveform.from_file(canonical_wav)


@pytest.fixture
def sleeping_binary(tmp_path) -> Path:
    """Executable that ignores its arguments and blocks for 30 s."""
    script = tmp_path / "slow-tool"
    script.write_text("#!/bin/sh\nexec sleep 30\n")
    script.chmod(0o755)
    return script
