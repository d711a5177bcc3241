"""TranscriptionClient — abstract base for speech-to-text backends."""
from abc import ABC, abstractmethod

from transcribot.media.audio import Waveform


class TranscriptionClient(ABC):
    @abstractmethod
    async def transcribe(self, waveform: Waveform) -> str:
        """Convert a canonical 16 kHz mono waveform to text.

        Returns one line per recognized segment. Raises TranscribeError on failure
        and never returns an empty transcript.
        """
        ...


def join_lines(lines) -> str:
    """Strip each line, drop blanks, and terminate every kept line with a newline."""
    return "".join(f"{line}\n" for line in map(str.strip, lines) if line)
