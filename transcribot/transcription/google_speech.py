"""GoogleSpeechClient — Google Cloud Speech-to-Text backend."""
import logging
from typing import Optional

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import speech

from transcribot.constants import GOOGLE_MAX_INLINE_BYTES, GOOGLE_MAX_INLINE_SECONDS
from transcribot.errors import TranscribeError
from transcribot.media.audio import Waveform
from transcribot.transcription.client import TranscriptionClient, join_lines

logger = logging.getLogger(__name__)


def top_alternatives(results) -> str:
    """First-ranked alternative of every result segment, one per line."""
    return join_lines(
        result.alternatives[0].transcript for result in results if result.alternatives
    )


class GoogleSpeechClient(TranscriptionClient):

    def __init__(
        self,
        credentials_path: Optional[str],
        language_code: str,
        max_inline_bytes: int = GOOGLE_MAX_INLINE_BYTES,
        max_inline_seconds: float = GOOGLE_MAX_INLINE_SECONDS,
    ) -> None:
        self._credentials_path = credentials_path
        self._language_code = language_code
        self._max_bytes = max_inline_bytes
        self._max_seconds = max_inline_seconds

    def _make_client(self) -> speech.SpeechAsyncClient:
        match self._credentials_path:
            case None:
                return speech.SpeechAsyncClient()
            case path:
                return speech.SpeechAsyncClient.from_service_account_file(path)

    def _check_limits(self, waveform: Waveform, size: int) -> None:
        match (size > self._max_bytes, waveform.duration > self._max_seconds):
            case (True, _):
                raise TranscribeError(
                    f"audio is {size} bytes; Google inline recognition accepts "
                    f"at most {self._max_bytes} bytes"
                )
            case (_, True):
                raise TranscribeError(
                    f"audio is {waveform.duration:.0f}s long; Google inline recognition "
                    f"accepts at most {self._max_seconds:.0f}s"
                )
            case _:
                pass

    async def transcribe(self, waveform: Waveform) -> str:
        try:
            content = waveform.read_bytes()
        except OSError as exc:
            raise TranscribeError(f"could not read {waveform.path.name}: {exc}") from exc
        self._check_limits(waveform, len(content))

        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=waveform.sample_rate,
            audio_channel_count=waveform.channels,
            language_code=self._language_code,
        )
        audio = speech.RecognitionAudio(content=content)

        logger.info("Calling Google Speech-to-Text…")
        try:
            async with self._make_client() as client:
                response = await client.recognize(config=config, audio=audio)
        except (api_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as exc:
            raise TranscribeError(f"Google Speech-to-Text error: {exc}") from exc
        except (OSError, ValueError) as exc:
            raise TranscribeError(f"Google credentials unusable: {exc}") from exc

        text = top_alternatives(response.results)
        match text:
            case "":
                raise TranscribeError("Google Speech-to-Text recognized no speech")
            case _:
                return text
