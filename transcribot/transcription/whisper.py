"""OpenAIWhisperClient — OpenAI Whisper speech-to-text backend."""
from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from transcribot.constants import WHISPER_MODEL
from transcribot.errors import TranscribeError
from transcribot.media.audio import Waveform
from transcribot.transcription.client import TranscriptionClient, join_lines


class OpenAIWhisperClient(TranscriptionClient):

    def __init__(self, api_key: str, language: Optional[str] = None) -> None:
        self._api_key = api_key
        self._language = language

    async def transcribe(self, waveform: Waveform) -> str:
        options = {"language": self._language} if self._language else {}
        try:
            async with AsyncOpenAI(api_key=self._api_key) as client:
                with open(waveform.path, "rb") as audio_file:
                    response = await client.audio.transcriptions.create(
                        model=WHISPER_MODEL,
                        file=audio_file,
                        **options,
                    )
        except OpenAIError as exc:
            raise TranscribeError(f"OpenAI transcription error: {exc}") from exc
        except OSError as exc:
            raise TranscribeError(f"could not read {waveform.path.name}: {exc}") from exc

        text = join_lines((response.text or "").splitlines())
        match text:
            case "":
                raise TranscribeError("OpenAI returned an empty transcript")
            case _:
                return text
