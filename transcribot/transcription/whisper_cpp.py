"""WhisperCppClient — local whisper.cpp binary backend."""
import asyncio
import logging

from transcribot.constants import (
    WHISPER_CPP_FILE_FLAG,
    WHISPER_CPP_LANGUAGE_FLAG,
    WHISPER_CPP_MODEL_FLAG,
    WHISPER_CPP_NO_TIMESTAMPS_FLAG,
)
from transcribot.errors import TranscribeError
from transcribot.media.audio import Waveform
from transcribot.transcription.client import TranscriptionClient, join_lines

logger = logging.getLogger(__name__)


class WhisperCppClient(TranscriptionClient):

    def __init__(self, binary_path: str, model_path: str, language: str) -> None:
        self._binary = binary_path
        self._model = model_path
        self._language = language

    def build_command(self, waveform: Waveform) -> list[str]:
        return [
            self._binary,
            WHISPER_CPP_MODEL_FLAG,
            self._model,
            WHISPER_CPP_FILE_FLAG,
            str(waveform.path),
            WHISPER_CPP_LANGUAGE_FLAG,
            self._language,
            WHISPER_CPP_NO_TIMESTAMPS_FLAG,
        ]

    async def transcribe(self, waveform: Waveform) -> str:
        logger.info("Calling whisper.cpp…")
        try:
            process = await asyncio.create_subprocess_exec(
                *self.build_command(waveform),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise TranscribeError(f"could not start {self._binary}: {exc}") from exc

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            match process.returncode:
                case None:
                    logger.info("Run cancelled, killing whisper.cpp (pid %s)", process.pid)
                    process.kill()
                case _:
                    pass
            await process.wait()
            raise

        match process.returncode:
            case 0:
                pass
            case code:
                err = stderr.decode(errors="replace").strip()[-200:] if stderr else ""
                logger.error("whisper.cpp error: %s", err or code)
                raise TranscribeError(f"whisper.cpp exited with {code}: {err or 'no output'}")

        text = join_lines(stdout.decode(errors="replace").splitlines()) if stdout else ""
        match text:
            case "":
                raise TranscribeError("whisper.cpp produced no text")
            case _:
                return text
