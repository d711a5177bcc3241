"""Transcoder — ffmpeg conversion of any input audio to 16 kHz mono PCM WAV."""
import asyncio
import logging
import time
import wave
from pathlib import Path
from typing import Optional

from transcribot.constants import (
    FFMPEG_CHANNELS_FLAG,
    FFMPEG_CODEC_FLAG,
    FFMPEG_INPUT_FLAG,
    FFMPEG_LOGLEVEL,
    FFMPEG_LOGLEVEL_FLAG,
    FFMPEG_NO_VIDEO_FLAG,
    FFMPEG_OVERWRITE_FLAG,
    FFMPEG_PCM_CODEC,
    FFMPEG_RATE_FLAG,
    MSG_TRANSCODED,
    WAVEFORM_CHANNELS,
    WAVEFORM_SAMPLE_RATE,
    WAVEFORM_SUFFIX,
)
from transcribot.errors import TranscodeError
from transcribot.media.audio import AudioAsset, Waveform

logger = logging.getLogger(__name__)


class Transcoder:
    """Stateless wrapper around one ffmpeg invocation per asset."""

    def __init__(self, ffmpeg_path: str = "ffmpeg") -> None:
        self._ffmpeg = ffmpeg_path

    def build_command(self, source: Path, target: Path) -> list[str]:
        return [
            self._ffmpeg,
            FFMPEG_OVERWRITE_FLAG,
            FFMPEG_LOGLEVEL_FLAG,
            FFMPEG_LOGLEVEL,
            FFMPEG_INPUT_FLAG,
            str(source),
            FFMPEG_NO_VIDEO_FLAG,
            FFMPEG_CODEC_FLAG,
            FFMPEG_PCM_CODEC,
            FFMPEG_RATE_FLAG,
            str(WAVEFORM_SAMPLE_RATE),
            FFMPEG_CHANNELS_FLAG,
            str(WAVEFORM_CHANNELS),
            str(target),
        ]

    async def transcode(
        self, asset: AudioAsset, dest_dir: Optional[Path] = None
    ) -> Waveform:
        target = (dest_dir or asset.path.parent) / (asset.path.stem + WAVEFORM_SUFFIX)
        start = time.time()
        try:
            process = await asyncio.create_subprocess_exec(
                *self.build_command(asset.path, target),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise TranscodeError(f"could not start {self._ffmpeg}: {exc}") from exc

        try:
            _, stderr = await process.communicate()
        except asyncio.CancelledError:
            match process.returncode:
                case None:
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
                raise TranscodeError(f"ffmpeg exited with {code}: {err or 'no output'}")

        match target.exists() and target.stat().st_size > 0:
            case False:
                raise TranscodeError(f"ffmpeg produced no output for {asset.path.name}")
            case True:
                pass

        try:
            waveform = Waveform.from_file(target)
        except (wave.Error, EOFError, OSError) as exc:
            raise TranscodeError(f"unreadable waveform {target.name}: {exc}") from exc

        match waveform.is_canonical:
            case False:
                raise TranscodeError(
                    f"unexpected waveform format {waveform.sample_rate} Hz, "
                    f"{waveform.channels} ch, {waveform.sample_width * 8}-bit"
                )
            case True:
                logger.info(MSG_TRANSCODED, asset.path.name, target.name, time.time() - start)
                return waveform
