"""MediaFetcher — downloads a remote audio file into a run's scratch directory."""
import logging
import re
from pathlib import Path
from typing import Optional

import httpx

from transcribot.constants import (
    DEFAULT_AUDIO_SUFFIX,
    DOWNLOAD_CHUNK_SIZE,
    MSG_DOWNLOADED,
)
from transcribot.errors import FetchError
from transcribot.media.audio import AudioAsset

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def local_name(content_id: str, suffix: str = DEFAULT_AUDIO_SUFFIX) -> str:
    """Filesystem-safe name derived from the remote identifier."""
    stem = _UNSAFE_CHARS.sub("_", content_id).strip(".") or "audio"
    return stem + suffix


class MediaFetcher:

    def __init__(
        self,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._timeout = httpx.Timeout(timeout, connect=10.0)
        self._transport = transport

    async def fetch(
        self,
        remote_ref: str,
        content_id: str,
        dest_dir: Path,
        suffix: str = DEFAULT_AUDIO_SUFFIX,
    ) -> AudioAsset:
        # remote_ref carries the bot token: keep it out of logs and errors
        path = dest_dir / local_name(content_id, suffix)
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                async with client.stream("GET", remote_ref) as resp:
                    resp.raise_for_status()
                    with open(path, "wb") as out:
                        async for chunk in resp.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
                            out.write(chunk)
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                f"server answered HTTP {exc.response.status_code} for {content_id}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(
                f"network error while downloading {content_id}: {type(exc).__name__}"
            ) from exc
        except OSError as exc:
            raise FetchError(f"could not write {path.name}: {exc.strerror or exc}") from exc

        size = path.stat().st_size
        match size:
            case 0:
                raise FetchError(f"downloaded file for {content_id} is empty")
            case _:
                logger.info(MSG_DOWNLOADED, path.name, size)
                return AudioAsset(path=path, content_id=content_id, size=size)
