"""BackendRegistry — the closed set of named transcription backends."""
import logging
from typing import NamedTuple, Optional

from transcribot.constants import MSG_BACKEND_REGISTERED
from transcribot.errors import UnknownBackendError
from transcribot.transcription.client import TranscriptionClient

logger = logging.getLogger(__name__)


class BackendEntry(NamedTuple):
    name: str
    label: str
    client: TranscriptionClient


class BackendRegistry:
    """Name → backend lookup. Populated once at startup, read-only afterwards."""

    def __init__(self) -> None:
        self._entries: dict[str, BackendEntry] = {}

    def register(
        self, name: str, client: TranscriptionClient, label: Optional[str] = None
    ) -> None:
        match name in self._entries:
            case True:
                raise ValueError(f"backend {name!r} is already registered")
            case False:
                pass
        self._entries[name] = BackendEntry(name, label or name, client)
        logger.info(MSG_BACKEND_REGISTERED, name, label or name)

    def entry(self, name: str) -> BackendEntry:
        match self._entries.get(name):
            case None:
                raise UnknownBackendError(name)
            case found:
                return found

    def resolve(self, name: str) -> TranscriptionClient:
        return self.entry(name).client

    def names(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def options(self) -> dict[str, str]:
        """Backend name → human label, in registration order."""
        return {e.name: e.label for e in self._entries.values()}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)
