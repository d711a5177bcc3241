"""Abstract interfaces for transport-agnostic bot clients."""
from abc import ABC, abstractmethod


class ActivityIndicator(ABC):
    @abstractmethod
    async def start(self, to: str) -> None: ...

    @abstractmethod
    async def stop(self, to: str) -> None: ...


class BotClient(ABC):
    """Outbound side of the transport. Every send returns False on failure instead of raising."""

    @abstractmethod
    async def send_message(self, to: str, text: str) -> bool: ...

    @abstractmethod
    async def send_document(self, to: str, filename: str, data: bytes) -> bool: ...

    @abstractmethod
    async def prompt_selection(self, to: str, options: dict[str, str]) -> bool:
        """Offer the backends in ``options`` (name → label) for the requester to choose from."""
        ...
