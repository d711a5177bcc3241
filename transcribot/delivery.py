"""ResultDelivery — sends a finished transcript back as a text document."""
import logging

from transcribot.bot_client import BotClient
from transcribot.constants import (
    MSG_DELIVERY_LOST,
    TRANSCRIPT_ENCODING,
    TRANSCRIPT_FILENAME,
)
from transcribot.errors import DeliveryError

logger = logging.getLogger(__name__)


class ResultDelivery:

    def __init__(self, outbound: BotClient, filename: str = TRANSCRIPT_FILENAME) -> None:
        self._outbound = outbound
        self._filename = filename

    async def deliver(self, requester_id: str, transcript: str) -> None:
        """Raises DeliveryError when the transport could not send the document.

        The transcript is logged in full on failure so it can be recovered by hand.
        """
        payload = transcript.encode(TRANSCRIPT_ENCODING)
        try:
            sent = await self._outbound.send_document(requester_id, self._filename, payload)
        except Exception as exc:
            logger.error("send_document raised: %s", exc)
            sent = False

        match sent:
            case True:
                pass
            case _:
                logger.error(MSG_DELIVERY_LOST, requester_id, transcript)
                raise DeliveryError(f"could not send {self._filename} to {requester_id}")
