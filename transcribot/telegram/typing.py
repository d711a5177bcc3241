"""Chat action shown while an audio submission is being processed.

Telegram clears a chat action after about five seconds, so it is re-sent every
TELEGRAM_ACTION_INTERVAL seconds for as long as the pipeline run lasts.
"""
import asyncio
import logging

from telegram import Bot
from telegram.constants import ChatAction

from transcribot.bot_client import ActivityIndicator
from transcribot.constants import TELEGRAM_ACTION_INTERVAL

logger = logging.getLogger(__name__)


async def _keep_acting(bot: Bot, chat_id: str, action: str, stop: asyncio.Event) -> None:
    while not stop.is_set():
        try:
            await bot.send_chat_action(chat_id=int(chat_id), action=action)
        except Exception as exc:
            logger.debug("Chat action failed: %s", exc)
        await asyncio.sleep(TELEGRAM_ACTION_INTERVAL)


class TelegramActivityIndicator(ActivityIndicator):
    """One indicator per audio handler call; wraps a single pipeline run."""

    def __init__(self, bot: Bot, action: str = ChatAction.TYPING) -> None:
        self._bot = bot
        self._action = action
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task | None = None

    async def start(self, to: str) -> None:
        """Show the action in chat `to` until stop(); restarts any previous loop."""
        await self.stop(to)
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            _keep_acting(self._bot, to, self._action, self._stop_event)
        )

    async def stop(self, to: str) -> None:
        """Called once the run is delivered, failed or cancelled."""
        match self._stop_event:
            case None:
                pass
            case event:
                event.set()

        match self._task:
            case None:
                pass
            case task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                self._task = None

        self._stop_event = None
