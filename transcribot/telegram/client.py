"""TelegramClient — event-driven transport via python-telegram-bot."""
import logging
from pathlib import PurePosixPath
from typing import Callable, Optional
from urllib.parse import urlparse

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
)
from telegram.ext import MessageHandler as TGMessageHandler
from telegram.ext import filters

from transcribot.bot_client import BotClient
from transcribot.config import Config
from transcribot.constants import (
    CALLBACK_BACKEND_PATTERN,
    CALLBACK_BACKEND_PREFIX,
    CMD_HELP,
    CMD_START,
    CMD_STATUS,
    DEFAULT_AUDIO_SUFFIX,
    MSG_AUDIO_UNAVAILABLE,
    MSG_BACKEND_UNAVAILABLE,
    MSG_HANDLER_ERROR,
    MSG_HELP,
    MSG_PROMPT_SELECTION,
    MSG_SELECTED,
    MSG_SELECTION_ANSWER,
    MSG_STATUS,
    MSG_STATUS_NONE,
)
from transcribot.errors import UnknownBackendError
from transcribot.events import AudioEvent, SelectionEvent
from transcribot.pipeline import TranscriptionPipeline
from transcribot.telegram.typing import TelegramActivityIndicator

logger = logging.getLogger(__name__)

AUDIO_FILTER = filters.AUDIO | filters.VOICE | filters.Document.AUDIO


class TelegramClient(BotClient):

    def __init__(self, config: Config) -> None:
        self._token = config.telegram_bot_token
        self._app: Optional[Application] = None

    # ── lifecycle ─────────────────────────────────────────────────────────────

    def build(self) -> Application:
        """Create the Application so outbound sends work before run() starts polling."""
        match self._app:
            case None:
                self._app = (
                    Application.builder().token(self._token).concurrent_updates(True).build()
                )
            case _:
                pass
        return self._app

    def run(self, pipeline: TranscriptionPipeline) -> None:
        app = self.build()
        app.add_handler(CommandHandler(CMD_START, self._make_start_handler(pipeline)))
        app.add_handler(CommandHandler(CMD_HELP, self._make_help_handler()))
        app.add_handler(CommandHandler(CMD_STATUS, self._make_status_handler(pipeline)))
        app.add_handler(
            CallbackQueryHandler(
                self._make_selection_handler(pipeline), pattern=CALLBACK_BACKEND_PATTERN
            )
        )
        app.add_handler(TGMessageHandler(AUDIO_FILTER, self._make_audio_handler(pipeline)))
        app.add_error_handler(self._on_error)
        app.run_polling()

    # ── BotClient interface ───────────────────────────────────────────────────

    async def send_message(self, to: str, text: str) -> bool:
        match self._app:
            case None:
                logger.error("send_message called before build()")
                return False
            case app:
                try:
                    await app.bot.send_message(chat_id=int(to), text=text)
                    return True
                except Exception as exc:
                    logger.error("Telegram send_message failed: %s", exc)
                    return False

    async def send_document(self, to: str, filename: str, data: bytes) -> bool:
        match self._app:
            case None:
                logger.error("send_document called before build()")
                return False
            case app:
                try:
                    await app.bot.send_document(chat_id=int(to), document=data, filename=filename)
                    return True
                except Exception as exc:
                    logger.error("Telegram send_document failed: %s", exc)
                    return False

    async def prompt_selection(self, to: str, options: dict[str, str]) -> bool:
        match self._app:
            case None:
                logger.error("prompt_selection called before build()")
                return False
            case app:
                try:
                    await app.bot.send_message(
                        chat_id=int(to),
                        text=MSG_PROMPT_SELECTION,
                        reply_markup=self._selection_keyboard(options),
                    )
                    return True
                except Exception as exc:
                    logger.error("Telegram selection prompt failed: %s", exc)
                    return False

    # ── helpers (also used in tests) ─────────────────────────────────────────

    @staticmethod
    def _selection_keyboard(options: dict[str, str]) -> InlineKeyboardMarkup:
        return InlineKeyboardMarkup([
            [
                InlineKeyboardButton(label, callback_data=CALLBACK_BACKEND_PREFIX + name)
                for name, label in options.items()
            ]
        ])

    @staticmethod
    def _parse_selection(data: Optional[str]) -> Optional[str]:
        """'backend:<name>' → name, anything else → None."""
        match data:
            case str() as d if d.startswith(CALLBACK_BACKEND_PREFIX) and len(d) > len(CALLBACK_BACKEND_PREFIX):
                return d[len(CALLBACK_BACKEND_PREFIX):]
            case _:
                return None

    @staticmethod
    def _sender(update: Update) -> str:
        return str(update.effective_chat.id) if update.effective_chat else ""

    @staticmethod
    def _audio_attachment(update: Update):
        msg = update.message
        match msg:
            case None:
                return None
            case _:
                return msg.audio or msg.voice or msg.document

    @staticmethod
    def _suffix_for(file_path: Optional[str]) -> str:
        suffix = PurePosixPath(urlparse(file_path or "").path).suffix
        return suffix.lower() if suffix else DEFAULT_AUDIO_SUFFIX

    # ── internal handler factory ──────────────────────────────────────────────

    def _make_start_handler(self, pipeline: TranscriptionPipeline) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            await self.prompt_selection(self._sender(update), pipeline.backend_options())

        return _handler

    def _make_help_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            await self.send_message(self._sender(update), MSG_HELP)

        return _handler

    def _make_status_handler(self, pipeline: TranscriptionPipeline) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            sender = self._sender(update)
            match pipeline.current_selection(sender):
                case None:
                    await self.send_message(sender, MSG_STATUS_NONE)
                case label:
                    await self.send_message(sender, MSG_STATUS % label)

        return _handler

    def _make_selection_handler(self, pipeline: TranscriptionPipeline) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            query = update.callback_query
            match self._parse_selection(query.data if query else None):
                case None:
                    return
                case name:
                    pass

            await query.answer(MSG_SELECTION_ANSWER)
            sender = self._sender(update)
            try:
                entry = pipeline.handle_selection(SelectionEvent(sender, name))
            except UnknownBackendError:
                await self.send_message(sender, MSG_BACKEND_UNAVAILABLE % name)
                return
            await self.send_message(sender, MSG_SELECTED % entry.label)

        return _handler

    def _make_audio_handler(self, pipeline: TranscriptionPipeline) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            sender = self._sender(update)
            match self._audio_attachment(update):
                case None:
                    return
                case attachment:
                    pass

            try:
                tg_file = await attachment.get_file()
            except Exception:
                logger.exception("Could not resolve Telegram file")
                await self.send_message(sender, MSG_AUDIO_UNAVAILABLE)
                return

            event = AudioEvent(
                requester_id=sender,
                remote_ref=tg_file.file_path,
                content_id=attachment.file_unique_id,
                suffix=self._suffix_for(tg_file.file_path),
            )
            indicator = TelegramActivityIndicator(context.bot)
            await indicator.start(sender)
            try:
                await pipeline.run(event)
            finally:
                await indicator.stop(sender)

        return _handler

    @staticmethod
    async def _on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.error(MSG_HANDLER_ERROR, exc_info=context.error)
