"""Entry point — wires Config → BackendRegistry → TranscriptionPipeline → TelegramClient."""
import logging
from pathlib import Path

from rich.logging import RichHandler

from transcribot.config import Config
from transcribot.constants import (
    BACKEND_GOOGLE,
    BACKEND_LOCAL,
    BACKEND_OPENAI,
    LABEL_GOOGLE,
    LABEL_LOCAL,
    LABEL_OPENAI,
    MSG_BOT_STARTING,
)
from transcribot.media.fetcher import MediaFetcher
from transcribot.media.transcoder import Transcoder
from transcribot.pipeline import TranscriptionPipeline
from transcribot.selection_store import JsonFileBacking, SelectionStore
from transcribot.telegram.client import TelegramClient
from transcribot.transcription.google_speech import GoogleSpeechClient
from transcribot.transcription.registry import BackendRegistry
from transcribot.transcription.whisper import OpenAIWhisperClient
from transcribot.transcription.whisper_cpp import WhisperCppClient


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))


def build_registry(config: Config) -> BackendRegistry:
    registry = BackendRegistry()
    registry.register(
        BACKEND_LOCAL,
        WhisperCppClient(
            config.whisper_cpp_path, config.whisper_cpp_model, config.whisper_language
        ),
        LABEL_LOCAL,
    )
    match config.google_credentials_path:
        case str() as path:
            registry.register(
                BACKEND_GOOGLE,
                GoogleSpeechClient(path, config.google_language_code),
                LABEL_GOOGLE,
            )
        case None:
            pass
    match config.openai_api_key:
        case str() as key:
            registry.register(
                BACKEND_OPENAI,
                OpenAIWhisperClient(key, config.whisper_language),
                LABEL_OPENAI,
            )
        case None:
            pass
    return registry


def build_store(config: Config) -> SelectionStore:
    match config.selection_store_path:
        case str() as path:
            return SelectionStore(JsonFileBacking(Path(path)))
        case None:
            return SelectionStore()


def main() -> None:
    config = Config.from_env()
    _setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(MSG_BOT_STARTING)

    match config.work_dir:
        case str() as work_dir:
            Path(work_dir).mkdir(parents=True, exist_ok=True)
        case None:
            pass

    client = TelegramClient(config)
    client.build()
    pipeline = TranscriptionPipeline(
        registry=build_registry(config),
        store=build_store(config),
        fetcher=MediaFetcher(timeout=config.download_timeout),
        transcoder=Transcoder(config.ffmpeg_path),
        outbound=client,
        work_dir=config.work_dir,
    )
    client.run(pipeline)


if __name__ == "__main__":
    main()
