"""Startup wiring: which backends get registered, which store backing is used"""
import logging

from rich.logging import RichHandler

from transcribot.config import Config
from transcribot.main import _setup_logging, build_registry, build_store
from transcribot.selection_store import JsonFileBacking
from transcribot.transcription.google_speech import GoogleSpeechClient
from transcribot.transcription.whisper import OpenAIWhisperClient
from transcribot.transcription.whisper_cpp import WhisperCppClient


def make_config(**overrides) -> Config:
    fields = dict(
        telegram_bot_token="token",
        log_level="INFO",
        work_dir=None,
        download_timeout=60,
        ffmpeg_path="ffmpeg",
        whisper_cpp_path="./whisper.cpp/main",
        whisper_cpp_model="model.bin",
        whisper_language="th",
        google_credentials_path=None,
        google_language_code="th-TH",
        openai_api_key=None,
        selection_store_path=None,
    )
    fields.update(overrides)
    return Config(**fields)


def test_local_backend_always_registered():
    registry = build_registry(make_config())

    assert registry.names() == ("local-model",)
    assert isinstance(registry.resolve("local-model"), WhisperCppClient)


def test_cloud_backends_follow_credentials():
    registry = build_registry(
        make_config(google_credentials_path="/etc/sa.json", openai_api_key="sk-1")
    )

    assert registry.names() == ("local-model", "cloud-api", "openai-api")
    assert isinstance(registry.resolve("cloud-api"), GoogleSpeechClient)
    assert isinstance(registry.resolve("openai-api"), OpenAIWhisperClient)
    assert registry.entry("cloud-api").label == "Google Speech-to-Text"


def test_store_is_in_memory_by_default():
    store = build_store(make_config())
    store.set_selection("1", "local-model")
    assert store.get_selection("1") == "local-model"


def test_store_uses_json_file_when_configured(tmp_path):
    path = tmp_path / "selections.json"
    store = build_store(make_config(selection_store_path=str(path)))
    store.set_selection("1", "local-model")

    assert JsonFileBacking(path)["1"] == "local-model"


def test_setup_logging_installs_single_rich_handler():
    root = logging.getLogger()
    saved = root.handlers[:], root.level
    try:
        _setup_logging("debug")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], RichHandler)
    finally:
        list(map(root.removeHandler, root.handlers[:]))
        list(map(root.addHandler, saved[0]))
        root.setLevel(saved[1])
