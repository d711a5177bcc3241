"""Config: environment parsing and startup validation"""
import pytest
from transcribot.config import Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.setattr("transcribot.config.load_dotenv", lambda **_: None)
    for name in (
        "TELEGRAM_BOT_TOKEN",
        "LOG_LEVEL",
        "WORK_DIR",
        "DOWNLOAD_TIMEOUT",
        "FFMPEG_PATH",
        "WHISPER_CPP_PATH",
        "WHISPER_CPP_MODEL",
        "WHISPER_LANGUAGE",
        "GOOGLE_APPLICATION_CREDENTIALS",
        "GOOGLE_LANGUAGE_CODE",
        "OPENAI_API_KEY",
        "SELECTION_STORE_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


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


def test_config_from_env_success(monkeypatch):
    """Happy-path: only the bot token is mandatory."""
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "bot123:ABC")

    config = Config.from_env()

    assert config.telegram_bot_token == "bot123:ABC"


def test_config_missing_token_fails():
    """Missing TELEGRAM_BOT_TOKEN must raise."""
    with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
        Config.from_env()


def test_config_blank_token_fails(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "")

    with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
        Config.from_env()


def test_config_immutable():
    """Frozen dataclass: attribute assignment must fail."""
    config = make_config()

    with pytest.raises(Exception):
        config.telegram_bot_token = "other"


def test_config_defaults(monkeypatch):
    """Optional fields have sensible defaults."""
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "bot:tok")

    config = Config.from_env()

    assert config.log_level == "INFO"
    assert config.work_dir is None
    assert config.download_timeout == 60
    assert config.ffmpeg_path == "ffmpeg"
    assert config.whisper_cpp_path == "./whisper.cpp/main"
    assert config.whisper_cpp_model.endswith("ggml-large-v3-turbo.bin")
    assert config.whisper_language == "th"
    assert config.google_credentials_path is None
    assert config.google_language_code == "th-TH"
    assert config.openai_api_key is None
    assert config.selection_store_path is None


def test_config_backend_fields_from_env(monkeypatch, tmp_path):
    creds = tmp_path / "service-account.json"
    creds.write_text("{}")
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "bot:tok")
    monkeypatch.setenv("WHISPER_CPP_PATH", "/opt/whisper/main")
    monkeypatch.setenv("WHISPER_LANGUAGE", "en")
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", str(creds))
    monkeypatch.setenv("GOOGLE_LANGUAGE_CODE", "en-US")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test123")
    monkeypatch.setenv("DOWNLOAD_TIMEOUT", "15")

    config = Config.from_env()

    assert config.whisper_cpp_path == "/opt/whisper/main"
    assert config.whisper_language == "en"
    assert config.google_credentials_path == str(creds)
    assert config.google_language_code == "en-US"
    assert config.openai_api_key == "sk-test123"
    assert config.download_timeout == 15


def test_config_missing_credentials_file_fails(monkeypatch, tmp_path):
    """A credential path that does not exist is fatal at startup."""
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "bot:tok")
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", str(tmp_path / "nope.json"))

    with pytest.raises(ValueError, match="GOOGLE_APPLICATION_CREDENTIALS"):
        Config.from_env()


def test_config_blank_credentials_become_none(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "bot:tok")
    monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")

    config = Config.from_env()

    assert config.google_credentials_path is None
    assert config.openai_api_key is None


def test_config_non_numeric_timeout_fails(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "bot:tok")
    monkeypatch.setenv("DOWNLOAD_TIMEOUT", "soon")

    with pytest.raises(ValueError, match="DOWNLOAD_TIMEOUT"):
        Config.from_env()


def test_config_non_positive_timeout_fails(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "bot:tok")
    monkeypatch.setenv("DOWNLOAD_TIMEOUT", "0")

    with pytest.raises(ValueError, match="positive"):
        Config.from_env()
