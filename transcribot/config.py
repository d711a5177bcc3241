from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv


@dataclass(frozen=True)
class Config:
    telegram_bot_token: str
    log_level: str
    work_dir: Optional[str]
    download_timeout: int
    ffmpeg_path: str
    whisper_cpp_path: str
    whisper_cpp_model: str
    whisper_language: str
    google_credentials_path: Optional[str]
    google_language_code: str
    openai_api_key: Optional[str]
    selection_store_path: Optional[str]

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        token = os.getenv("TELEGRAM_BOT_TOKEN")
        log_level = os.getenv("LOG_LEVEL", "INFO")
        work_dir = os.getenv("WORK_DIR") or None
        download_timeout = os.getenv("DOWNLOAD_TIMEOUT", "60")
        ffmpeg_path = os.getenv("FFMPEG_PATH", "ffmpeg")
        whisper_cpp_path = os.getenv("WHISPER_CPP_PATH", "./whisper.cpp/main")
        whisper_cpp_model = os.getenv(
            "WHISPER_CPP_MODEL", "whisper.cpp/models/ggml-large-v3-turbo.bin"
        )
        whisper_language = os.getenv("WHISPER_LANGUAGE", "th")
        google_credentials = os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or None
        google_language_code = os.getenv("GOOGLE_LANGUAGE_CODE", "th-TH")
        openai_api_key = os.getenv("OPENAI_API_KEY") or None
        selection_store_path = os.getenv("SELECTION_STORE_PATH") or None

        try:
            timeout = int(download_timeout)
        except ValueError:
            raise ValueError(
                f"DOWNLOAD_TIMEOUT must be an integer, got {download_timeout!r}"
            ) from None

        return cls._validate(
            telegram_bot_token=token,
            log_level=log_level,
            work_dir=work_dir,
            download_timeout=timeout,
            ffmpeg_path=ffmpeg_path,
            whisper_cpp_path=whisper_cpp_path,
            whisper_cpp_model=whisper_cpp_model,
            whisper_language=whisper_language,
            google_credentials_path=google_credentials,
            google_language_code=google_language_code,
            openai_api_key=openai_api_key,
            selection_store_path=selection_store_path,
        )

    @staticmethod
    def _validate(
        telegram_bot_token: Optional[str],
        log_level: str,
        work_dir: Optional[str],
        download_timeout: int,
        ffmpeg_path: str,
        whisper_cpp_path: str,
        whisper_cpp_model: str,
        whisper_language: str,
        google_credentials_path: Optional[str],
        google_language_code: str,
        openai_api_key: Optional[str],
        selection_store_path: Optional[str],
    ) -> "Config":
        match telegram_bot_token:
            case None | "":
                raise ValueError("TELEGRAM_BOT_TOKEN must be set in .env")
            case _:
                pass

        match google_credentials_path:
            case str() as path if not os.path.isfile(path):
                raise ValueError(
                    f"GOOGLE_APPLICATION_CREDENTIALS points to a missing file: {path}"
                )
            case _:
                pass

        match download_timeout:
            case n if n <= 0:
                raise ValueError("DOWNLOAD_TIMEOUT must be positive")
            case _:
                pass

        return Config(
            telegram_bot_token=telegram_bot_token,
            log_level=log_level,
            work_dir=work_dir,
            download_timeout=download_timeout,
            ffmpeg_path=ffmpeg_path,
            whisper_cpp_path=whisper_cpp_path,
            whisper_cpp_model=whisper_cpp_model,
            whisper_language=whisper_language,
            google_credentials_path=google_credentials_path,
            google_language_code=google_language_code,
            openai_api_key=openai_api_key,
            selection_store_path=selection_store_path,
        )
