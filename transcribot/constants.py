"""All magic values live here — no inline literals anywhere else."""

# Telegram chat action re-send interval (seconds).
# Chat actions expire after ~5 s, so we refresh every 4 s.
TELEGRAM_ACTION_INTERVAL: float = 4.0

# Canonical waveform handed to every backend
WAVEFORM_SAMPLE_RATE = 16000
WAVEFORM_CHANNELS = 1
WAVEFORM_SAMPLE_WIDTH = 2  # bytes, 16-bit signed linear
WAVEFORM_SUFFIX = ".pcm16k.wav"

# Per-run scratch space
RUN_DIR_PREFIX = "transcribot-run-"
DEFAULT_AUDIO_SUFFIX = ".ogg"
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# ffmpeg flags
FFMPEG_OVERWRITE_FLAG = "-y"
FFMPEG_INPUT_FLAG = "-i"
FFMPEG_NO_VIDEO_FLAG = "-vn"
FFMPEG_CODEC_FLAG = "-acodec"
FFMPEG_PCM_CODEC = "pcm_s16le"
FFMPEG_RATE_FLAG = "-ar"
FFMPEG_CHANNELS_FLAG = "-ac"
FFMPEG_LOGLEVEL_FLAG = "-loglevel"
FFMPEG_LOGLEVEL = "error"

# whisper.cpp flags
WHISPER_CPP_MODEL_FLAG = "-m"
WHISPER_CPP_FILE_FLAG = "-f"
WHISPER_CPP_LANGUAGE_FLAG = "-l"
WHISPER_CPP_NO_TIMESTAMPS_FLAG = "-nt"

# Google Speech-to-Text synchronous recognition limits
GOOGLE_MAX_INLINE_BYTES = 10 * 1024 * 1024
GOOGLE_MAX_INLINE_SECONDS = 60.0

# OpenAI transcription
WHISPER_MODEL = "whisper-1"

# Backend registry names and button labels
BACKEND_LOCAL = "local-model"
BACKEND_GOOGLE = "cloud-api"
BACKEND_OPENAI = "openai-api"
LABEL_LOCAL = "Whisper (local)"
LABEL_GOOGLE = "Google Speech-to-Text"
LABEL_OPENAI = "OpenAI Whisper"

# Transcript artifact
TRANSCRIPT_FILENAME = "transcription.txt"
TRANSCRIPT_ENCODING = "utf-8"

# Telegram commands / callback data
CMD_START = "start"
CMD_HELP = "help"
CMD_STATUS = "status"
CALLBACK_BACKEND_PREFIX = "backend:"
CALLBACK_BACKEND_PATTERN = r"^backend:"

# Log messages
MSG_BOT_STARTING = "Starting transcription bot…"
MSG_BACKEND_REGISTERED = "Registered backend %s (%s)"
MSG_SELECTION_SET = "Requester %s selected backend %s"
MSG_STAGE = "Run %s for %s → %s"
MSG_RUN_DELIVERED = "✓ Delivered transcript to %s via %s (%.1fs)"
MSG_RUN_FAILED = "✗ Run %s for %s failed at %s: %s (%s)"
MSG_RUN_UNEXPECTED = "Unexpected error in stage %s"
MSG_DELIVERY_LOST = "Transcript for %s could not be delivered; text follows:\n%s"
MSG_DOWNLOADED = "Downloaded %s (%d bytes)"
MSG_TRANSCODED = "Transcoded %s → %s (%.1fs)"
MSG_HANDLER_ERROR = "Unhandled error while processing update"

# User-facing replies
MSG_PROMPT_SELECTION = "Choose a speech recognition backend:"
MSG_SELECTION_ANSWER = "Backend selected"
MSG_SELECTED = "You chose %s. Please upload an audio file."
MSG_TRANSCRIBING = "Transcribing with %s…"
MSG_NO_SELECTION = "Please choose a backend before sending audio."
MSG_BACKEND_UNAVAILABLE = "The backend %s is not available. Please choose another one."
MSG_RUN_FAILED_REPLY = (
    "Transcription did not complete: %s failed (%s).\n"
    "Send the audio again or use /start to pick another backend."
)
MSG_DELIVERY_FAILED_REPLY = (
    "The transcript was produced but could not be sent. Please try again later."
)
MSG_AUDIO_UNAVAILABLE = "Could not access the audio file — please send it again."
MSG_STATUS = "Current backend: %s"
MSG_STATUS_NONE = "No backend selected yet — use /start to choose one."

MSG_HELP = (
    "transcribot — audio transcription on Telegram\n"
    "\n"
    "Commands:\n"
    "  /start   — choose a speech recognition backend\n"
    "  /status  — show the backend you are using\n"
    "  /help    — show this message\n"
    "\n"
    "Send an audio file or a voice note and the transcript\n"
    "comes back as a text document."
)
