import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"

TWELVE_LABS_BASE_URL = "https://api.twelvelabs.io/v1.3"
DEFAULT_TEST_VIDEO_ID = "68a52308a48949683bb311b2"


def _coerce_float(value, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Settings:
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    temperature: float = 0.8
    twelve_labs_api_key: str | None = None
    twelve_labs_base_url: str = TWELVE_LABS_BASE_URL
    twelve_labs_timeout: int = 60
    elevenlabs_api_key: str | None = None
    elevenlabs_model_id: str = "eleven_turbo_v2"
    test_video_id: str = DEFAULT_TEST_VIDEO_ID
    debug: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    load_dotenv()
    load_dotenv(dotenv_path=_ENV_PATH)

    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
        temperature=_coerce_float(os.getenv("COMMENTARY_TEMPERATURE"), 0.8),
        twelve_labs_api_key=os.getenv("TWELVE_LABS_API_KEY") or None,
        twelve_labs_base_url=(os.getenv("TWELVE_LABS_BASE_URL") or TWELVE_LABS_BASE_URL).rstrip("/"),
        twelve_labs_timeout=_coerce_int(os.getenv("TWELVE_LABS_TIMEOUT"), 60),
        elevenlabs_api_key=os.getenv("ELEVENLABS_API_KEY") or None,
        elevenlabs_model_id=os.getenv("ELEVENLABS_MODEL_ID", "eleven_turbo_v2"),
        test_video_id=os.getenv("DEFAULT_TEST_VIDEO_ID", DEFAULT_TEST_VIDEO_ID),
        debug=os.getenv("DEBUG", "0") == "1",
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
