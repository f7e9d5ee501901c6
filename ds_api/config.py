"""
Client settings resolved from the environment
"""

import os

from pydantic import BaseModel, ValidationError

from .exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://api.deepseek.com"
CHAT_COMPLETIONS_PATH = "/chat/completions"
API_KEY_ENV_VAR = "DEEPSEEK_API_KEY"


class Settings(BaseModel):
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 60.0


def get_settings() -> Settings:
    """Build settings, letting DEEPSEEK_BASE_URL / DEEPSEEK_TIMEOUT override the defaults"""
    try:
        return Settings(
            base_url=os.getenv("DEEPSEEK_BASE_URL", DEFAULT_BASE_URL),
            timeout=os.getenv("DEEPSEEK_TIMEOUT", "60"),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid DEEPSEEK_* environment settings: {e}") from e


def chat_completions_url(base_url: str) -> str:
    return base_url.rstrip("/") + CHAT_COMPLETIONS_PATH


def api_key_from_env() -> str:
    """Return the bearer token stored in DEEPSEEK_API_KEY"""
    token = os.getenv(API_KEY_ENV_VAR, "").strip()
    if not token:
        raise ConfigurationError(f"Set the {API_KEY_ENV_VAR} environment variable")
    return token
