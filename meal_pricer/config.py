"""Configuration and access-token lookup for meal-pricer."""

import json
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# App directories
APP_NAME = "meal-pricer"
CONFIG_DIR = Path.home() / f".{APP_NAME}"
TOKEN_FILE = CONFIG_DIR / "token.json"

# API Configuration
DEFAULT_API_BASE_URL = "https://api.kroger.com/v1"
DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_WORKERS = 3


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""

    api_base_url: str = DEFAULT_API_BASE_URL
    access_token: str | None = None
    location_id: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS


def get_access_token() -> str | None:
    """Get the catalog access token from environment or token file."""
    token = os.getenv("KROGER_ACCESS_TOKEN")
    if token:
        return token

    if TOKEN_FILE.exists():
        try:
            with open(TOKEN_FILE) as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data.get("access_token")
        except (OSError, json.JSONDecodeError):
            pass

    return None


def save_access_token(token: str) -> None:
    """Save an access token to the token file."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    with open(TOKEN_FILE, "w") as f:
        json.dump({"access_token": token}, f)
    # Set restrictive permissions
    TOKEN_FILE.chmod(0o600)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def load_settings() -> Settings:
    """Build Settings from the environment, falling back to defaults."""
    return Settings(
        api_base_url=os.getenv("KROGER_API_BASE_URL") or DEFAULT_API_BASE_URL,
        access_token=get_access_token(),
        location_id=os.getenv("KROGER_LOCATION_ID") or None,
        timeout=_env_float("MEAL_PRICER_TIMEOUT", DEFAULT_TIMEOUT),
        max_workers=_env_int("MEAL_PRICER_MAX_WORKERS", DEFAULT_MAX_WORKERS),
    )
