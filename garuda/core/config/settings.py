import os
from enum import Enum
from typing import List, Optional

from dotenv import load_dotenv

# Load .env before any setting is read
load_dotenv()


# ==================================================
# Environment
# ==================================================
class Environment(str, Enum):
    """Deployment environments the service knows about."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


def get_environment() -> Environment:
    """Resolve the current environment from APP_ENV (defaults to development)."""
    env = os.getenv("APP_ENV", "development").lower()
    if env in ("production", "prod"):
        return Environment.PRODUCTION
    if env in ("staging", "stage"):
        return Environment.STAGING
    if env == "test":
        return Environment.TEST
    return Environment.DEVELOPMENT


def _parse_list(value: Optional[str], default: List[str]) -> List[str]:
    """Split a comma separated env value into a clean list."""
    if not value:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_optional_float(value: Optional[str], default: Optional[float]) -> Optional[float]:
    if value is None or value.strip() == "":
        return default
    if value.strip().lower() in ("none", "off", "0"):
        return None
    return float(value)


# ==================================================
# Settings
# ==================================================
class Settings:
    """
    Application settings, read once from the environment.
    Every attribute can be overridden with an env var of the same name.
    """

    def __init__(self):
        self.ENVIRONMENT = get_environment()

        # Project
        self.PROJECT_NAME = os.getenv("PROJECT_NAME", "Garuda")
        self.VERSION = os.getenv("VERSION", "1.0.0")
        self.API_V1_STR = os.getenv("API_V1_STR", "/api/v1")
        self.DEBUG = os.getenv("DEBUG", "false").lower() in ("true", "1", "t", "yes")

        # CORS: the browser UI may be served from a different origin
        self.ALLOWED_ORIGINS = _parse_list(os.getenv("ALLOWED_ORIGINS"), ["*"])

        # Logging
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if self.DEBUG else "INFO").upper()
        self.LOG_FORMAT = os.getenv(
            "LOG_FORMAT",
            "json" if self.ENVIRONMENT == Environment.PRODUCTION else "console",
        ).lower()

        # Primary provider (Groq, OpenAI-compatible endpoint)
        self.GROQ_API_KEY = os.getenv("GROQ_API_KEY", "")
        self.GROQ_MODEL = os.getenv("GROQ_MODEL", "llama-3.3-70b-versatile")
        self.GROQ_BASE_URL = os.getenv("GROQ_BASE_URL", "https://api.groq.com/openai/v1")
        self.DEFAULT_LLM_TEMPERATURE = float(os.getenv("DEFAULT_LLM_TEMPERATURE", "0.7"))

        # Secondary provider (self-hosted Ollama)
        self.OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/api/chat")
        self.OLLAMA_MODEL = os.getenv("OLLAMA_MODEL", "llama3")
        # Read timeout in seconds; "none" disables it
        self.OLLAMA_TIMEOUT = _parse_optional_float(os.getenv("OLLAMA_TIMEOUT"), None)

        # Chat client
        self.GARUDA_API_URL = os.getenv("GARUDA_API_URL", f"http://localhost:8000{self.API_V1_STR}/chat")
        self.GARUDA_STORE_PATH = os.getenv(
            "GARUDA_STORE_PATH", os.path.join(os.path.expanduser("~"), ".garuda", "storage.json")
        )


settings = Settings()
