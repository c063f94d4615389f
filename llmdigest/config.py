"""
Configuration for the conversation extraction subsystem.

Values are read once from the environment at import time and are treated as
read-only afterwards, so concurrent extractions can share them safely.
"""

import logging
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_optional(value: str | None) -> str | None:
    """Treat empty environment values as unset."""
    if value is None or not value.strip():
        return None
    return value.strip()


class Config:
    """Extraction configuration from environment."""
    # HTTP fetcher (seconds)
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "10"))
    HTTP_RETRIES: int = int(os.getenv("HTTP_RETRIES", "2"))
    HTTP_BACKOFF: float = float(os.getenv("HTTP_BACKOFF", "1.0"))
    HTTP_USER_AGENT: str = os.getenv("HTTP_USER_AGENT", "Mozilla/5.0 (compatible; LLMDigest/1.0)")

    # JSON-API platforms (Claude, Copilot)
    JSON_API_TIMEOUT: float = float(os.getenv("JSON_API_TIMEOUT", "15"))
    CLAUDE_MAX_MESSAGES: int = int(os.getenv("CLAUDE_MAX_MESSAGES", "1000"))

    # Headless browser (milliseconds, Playwright convention)
    BROWSER_TIMEOUT: int = int(os.getenv("BROWSER_TIMEOUT", "15000"))
    BROWSER_HEADLESS: bool = _parse_bool(os.getenv("BROWSER_HEADLESS"), default=True)
    # Uses Playwright's bundled Chromium when unset
    BROWSER_EXECUTABLE_PATH: str | None = _parse_optional(os.getenv("BROWSER_EXECUTABLE_PATH"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


config = Config()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for applications embedding the extractor."""
    logging.basicConfig(
        level=(level or config.LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
