"""
Platform detection from share URLs.

The platform table is static configuration: one entry per supported AI chat
platform with its display name, share URL pattern and extraction method.
Detection is a pure function over this table.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Literal

ExtractionMethod = Literal["json", "html", "md"]


class Platform(str, Enum):
    """AI chat platforms with public share links."""
    CLAUDE = "claude"
    CHATGPT = "chatgpt"
    COPILOT = "copilot"
    GEMINI = "gemini"
    GROK = "grok"
    PERPLEXITY = "perplexity"


@dataclass(frozen=True)
class PlatformConfig:
    """Static configuration for one platform."""
    name: str
    url_pattern: re.Pattern
    extraction_method: ExtractionMethod
    has_internal_api: bool


@dataclass(frozen=True)
class PlatformDetectionResult:
    """Result of matching a URL against the platform table."""
    success: bool
    platform: Platform | None = None
    error: str | None = None


# Broad per-domain shapes. Each extractor re-validates with a stricter pattern.
# Dict order is the tie-break order for detection.
PLATFORM_CONFIGS: dict[Platform, PlatformConfig] = {
    Platform.CLAUDE: PlatformConfig(
        name="Claude",
        url_pattern=re.compile(r"^https://claude\.ai/share/[A-Za-z0-9-]+$"),
        extraction_method="json",
        has_internal_api=True,
    ),
    Platform.CHATGPT: PlatformConfig(
        name="ChatGPT",
        url_pattern=re.compile(r"^https://chatgpt\.com/share/[A-Za-z0-9-]+$"),
        extraction_method="html",
        has_internal_api=False,
    ),
    Platform.COPILOT: PlatformConfig(
        name="Microsoft Copilot",
        url_pattern=re.compile(r"^https://copilot\.microsoft\.com/shares/[A-Za-z0-9_-]+$"),
        extraction_method="json",
        has_internal_api=True,
    ),
    Platform.GEMINI: PlatformConfig(
        name="Google Gemini",
        url_pattern=re.compile(r"^https://(g\.co/gemini/share|gemini\.google\.com/share)/[A-Za-z0-9]+$"),
        extraction_method="html",
        has_internal_api=False,
    ),
    Platform.GROK: PlatformConfig(
        name="Grok",
        url_pattern=re.compile(r"^https://grok\.com/share/[A-Za-z0-9_-]+$"),
        extraction_method="html",
        has_internal_api=False,
    ),
    Platform.PERPLEXITY: PlatformConfig(
        name="Perplexity",
        url_pattern=re.compile(r"^https://www\.perplexity\.ai/search/[A-Za-z0-9_-]+$"),
        extraction_method="html",
        has_internal_api=False,
    ),
}


def detect_platform(url: str) -> PlatformDetectionResult:
    """
    Identify which platform a share URL belongs to.

    Args:
        url: Raw URL string from the caller

    Returns:
        PlatformDetectionResult with the first matching platform, or an error
    """
    if not url or not isinstance(url, str):
        return PlatformDetectionResult(success=False, error="Invalid URL provided")

    for platform, platform_config in PLATFORM_CONFIGS.items():
        if platform_config.url_pattern.fullmatch(url):
            return PlatformDetectionResult(success=True, platform=platform)

    return PlatformDetectionResult(success=False, error="Unsupported platform URL format")


def is_valid_platform_url(url: str) -> bool:
    """Check if a URL belongs to any supported platform."""
    return detect_platform(url).success


def get_platform_config(platform: Platform) -> PlatformConfig:
    """Get the static configuration for a platform."""
    return PLATFORM_CONFIGS[platform]


def get_method_for_platform(platform: Platform | None) -> str:
    """Extraction method tag for metadata; 'unknown' when no platform."""
    if platform is None:
        return "unknown"
    return PLATFORM_CONFIGS[platform].extraction_method
