"""
Platform Extractors - Per-platform conversation extraction strategies.

Each platform maps statically to one extractor class:
- Claude: internal chat snapshot API (JSON)
- Microsoft Copilot: shares API (JSON)
- ChatGPT: rendered share page (HTML)
- Google Gemini: rendered share page (HTML)
- Grok: rendered share page (HTML)

Platforms configured for the "md" method fall back to MarkdownExtractor.
Perplexity is recognized by the detector but has no extractor yet.
"""

from ..platforms import Platform, get_platform_config
from .base import HtmlExtractor, JsonApiExtractor, PlatformExtractor
from .chatgpt import ChatGPTExtractor
from .claude import ClaudeExtractor
from .copilot import CopilotExtractor
from .gemini import GeminiExtractor
from .grok import GrokExtractor
from .markdown import MarkdownExtractor

PLATFORM_EXTRACTORS: dict[Platform, type[PlatformExtractor]] = {
    Platform.CLAUDE: ClaudeExtractor,
    Platform.CHATGPT: ChatGPTExtractor,
    Platform.COPILOT: CopilotExtractor,
    Platform.GEMINI: GeminiExtractor,
    Platform.GROK: GrokExtractor,
}


def get_extractor(platform: Platform) -> PlatformExtractor | None:
    """Build the extractor for a platform, or None if it has none."""
    extractor_class = PLATFORM_EXTRACTORS.get(platform)
    if extractor_class is not None:
        return extractor_class()
    if get_platform_config(platform).extraction_method == "md":
        return MarkdownExtractor(platform)
    return None


__all__ = [
    "PlatformExtractor",
    "JsonApiExtractor",
    "HtmlExtractor",
    "PLATFORM_EXTRACTORS",
    "get_extractor",
    "ClaudeExtractor",
    "CopilotExtractor",
    "ChatGPTExtractor",
    "GeminiExtractor",
    "GrokExtractor",
    "MarkdownExtractor",
]
