"""
LLM Digest - Conversation Extraction

Turns public share links from AI chat platforms (Claude, ChatGPT, Microsoft
Copilot, Google Gemini, Grok) into one normalized conversation format for
digest generation.
"""

__version__ = "1.0.0"

from .code_blocks import CodeBlock, CodeSegment, Language, TextSegment, decode_segments, detect_language
from .errors import ErrorCode, ExtractionError
from .models import ConversationMessage, ExtractionMetadata, ExtractionResult, ProcessedConversation
from .orchestrator import extract_conversation
from .platforms import Platform, detect_platform, get_method_for_platform, is_valid_platform_url

__all__ = [
    "extract_conversation",
    "detect_platform",
    "is_valid_platform_url",
    "get_method_for_platform",
    "Platform",
    "ConversationMessage",
    "ProcessedConversation",
    "ExtractionMetadata",
    "ExtractionResult",
    "ErrorCode",
    "ExtractionError",
    "CodeBlock",
    "CodeSegment",
    "TextSegment",
    "Language",
    "decode_segments",
    "detect_language",
]
