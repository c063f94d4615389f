"""
Normalized conversation models shared by every platform extractor.

Whatever the source platform, extraction ends in a ProcessedConversation:
an ordered, non-empty list of user/assistant messages plus a title.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal

from .code_blocks import TextSegment, decode_segments
from .errors import ErrorCode
from .platforms import Platform, get_platform_config

logger = logging.getLogger(__name__)

Role = Literal["user", "assistant"]
VALID_ROLES: frozenset[str] = frozenset({"user", "assistant"})

# Raw role labels seen across platform payloads and markup
ROLE_ALIASES: dict[str, Role] = {
    "user": "user",
    "human": "user",
    "assistant": "assistant",
    "ai": "assistant",
    "bot": "assistant",
    "model": "assistant",
}

TITLE_MAX_LENGTH = 100


@dataclass
class ConversationMessage:
    """One turn of a conversation."""
    role: Role
    content: str  # may embed CODE_BLOCK_START...CODE_BLOCK_END sentinels
    timestamp: str | None = None
    id: str | None = None


@dataclass
class ProcessedConversation:
    """Normalized output contract for all platforms."""
    messages: list[ConversationMessage]
    title: str
    platform: Platform
    model: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExtractionMetadata:
    """Timing and method details attached to every orchestrated extraction."""
    extraction_time: int  # milliseconds
    method: str  # "html", "json", "md", "unknown"
    message_count: int


@dataclass(frozen=True)
class ExtractionResult:
    """Outer envelope returned by extract_conversation."""
    success: bool
    conversation: ProcessedConversation | None = None
    error: str | None = None
    error_code: ErrorCode | None = None
    platform: Platform | None = None
    metadata: ExtractionMetadata | None = None


@dataclass(frozen=True)
class ParseResult:
    """Result of a single platform extractor."""
    success: bool
    conversation: ProcessedConversation | None = None
    error: str | None = None
    code: ErrorCode | None = None

    @classmethod
    def failure(cls, error: str, code: ErrorCode = ErrorCode.UNKNOWN_ERROR) -> "ParseResult":
        return cls(success=False, error=error, code=code)

    @classmethod
    def from_conversation(
        cls,
        conversation: ProcessedConversation,
        empty_error: str = "No conversation messages found",
        empty_code: ErrorCode = ErrorCode.NO_MESSAGES_FOUND,
    ) -> "ParseResult":
        """Wrap a conversation, treating zero messages as a failure."""
        if not conversation.messages:
            return cls.failure(empty_error, empty_code)
        return cls(success=True, conversation=conversation)


def normalize_role(raw: Any) -> Role | None:
    """Map a raw role label to user/assistant, or None if unrecognized."""
    if not isinstance(raw, str):
        return None
    return ROLE_ALIASES.get(raw.strip().lower())


def clean_messages(messages: Iterable[ConversationMessage]) -> list[ConversationMessage]:
    """Drop messages with an invalid role or blank content, keeping order."""
    cleaned = []
    for message in messages:
        if message.role not in VALID_ROLES:
            logger.debug(f"Dropping message with unrecognized role: {message.role!r}")
            continue
        if not message.content or not message.content.strip():
            continue
        cleaned.append(message)
    return cleaned


def truncate(text: str, limit: int = TITLE_MAX_LENGTH) -> str:
    """Truncate text to limit characters, marking the cut with '...'."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def prose_text(content: str) -> str:
    """Message text with embedded code blocks left out."""
    return " ".join(s.text for s in decode_segments(content) if isinstance(s, TextSegment)).strip()


def default_title(platform: Platform) -> str:
    """Generic platform-qualified title."""
    return f"{get_platform_config(platform).name} Conversation"


def resolve_title(
    title: str | None,
    platform: Platform,
    messages: list[ConversationMessage] | None = None,
    generic_titles: Iterable[str] = (),
) -> str:
    """
    Pick a non-empty title for a conversation.

    Falls back to an excerpt of the first user message when the page title is
    empty or generic, then to "<Platform> Conversation".
    """
    fallback = default_title(platform)
    title = (title or "").strip()
    generic = {t.lower() for t in generic_titles} | {fallback.lower()}

    if title and title.lower() not in generic:
        return title

    first_user = next((m for m in messages or [] if m.role == "user"), None)
    if first_user is not None and (excerpt := prose_text(first_user.content)):
        return truncate(excerpt)

    return fallback
