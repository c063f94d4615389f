"""
Markdown-scraping strategy.

Reserved for platforms whose share pages are served as raw markdown. No
message layout is known for any such platform yet, so a fetch that yields no
recognizable turns ends in a NOT_IMPLEMENTED failure instead of an empty
conversation.
"""

import logging
import re

from ..config import config
from ..errors import ErrorCode, ExtractionError
from ..http_client import HttpClient
from ..models import ConversationMessage, ParseResult, ProcessedConversation, resolve_title
from ..platforms import Platform, get_platform_config
from .base import PlatformExtractor, raise_for_fetch

logger = logging.getLogger(__name__)

HEADING_PATTERN = re.compile(r"^#\s+(.+?)\s*#*\s*$", re.MULTILINE)


def extract_title_from_markdown(markdown: str) -> str | None:
    """First level-one heading, if any."""
    match = HEADING_PATTERN.search(markdown or "")
    return match.group(1).strip() if match else None


class MarkdownExtractor(PlatformExtractor):
    """Fetches raw markdown for a platform configured with the "md" method."""

    def __init__(self, platform: Platform, http_client: HttpClient | None = None, timeout: float | None = None):
        self.platform = platform
        self.URL_PATTERN = get_platform_config(platform).url_pattern
        self.timeout = config.HTTP_TIMEOUT if timeout is None else timeout
        self.http_client = http_client or HttpClient(timeout=self.timeout)

    def is_valid_url(self, url: str) -> bool:
        if not url or not isinstance(url, str):
            return False
        return bool(self.URL_PATTERN.fullmatch(url))

    def extract_messages(self, markdown: str) -> list[ConversationMessage]:
        """Recover turns from markdown; no layout is recognized yet."""
        return []

    async def _parse(self, url: str) -> ParseResult:
        result = await self.http_client.fetch(url, timeout=self.timeout)
        raise_for_fetch(result, self.timeout)

        markdown = result.content or ""
        messages = self.extract_messages(markdown)
        if not messages:
            name = get_platform_config(self.platform).name
            raise ExtractionError(
                f"Markdown extraction is not yet supported for {name}",
                ErrorCode.NOT_IMPLEMENTED,
            )

        title = resolve_title(extract_title_from_markdown(markdown), self.platform, messages)
        return ParseResult.from_conversation(
            ProcessedConversation(messages=messages, title=title, platform=self.platform),
            empty_error="Conversation appears to be empty",
            empty_code=ErrorCode.EMPTY_CONVERSATION,
        )
