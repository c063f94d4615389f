"""
Base classes for platform-specific conversation extractors.

Three strategy families share one interface, parse(url) -> ParseResult:
- JsonApiExtractor: platform exposes an internal JSON endpoint
- HtmlExtractor: rendered page is scraped with selector fallback chains
- MarkdownExtractor (markdown.py): raw markdown scraping
"""

import json
import logging
import re
import uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable

from bs4 import BeautifulSoup

from ..browser import BrowserDriver, BrowserError
from ..config import config
from ..errors import ErrorCode, ExtractionError
from ..http_client import HttpClient, HttpFetchResult
from ..models import (
    ConversationMessage,
    ParseResult,
    ProcessedConversation,
    clean_messages,
    resolve_title,
)
from ..platforms import Platform

logger = logging.getLogger(__name__)


def _default_id_factory() -> str:
    return f"msg_{uuid.uuid4().hex}"


def raise_for_fetch(result: HttpFetchResult, timeout: float) -> None:
    """Turn a failed fetch into a typed ExtractionError."""
    if result.success:
        return
    if result.status_code is not None:
        raise ExtractionError.from_status(result.status_code)
    if result.timed_out:
        raise ExtractionError(f"Request timeout after {timeout}s", ErrorCode.TIMEOUT)
    raise ExtractionError(f"Network error: {result.error}", ErrorCode.NETWORK_ERROR)


class PlatformExtractor(ABC):
    """Base class for platform extractors."""

    platform: Platform
    # Strict share URL shape; stricter than the detection pattern
    URL_PATTERN: re.Pattern

    @classmethod
    def is_valid_url(cls, url: str) -> bool:
        """Check if the URL has a shape this extractor can handle."""
        if not url or not isinstance(url, str):
            return False
        return bool(cls.URL_PATTERN.fullmatch(url))

    async def parse(self, url: str) -> ParseResult:
        """
        Extract a conversation from a share URL.

        Expected failures come back as a failed ParseResult; only unexpected
        exceptions propagate.
        """
        try:
            return await self._parse(url)
        except ExtractionError as e:
            hint = " (retryable)" if e.is_retryable else ""
            logger.warning(f"{self.platform.value} extraction failed for {url}: [{e.code.value}] {e.message}{hint}")
            return ParseResult.failure(e.message, e.code)

    @abstractmethod
    async def _parse(self, url: str) -> ParseResult:
        pass


class JsonApiExtractor(PlatformExtractor):
    """Extractor for platforms with an internal structured API."""

    API_HEADERS: dict[str, str] = {"Accept": "application/json"}
    EMPTY_ERROR = "Conversation appears to be empty"

    def __init__(
        self,
        http_client: HttpClient | None = None,
        timeout: float | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        """
        Args:
            http_client: Client used for the API call
            timeout: Request timeout in seconds
            id_factory: Generates ids for messages that lack one
        """
        self.timeout = config.JSON_API_TIMEOUT if timeout is None else timeout
        self.http_client = http_client or HttpClient(timeout=self.timeout)
        self.id_factory = id_factory or _default_id_factory

    def conversation_id(self, url: str) -> str:
        """Pull the conversation id out of a share URL."""
        match = self.URL_PATTERN.fullmatch(url) if isinstance(url, str) else None
        if not match:
            raise ExtractionError(
                f"Invalid {self.platform.value} share URL format",
                ErrorCode.INVALID_URL_FORMAT,
            )
        return match.group(1)

    @abstractmethod
    def api_url(self, conversation_id: str) -> str:
        """Internal API endpoint for a conversation id."""
        pass

    @abstractmethod
    def map_payload(self, payload: Any, url: str) -> ProcessedConversation:
        """Map a decoded API payload to a ProcessedConversation."""
        pass

    async def fetch_payload(self, url: str) -> Any:
        """Call the internal API and decode its JSON body."""
        api_url = self.api_url(self.conversation_id(url))
        logger.info(f"Fetching {self.platform.value} conversation from {api_url}")

        result = await self.http_client.fetch(api_url, headers=self.API_HEADERS, timeout=self.timeout)
        raise_for_fetch(result, self.timeout)

        if not result.content:
            raise ExtractionError("No conversation data received", ErrorCode.NO_DATA)

        try:
            return json.loads(result.content)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Invalid JSON response: {e}", ErrorCode.NO_DATA) from e

    async def _parse(self, url: str) -> ParseResult:
        payload = await self.fetch_payload(url)
        conversation = self.map_payload(payload, url)
        return ParseResult.from_conversation(
            conversation,
            empty_error=self.EMPTY_ERROR,
            empty_code=ErrorCode.EMPTY_CONVERSATION,
        )

    def map_messages(
        self,
        raw_messages: Iterable[Any],
        mapper: Callable[[Any], ConversationMessage],
    ) -> list[ConversationMessage]:
        """Map raw messages one by one, skipping any that fail to map."""
        messages = []
        for index, raw in enumerate(raw_messages):
            try:
                messages.append(mapper(raw))
            except (ExtractionError, ValueError, TypeError) as e:
                logger.warning(f"Skipping {self.platform.value} message {index}: {e}")
        return clean_messages(messages)


class HtmlExtractor(PlatformExtractor):
    """Extractor for platforms that only expose rendered markup."""

    # Selector whose appearance means the conversation rendered
    WAIT_FOR_SELECTOR: str | None = None
    # Page-title prefix naming the platform, stripped from titles
    TITLE_PREFIX: re.Pattern | None = None
    # Titles that say nothing about the conversation
    GENERIC_TITLES: tuple[str, ...] = ()

    def __init__(self, driver: BrowserDriver | None = None):
        self.driver = driver or BrowserDriver()

    @abstractmethod
    def extract_messages(self, soup: BeautifulSoup) -> list[ConversationMessage]:
        """Recover role-tagged messages from the rendered document."""
        pass

    def extract_title(
        self,
        soup: BeautifulSoup,
        messages: list[ConversationMessage],
        page_title: str | None = None,
    ) -> str:
        """Page title without the platform prefix, else a first-message excerpt."""
        title = page_title
        if not title and (title_tag := soup.find("title")):
            title = title_tag.get_text()
        title = (title or "").strip()
        if self.TITLE_PREFIX is not None:
            title = self.TITLE_PREFIX.sub("", title).strip()
        return resolve_title(title, self.platform, messages, self.GENERIC_TITLES)

    def parse_html(self, html: str, page_title: str | None = None) -> ParseResult:
        """Extract a conversation from already rendered HTML."""
        soup = BeautifulSoup(html, "html.parser")
        messages = clean_messages(self.extract_messages(soup))
        title = self.extract_title(soup, messages, page_title)
        logger.info(f"Found {len(messages)} messages in {self.platform.value} page")
        return ParseResult.from_conversation(
            ProcessedConversation(messages=messages, title=title, platform=self.platform),
            empty_error="No conversation messages found on the page",
            empty_code=ErrorCode.NO_MESSAGES_FOUND,
        )

    async def _parse(self, url: str) -> ParseResult:
        if not self.driver.is_available:
            raise ExtractionError("Headless browser is not available", ErrorCode.BROWSER_UNAVAILABLE)

        try:
            page = await self.driver.render(url, wait_for_selector=self.WAIT_FOR_SELECTOR)
        except BrowserError as e:
            raise ExtractionError(f"HTML extraction failed: {e}", ErrorCode.BROWSER_ERROR) from e

        return self.parse_html(page.html, page.title)
