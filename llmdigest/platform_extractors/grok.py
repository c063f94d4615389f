"""
Grok conversation extractor.

Grok wraps code in container divs with a small monospace header naming the
language, so code blocks are read from the container rather than <code>.
"""

import re

from bs4 import BeautifulSoup, Tag

from ..code_blocks import Language, language_from_name
from ..models import ConversationMessage
from ..platforms import Platform
from .base import HtmlExtractor
from .dom import (
    FallbackRule,
    collect_fallback_messages,
    collect_role_messages,
    read_code_element,
    text_with_code_blocks,
)

CODE_CONTAINER_SELECTOR = 'div[class*="@container/code-block"]'
LANGUAGE_LABEL_SELECTOR = "span.font-mono.text-xs"

USER_SELECTORS = [".message-bubble"]
ASSISTANT_SELECTORS = [".response-content-markdown"]

FALLBACK_RULES = [
    FallbackRule(".prose", role="assistant", min_length=50),
    FallbackRule('[class*="markdown"]', role="assistant", min_length=50),
    FallbackRule('[class*="message"]', role="user", min_length=30, render_code=False),
]


def read_code_container(container: Tag) -> tuple[str, str]:
    """Language from the container header, code from its <code> element."""
    code = container.find("code")
    if code is None:
        return read_code_element(container)

    language, text = read_code_element(code)
    label = container.select_one(LANGUAGE_LABEL_SELECTOR)
    name = label.get_text().strip() if label is not None else ""
    if name:
        # Labels outside the known set keep their own name
        resolved = language_from_name(name)
        language = name.lower() if resolved is Language.OTHER else resolved.value
    return language, text


def render_response(element: Tag) -> str:
    return text_with_code_blocks(element, CODE_CONTAINER_SELECTOR, read_code_container)


class GrokExtractor(HtmlExtractor):
    """Extractor for grok.com share links."""

    platform = Platform.GROK
    URL_PATTERN = re.compile(r"^https://grok\.com/share/[A-Za-z0-9_-]+$")
    WAIT_FOR_SELECTOR = ".response-content-markdown, .message-bubble"
    TITLE_PREFIX = re.compile(r"^Grok\s*[-:]\s*", re.IGNORECASE)
    GENERIC_TITLES = ("Grok",)

    def extract_messages(self, soup: BeautifulSoup) -> list[ConversationMessage]:
        messages = collect_role_messages(
            soup,
            USER_SELECTORS,
            ASSISTANT_SELECTORS,
            render_assistant=render_response,
        )
        if messages:
            return messages
        return collect_fallback_messages(
            soup,
            FALLBACK_RULES,
            code_selector=CODE_CONTAINER_SELECTOR,
            read_code=read_code_container,
        )
