"""
Google Gemini conversation extractor.

Gemini markup changes often, so each role has a long selector chain and a
generic scan with role heuristics backs them up.
"""

import re

from bs4 import BeautifulSoup

from ..models import ConversationMessage
from ..platforms import Platform
from .base import HtmlExtractor
from .dom import FallbackRule, collect_fallback_messages, collect_role_messages

USER_SELECTORS = [
    ".user-query-container",
    '[data-role="user"]',
    ".query-container",
    '.message-container[data-message-author="user"]',
    ".message-container.user",
    '[data-message-author="user"]',
    ".request-container",
    ".user-message",
]

ASSISTANT_SELECTORS = [
    ".response-container",
    '[data-role="assistant"]',
    ".model-response",
    '.message-container[data-message-author="assistant"]',
    ".message-container.assistant",
    '[data-message-author="assistant"]',
    ".gemini-response",
    ".assistant-message",
]

FALLBACK_RULES = [
    FallbackRule(".message, .msg, .content, .text, .query, .response"),
]


class GeminiExtractor(HtmlExtractor):
    """Extractor for gemini.google.com and g.co/gemini share links."""

    platform = Platform.GEMINI
    URL_PATTERN = re.compile(r"^https://(g\.co/gemini/share|gemini\.google\.com/share)/[A-Za-z0-9]+$")
    WAIT_FOR_SELECTOR = ".message, .content, .text, .query-container, .model-response"
    TITLE_PREFIX = re.compile(r"^Gemini - ")
    GENERIC_TITLES = ("Gemini", "Google Gemini")

    def extract_messages(self, soup: BeautifulSoup) -> list[ConversationMessage]:
        messages = collect_role_messages(soup, USER_SELECTORS, ASSISTANT_SELECTORS)
        if messages:
            return messages
        return collect_fallback_messages(soup, FALLBACK_RULES)
