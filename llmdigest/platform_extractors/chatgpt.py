"""
ChatGPT conversation extractor.

Share pages mark each turn with a data-turn attribute; older layouts use
data-message-author-role instead.
"""

import re

from bs4 import BeautifulSoup

from ..models import ConversationMessage
from ..platforms import Platform
from .base import HtmlExtractor
from .dom import FallbackRule, collect_fallback_messages, collect_role_messages, text_with_code_blocks

USER_SELECTORS = [
    '[data-turn="user"]',
    '[data-message-author-role="user"]',
]

ASSISTANT_SELECTORS = [
    '[data-turn="assistant"]',
    '[data-message-author-role="assistant"]',
]

FALLBACK_RULES = [
    FallbackRule('[class*="markdown"]', role="assistant", min_length=50),
]


class ChatGPTExtractor(HtmlExtractor):
    """Extractor for chatgpt.com share links."""

    platform = Platform.CHATGPT
    URL_PATTERN = re.compile(r"^https://chatgpt\.com/share/[a-f0-9-]+$")
    WAIT_FOR_SELECTOR = "[data-turn]"
    TITLE_PREFIX = re.compile(r"^ChatGPT - ")
    GENERIC_TITLES = ("ChatGPT",)

    def extract_messages(self, soup: BeautifulSoup) -> list[ConversationMessage]:
        # Users paste code too, so both roles keep their code blocks
        messages = collect_role_messages(
            soup,
            USER_SELECTORS,
            ASSISTANT_SELECTORS,
            render_user=text_with_code_blocks,
            render_assistant=text_with_code_blocks,
        )
        if messages:
            return messages
        return collect_fallback_messages(soup, FALLBACK_RULES)
