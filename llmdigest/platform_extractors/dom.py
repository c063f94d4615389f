"""
Shared DOM helpers for HTML extractors.

Selector fallback chains are plain data: an ordered list of CSS selectors per
role, where the first selector matching at least one element wins. Platform
modules only declare their chains and code-block conventions.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Callable, Iterable

from bs4 import BeautifulSoup, NavigableString, Tag

from ..code_blocks import detect_language, encode_code_block
from ..models import ConversationMessage, Role

logger = logging.getLogger(__name__)

# Returns (language, code) for a code element or container
CodeReader = Callable[[Tag], tuple[str, str]]


@dataclass(frozen=True)
class FallbackRule:
    """Broad selector used when no role-specific chain matched."""
    selector: str
    role: Role | None = None  # None: classify from class/container hints
    min_length: int = 0  # content must be longer than this
    render_code: bool = True


def _classes(element: Tag) -> list[str]:
    classes = element.get("class") or []
    if isinstance(classes, str):
        classes = classes.split()
    return list(classes)


def select_first_matching(soup: BeautifulSoup | Tag, selectors: Iterable[str]) -> tuple[str | None, list[Tag]]:
    """Return the first selector with at least one match, and its matches."""
    for selector in selectors:
        elements = soup.select(selector)
        if elements:
            logger.debug(f"Found {len(elements)} elements with selector: {selector}")
            return selector, elements
    return None, []


def read_code_element(code: Tag) -> tuple[str, str]:
    """Language and text of a <code> element using the shared heuristics."""
    text = code.get_text().strip()
    first_line = text.split("\n", 1)[0] if text else ""
    highlight_classes = [
        cls
        for token in code.find_all(class_=True)
        for cls in _classes(token)
        if cls.startswith("hljs-")
    ]
    language = detect_language(
        first_line,
        class_names=_classes(code),
        data_language=code.get("data-language"),
        highlight_classes=highlight_classes,
    )
    return language.value, text


def text_with_code_blocks(
    element: Tag,
    code_selector: str = "code",
    read_code: CodeReader = read_code_element,
) -> str:
    """
    Element text with each code block replaced by an inline sentinel.

    Works on a copy, so the parsed document is left untouched.
    """
    clone = copy.copy(element)
    matches = clone.select(code_selector)
    match_ids = {id(match) for match in matches}
    # Outermost blocks only; nested matches go away with their container
    blocks = [block for block in matches if not _is_nested_in(block, match_ids)]
    for block in blocks:
        language, code = read_code(block)
        block.replace_with(NavigableString(encode_code_block(language, code)))
    return clone.get_text().strip()


def plain_text(element: Tag) -> str:
    return element.get_text().strip()


def document_positions(soup: BeautifulSoup) -> dict[int, int]:
    """Map each tag (by id) to its position in document order."""
    return {id(tag): index for index, tag in enumerate(soup.find_all(True))}


def _is_nested_in(element: Tag, captured: set[int]) -> bool:
    return any(id(parent) in captured for parent in element.parents)


def _contains_any(element: Tag, captured: set[int]) -> bool:
    return any(id(child) in captured for child in element.find_all(True))


def collect_role_messages(
    soup: BeautifulSoup,
    user_selectors: list[str],
    assistant_selectors: list[str],
    render_user: Callable[[Tag], str] = plain_text,
    render_assistant: Callable[[Tag], str] = text_with_code_blocks,
) -> list[ConversationMessage]:
    """
    Run the user and assistant selector chains and merge them in page order.
    """
    positions = document_positions(soup)
    found: list[tuple[int, ConversationMessage]] = []

    chains: list[tuple[Role, list[str], Callable[[Tag], str]]] = [
        ("user", user_selectors, render_user),
        ("assistant", assistant_selectors, render_assistant),
    ]
    for role, selectors, render in chains:
        selector, elements = select_first_matching(soup, selectors)
        if selector is None:
            logger.debug(f"No {role} elements matched any selector")
            continue
        logger.info(f"Using {role} selector {selector!r} ({len(elements)} elements)")
        for element in elements:
            content = render(element)
            if content:
                found.append((positions.get(id(element), 0), ConversationMessage(role=role, content=content)))

    found.sort(key=lambda item: item[0])
    return [message for _, message in found]


USER_CLASS_HINTS = ("user", "request")
USER_CONTAINER_SELECTORS = ('[data-message-author="user"]', ".query-container")


def guess_role(element: Tag) -> Role:
    """Classify an element without a role-specific selector; assistant by default."""
    classes = [cls.lower() for cls in _classes(element)]
    if any(cls in USER_CLASS_HINTS for cls in classes):
        return "user"
    if element.get("data-role") == "user":
        return "user"
    for parent in element.parents:
        if not isinstance(parent, Tag) or parent.name == "[document]":
            break
        if parent.get("data-message-author") == "user" or "query-container" in _classes(parent):
            return "user"
    return "assistant"


def collect_fallback_messages(
    soup: BeautifulSoup,
    rules: list[FallbackRule],
    code_selector: str = "code",
    read_code: CodeReader = read_code_element,
) -> list[ConversationMessage]:
    """
    Broad fallback scan for pages where no role chain matched.

    Elements nested in (or containing) an already captured element are
    skipped so the same text is not collected twice.
    """
    positions = document_positions(soup)
    captured: set[int] = set()
    found: list[tuple[int, ConversationMessage]] = []

    for rule in rules:
        elements = soup.select(rule.selector)
        logger.debug(f"Fallback selector {rule.selector!r} matched {len(elements)} elements")
        for element in elements:
            if id(element) in captured or _is_nested_in(element, captured) or _contains_any(element, captured):
                continue
            if rule.render_code:
                content = text_with_code_blocks(element, code_selector, read_code)
            else:
                content = plain_text(element)
            if not content or len(content) <= rule.min_length:
                continue
            role = rule.role or guess_role(element)
            captured.add(id(element))
            found.append((positions.get(id(element), 0), ConversationMessage(role=role, content=content)))

    found.sort(key=lambda item: item[0])
    return [message for _, message in found]
