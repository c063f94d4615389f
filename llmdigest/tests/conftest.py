"""
Pytest fixtures for extraction tests.

No test touches the network: HTTP clients and the browser driver are mocked.
"""

import itertools
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from llmdigest.browser import RenderedPage
from llmdigest.http_client import HttpFetchResult


@pytest.fixture
def claude_url():
    return "https://claude.ai/share/3f2a1b4c-5d6e-4f70-8a9b-0c1d2e3f4a5b"


@pytest.fixture
def copilot_url():
    return "https://copilot.microsoft.com/shares/Ab3dE_f9-x"


@pytest.fixture
def id_factory():
    """Deterministic message id generator."""
    counter = itertools.count(1)
    return lambda: f"msg_{next(counter)}"


@pytest.fixture
def json_result():
    """Build a successful fetch carrying a JSON body."""
    def build(payload) -> HttpFetchResult:
        return HttpFetchResult(success=True, content=json.dumps(payload), status_code=200, attempts=1)
    return build


@pytest.fixture
def http_client():
    """HttpClient stand-in whose fetch() is an AsyncMock."""
    client = MagicMock()
    client.fetch = AsyncMock()
    return client


@pytest.fixture
def browser_driver():
    """BrowserDriver stand-in; set render.return_value to a RenderedPage."""
    driver = MagicMock()
    driver.is_available = True
    driver.render = AsyncMock()
    return driver


@pytest.fixture
def rendered():
    """Build a RenderedPage from static HTML."""
    def build(html: str, title: str = "", url: str = "https://example.com") -> RenderedPage:
        return RenderedPage(url=url, final_url=url, html=html, title=title, selector_found=True)
    return build


@pytest.fixture
def claude_payload():
    """Snapshot payload with one human and one assistant message."""
    return {
        "uuid": "3f2a1b4c-5d6e-4f70-8a9b-0c1d2e3f4a5b",
        "name": "Refactoring a parser",
        "model": "claude-3-5-sonnet",
        "created_at": "2024-05-01T10:00:00Z",
        "updated_at": "2024-05-01T10:05:00Z",
        "chat_messages": [
            {
                "uuid": "m-1",
                "sender": "human",
                "text": "How do I split a string in Python?",
                "created_at": "2024-05-01T10:00:00Z",
            },
            {
                "uuid": "m-2",
                "sender": "assistant",
                "content": [{"type": "text", "text": "Use str.split()."}],
                "created_at": "2024-05-01T10:00:05Z",
            },
        ],
    }


@pytest.fixture
def copilot_payload():
    """Shares payload returned newest-first, as the API does."""
    return {
        "conversationTitle": "Trip planning",
        "messages": [
            {
                "id": "c-2",
                "author": "ai",
                "createdAt": "2024-06-01T09:00:10Z",
                "content": [{"type": "text", "text": "Lisbon is lovely in spring."}],
            },
            {
                "id": "c-1",
                "author": "human",
                "createdAt": "2024-06-01T09:00:00Z",
                "content": [{"type": "text", "text": "Where should I travel in April?"}],
            },
        ],
    }
