"""
Tests for the Claude snapshot API extractor.
"""

import copy
import logging

import pytest

from llmdigest.code_blocks import extract_code_blocks
from llmdigest.errors import ErrorCode, ExtractionError
from llmdigest.http_client import HttpFetchResult
from llmdigest.platform_extractors.claude import ClaudeExtractor
from llmdigest.platforms import Platform


@pytest.fixture
def extractor(http_client, id_factory):
    return ClaudeExtractor(http_client=http_client, id_factory=id_factory)


class TestClaudeUrls:
    """Tests for strict Claude URL validation."""

    def test_valid_uuid(self, claude_url):
        assert ClaudeExtractor.is_valid_url(claude_url)

    @pytest.mark.parametrize("url", [
        "https://claude.ai/share/not-a-uuid",
        "https://claude.ai/share/3F2A1B4C-5D6E-4F70-8A9B-0C1D2E3F4A5B",
        "https://claude.ai/share/3f2a1b4c-5d6e-4f70-8a9b-0c1d2e3f4a5b/extra",
        "https://claude.ai/share/3f2a1b4c-5d6e-4f70-8a9b-0c1d2e3f4a5b\n",
        "",
    ])
    def test_invalid(self, url):
        assert not ClaudeExtractor.is_valid_url(url)

    def test_conversation_id_rejects_trailing_newline(self, extractor, claude_url):
        with pytest.raises(ExtractionError) as exc:
            extractor.conversation_id(claude_url + "\n")
        assert exc.value.code == ErrorCode.INVALID_URL_FORMAT

    def test_api_url(self, extractor, claude_url):
        conversation_id = extractor.conversation_id(claude_url)
        assert extractor.api_url(conversation_id) == (
            "https://claude.ai/api/chat_snapshots/3f2a1b4c-5d6e-4f70-8a9b-0c1d2e3f4a5b"
        )


class TestClaudeParse:
    """Tests for ClaudeExtractor.parse."""

    @pytest.mark.asyncio
    async def test_two_messages(self, extractor, http_client, json_result, claude_payload, claude_url):
        http_client.fetch.return_value = json_result(claude_payload)

        result = await extractor.parse(claude_url)

        assert result.success
        conversation = result.conversation
        assert conversation.platform == Platform.CLAUDE
        assert conversation.title == "Refactoring a parser"
        assert conversation.model == "claude-3-5-sonnet"
        assert [m.role for m in conversation.messages] == ["user", "assistant"]
        assert conversation.messages[1].content == "Use str.split()."
        assert conversation.messages[0].id == "m-1"
        assert conversation.extra["conversation_id"] == "3f2a1b4c-5d6e-4f70-8a9b-0c1d2e3f4a5b"

        url = http_client.fetch.call_args.args[0]
        assert url.endswith("/api/chat_snapshots/3f2a1b4c-5d6e-4f70-8a9b-0c1d2e3f4a5b")
        assert http_client.fetch.call_args.kwargs["headers"]["Referer"] == "https://claude.ai/"

    @pytest.mark.asyncio
    async def test_malformed_message_dropped(self, extractor, http_client, json_result, claude_payload, claude_url):
        """One bad message does not fail the conversation."""
        claude_payload["chat_messages"] = [
            {"sender": "human", "text": "Hello"},
            {"text": "no sender at all"},
        ]
        http_client.fetch.return_value = json_result(claude_payload)

        result = await extractor.parse(claude_url)

        assert result.success
        assert len(result.conversation.messages) == 1
        assert result.conversation.messages[0].content == "Hello"

    @pytest.mark.asyncio
    async def test_invalid_url_no_network(self, extractor, http_client):
        result = await extractor.parse("https://claude.ai/share/not-a-uuid")

        assert not result.success
        assert result.code == ErrorCode.INVALID_URL_FORMAT
        http_client.fetch.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status,code,error", [
        (404, ErrorCode.CONVERSATION_NOT_FOUND, "Conversation not found"),
        (403, ErrorCode.ACCESS_DENIED, "Access denied"),
        (429, ErrorCode.RATE_LIMITED, "Rate limit exceeded"),
        (500, ErrorCode.HTTP_ERROR, "HTTP 500"),
    ])
    async def test_status_errors(self, extractor, http_client, claude_url, status, code, error):
        http_client.fetch.return_value = HttpFetchResult(
            success=False, error=f"HTTP {status}", status_code=status, attempts=1
        )

        result = await extractor.parse(claude_url)

        assert not result.success
        assert result.code == code
        assert result.error == error

    @pytest.mark.asyncio
    async def test_retryable_failures_flagged_in_log(self, extractor, http_client, claude_url, caplog):
        http_client.fetch.return_value = HttpFetchResult(
            success=False, error="HTTP 429", status_code=429, attempts=1
        )

        with caplog.at_level(logging.WARNING, logger="llmdigest.platform_extractors.base"):
            await extractor.parse(claude_url)

        assert "[RATE_LIMITED] Rate limit exceeded (retryable)" in caplog.text

    @pytest.mark.asyncio
    async def test_permanent_failures_not_flagged(self, extractor, http_client, claude_url, caplog):
        http_client.fetch.return_value = HttpFetchResult(
            success=False, error="HTTP 404", status_code=404, attempts=1
        )

        with caplog.at_level(logging.WARNING, logger="llmdigest.platform_extractors.base"):
            await extractor.parse(claude_url)

        assert "Conversation not found" in caplog.text
        assert "retryable" not in caplog.text

    @pytest.mark.asyncio
    async def test_timeout(self, http_client, claude_url):
        extractor = ClaudeExtractor(http_client=http_client, timeout=15)
        http_client.fetch.return_value = HttpFetchResult(
            success=False, error="Request timed out", timed_out=True, attempts=3
        )

        result = await extractor.parse(claude_url)

        assert result.code == ErrorCode.TIMEOUT
        assert result.error == "Request timeout after 15s"

    @pytest.mark.asyncio
    async def test_network_error(self, extractor, http_client, claude_url):
        http_client.fetch.return_value = HttpFetchResult(success=False, error="refused", attempts=3)

        result = await extractor.parse(claude_url)

        assert result.code == ErrorCode.NETWORK_ERROR
        assert result.error == "Network error: refused"

    @pytest.mark.asyncio
    async def test_invalid_json(self, extractor, http_client, claude_url):
        http_client.fetch.return_value = HttpFetchResult(success=True, content="<html>", status_code=200)

        result = await extractor.parse(claude_url)

        assert result.code == ErrorCode.NO_DATA

    @pytest.mark.asyncio
    async def test_empty_conversation(self, extractor, http_client, json_result, claude_url):
        http_client.fetch.return_value = json_result({"name": "Empty", "chat_messages": []})

        result = await extractor.parse(claude_url)

        assert not result.success
        assert result.code == ErrorCode.EMPTY_CONVERSATION
        assert result.error == "Conversation appears to be empty"


class TestClaudeMapping:
    """Tests for snapshot payload mapping."""

    def test_mapping_is_idempotent(self, http_client, claude_payload, claude_url):
        extractor = ClaudeExtractor(http_client=http_client, id_factory=lambda: "fixed")
        claude_payload["chat_messages"].append({"sender": "human", "text": "no id here"})

        first = extractor.map_payload(copy.deepcopy(claude_payload), claude_url)
        second = extractor.map_payload(copy.deepcopy(claude_payload), claude_url)

        assert first == second
        assert first.messages[-1].id == "fixed"

    def test_generated_ids(self, extractor, claude_url):
        payload = {"chat_messages": [{"sender": "human", "text": "a"}, {"sender": "assistant", "text": "b"}]}
        conversation = extractor.map_payload(payload, claude_url)
        assert [m.id for m in conversation.messages] == ["msg_1", "msg_2"]

    def test_role_field_fallback(self, extractor):
        message = extractor.map_message({"role": "user", "content": "via role"})
        assert message.role == "user"
        assert message.content == "via role"

    def test_artifacts_become_code_blocks(self, extractor):
        message = extractor.map_message({
            "sender": "assistant",
            "text": "Here is the script.",
            "artifacts": [{"type": "code", "language": "python", "content": "print('hi')"}],
        })
        blocks = extract_code_blocks(message.content)
        assert message.content.startswith("Here is the script.")
        assert len(blocks) == 1
        assert blocks[0].language == "python"
        assert blocks[0].content == "print('hi')"

    def test_artifacts_can_be_disabled(self, http_client):
        extractor = ClaudeExtractor(http_client=http_client, include_artifacts=False)
        message = extractor.map_message({
            "sender": "assistant",
            "text": "Done.",
            "artifacts": [{"language": "python", "content": "x = 1"}],
        })
        assert message.content == "Done."

    def test_null_artifacts_accepted(self, extractor):
        message = extractor.map_message({"sender": "assistant", "text": "ok", "artifacts": None})
        assert message.content == "ok"

    def test_attachments_opt_in(self, http_client):
        extractor = ClaudeExtractor(http_client=http_client, include_attachments=True)
        message = extractor.map_message({
            "sender": "human",
            "text": "See attached",
            "attachments": [{"file_name": "report.pdf"}],
        })
        assert message.content == "See attached\n[Attachment: report.pdf]"

    def test_title_truncated(self, extractor, claude_url):
        payload = {"name": "t" * 120, "chat_messages": [{"sender": "human", "text": "a"}]}
        assert extractor.map_payload(payload, claude_url).title == "t" * 100 + "..."

    def test_default_title(self, extractor, claude_url):
        payload = {"chat_messages": [{"sender": "human", "text": "a"}]}
        assert extractor.map_payload(payload, claude_url).title == "Claude Conversation"

    def test_max_messages(self, http_client, claude_url):
        extractor = ClaudeExtractor(http_client=http_client, max_messages=2)
        payload = {"chat_messages": [{"sender": "human", "text": str(i)} for i in range(5)]}
        assert len(extractor.map_payload(payload, claude_url).messages) == 2
