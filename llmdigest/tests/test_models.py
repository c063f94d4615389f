"""
Tests for the normalized conversation models and helpers.
"""

from llmdigest.code_blocks import encode_code_block
from llmdigest.errors import ErrorCode
from llmdigest.models import (
    ConversationMessage,
    ParseResult,
    ProcessedConversation,
    clean_messages,
    normalize_role,
    resolve_title,
    truncate,
)
from llmdigest.platforms import Platform


class TestNormalizeRole:
    """Tests for role alias mapping."""

    def test_user_aliases(self):
        assert normalize_role("human") == "user"
        assert normalize_role("User") == "user"

    def test_assistant_aliases(self):
        for raw in ("assistant", "ai", "bot", "model", " AI "):
            assert normalize_role(raw) == "assistant"

    def test_unknown_roles(self):
        assert normalize_role("system") is None
        assert normalize_role("") is None
        assert normalize_role(None) is None


class TestCleanMessages:
    """Tests for dropping unusable messages."""

    def test_drops_blank_and_invalid(self):
        messages = [
            ConversationMessage(role="user", content="hello"),
            ConversationMessage(role="assistant", content="   "),
            ConversationMessage(role="system", content="ignored"),
            ConversationMessage(role="assistant", content="hi there"),
        ]
        cleaned = clean_messages(messages)
        assert [m.content for m in cleaned] == ["hello", "hi there"]

    def test_preserves_order(self):
        messages = [ConversationMessage(role="user", content=str(i)) for i in range(5)]
        assert [m.content for m in clean_messages(messages)] == ["0", "1", "2", "3", "4"]


class TestTitles:
    """Tests for title truncation and fallbacks."""

    def test_truncate_short(self):
        assert truncate("short") == "short"

    def test_truncate_long(self):
        result = truncate("x" * 150)
        assert result == "x" * 100 + "..."

    def test_keeps_specific_title(self):
        assert resolve_title("Parser refactor", Platform.GROK) == "Parser refactor"

    def test_generic_title_uses_first_user_message(self):
        messages = [
            ConversationMessage(role="assistant", content="Welcome"),
            ConversationMessage(role="user", content="Explain monads"),
        ]
        assert resolve_title("Grok", Platform.GROK, messages, ("Grok",)) == "Explain monads"

    def test_first_message_title_leaves_out_code(self):
        messages = [ConversationMessage(role="user", content="Fix" + encode_code_block("unknown", "x = 1"))]
        title = resolve_title("ChatGPT", Platform.CHATGPT, messages, ("ChatGPT",))
        assert title == "Fix"

    def test_code_only_first_message_uses_default(self):
        messages = [ConversationMessage(role="user", content=encode_code_block("python", "print(1)"))]
        assert resolve_title("", Platform.CHATGPT, messages) == "ChatGPT Conversation"

    def test_default_title(self):
        assert resolve_title("", Platform.COPILOT) == "Microsoft Copilot Conversation"
        assert resolve_title(None, Platform.CLAUDE, []) == "Claude Conversation"


class TestParseResult:
    """Tests for the non-empty success invariant."""

    def test_empty_conversation_is_failure(self):
        conversation = ProcessedConversation(messages=[], title="t", platform=Platform.CLAUDE)
        result = ParseResult.from_conversation(conversation)
        assert not result.success
        assert result.conversation is None
        assert result.code == ErrorCode.NO_MESSAGES_FOUND

    def test_custom_empty_error(self):
        conversation = ProcessedConversation(messages=[], title="t", platform=Platform.CLAUDE)
        result = ParseResult.from_conversation(conversation, "Empty", ErrorCode.EMPTY_CONVERSATION)
        assert result.error == "Empty"
        assert result.code == ErrorCode.EMPTY_CONVERSATION

    def test_non_empty_is_success(self):
        conversation = ProcessedConversation(
            messages=[ConversationMessage(role="user", content="hi")],
            title="t",
            platform=Platform.CLAUDE,
        )
        result = ParseResult.from_conversation(conversation)
        assert result.success
        assert result.conversation is conversation
        assert result.error is None
