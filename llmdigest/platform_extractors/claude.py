"""
Claude conversation extractor using the chat snapshot API.

Share URLs carry the snapshot UUID, which maps directly to
https://claude.ai/api/chat_snapshots/<uuid>.
"""

import logging
import re
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict

from ..code_blocks import encode_code_block, language_from_name
from ..config import config
from ..errors import ErrorCode, ExtractionError
from ..http_client import HttpClient
from ..models import ConversationMessage, ProcessedConversation, normalize_role, truncate
from ..platforms import Platform
from .base import JsonApiExtractor

logger = logging.getLogger(__name__)

CLAUDE_API_BASE = "https://claude.ai/api/chat_snapshots"
DEFAULT_TITLE = "Claude Conversation"


class ClaudeContentBlock(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = "text"
    text: str | None = None


class ClaudeArtifact(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    uuid: str | None = None
    type: str | None = None  # text, code, html, svg, mermaid
    title: str | None = None
    name: str | None = None
    content: str | None = None
    text: str | None = None
    language: str | None = None


class ClaudeAttachment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    name: str | None = None
    file_name: str | None = None
    type: str | None = None


class ClaudeMessagePayload(BaseModel):
    """One entry of chat_messages in a snapshot payload."""
    model_config = ConfigDict(extra="ignore")

    uuid: str | None = None
    id: str | None = None
    sender: str | None = None
    role: str | None = None
    text: str | None = None
    content: str | list[ClaudeContentBlock] | None = None
    created_at: str | None = None
    timestamp: str | None = None
    artifacts: list[ClaudeArtifact] | None = None
    attachments: list[ClaudeAttachment] | None = None

    def body(self) -> str:
        if self.text:
            return self.text
        if isinstance(self.content, str):
            return self.content
        if self.content:
            return "\n".join(block.text for block in self.content if block.type == "text" and block.text)
        return ""


class ClaudeExtractor(JsonApiExtractor):
    """Extractor for claude.ai share links."""

    platform = Platform.CLAUDE
    URL_PATTERN = re.compile(
        r"^https://claude\.ai/share/"
        r"([a-f0-9]{8}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{4}-[a-f0-9]{12})$"
    )
    API_HEADERS = {
        "Accept": "application/json",
        "Referer": "https://claude.ai/",
        "Origin": "https://claude.ai",
    }

    def __init__(
        self,
        http_client: HttpClient | None = None,
        timeout: float | None = None,
        id_factory: Callable[[], str] | None = None,
        include_artifacts: bool = True,
        include_attachments: bool = False,
        max_messages: int | None = None,
    ):
        super().__init__(http_client=http_client, timeout=timeout, id_factory=id_factory)
        self.include_artifacts = include_artifacts
        self.include_attachments = include_attachments
        self.max_messages = config.CLAUDE_MAX_MESSAGES if max_messages is None else max_messages

    def api_url(self, conversation_id: str) -> str:
        return f"{CLAUDE_API_BASE}/{conversation_id}"

    def map_message(self, raw: Any) -> ConversationMessage:
        """Map one raw snapshot message; raises if it cannot be used."""
        if not isinstance(raw, dict):
            raise ExtractionError("Invalid message data", ErrorCode.INVALID_MESSAGE)

        payload = ClaudeMessagePayload.model_validate(raw)

        role = normalize_role(payload.sender) or normalize_role(payload.role)
        if role is None:
            raise ExtractionError(
                f"Unrecognized sender {payload.sender or payload.role!r}",
                ErrorCode.INVALID_MESSAGE,
            )

        parts = [payload.body()]
        if self.include_artifacts:
            for artifact in payload.artifacts or []:
                code = artifact.content or artifact.text
                if code:
                    language = artifact.language or artifact.type or "unknown"
                    parts.append(encode_code_block(language_from_name(language).value, code))
        if self.include_attachments:
            for attachment in payload.attachments or []:
                name = attachment.name or attachment.file_name
                if name:
                    parts.append(f"[Attachment: {name}]")

        content = "\n".join(part for part in parts if part).strip()
        if not content:
            raise ExtractionError("Message has no text content", ErrorCode.INVALID_MESSAGE)

        return ConversationMessage(
            role=role,
            content=content,
            timestamp=payload.created_at or payload.timestamp,
            id=payload.uuid or payload.id or self.id_factory(),
        )

    def map_payload(self, payload: Any, url: str) -> ProcessedConversation:
        if not payload or not isinstance(payload, dict):
            raise ExtractionError("No conversation data received", ErrorCode.NO_DATA)

        raw_messages = payload.get("chat_messages")
        if not isinstance(raw_messages, list):
            raw_messages = []

        messages = self.map_messages(raw_messages, self.map_message)[: self.max_messages]

        title = payload.get("name") or payload.get("title") or DEFAULT_TITLE
        if not isinstance(title, str) or not title.strip():
            title = DEFAULT_TITLE

        model = payload.get("model") if isinstance(payload.get("model"), str) else None

        return ProcessedConversation(
            messages=messages,
            title=truncate(title.strip()),
            platform=self.platform,
            model=model,
            extra={
                "conversation_id": payload.get("uuid") or payload.get("id") or self.conversation_id(url),
                "created_at": payload.get("created_at"),
                "updated_at": payload.get("updated_at"),
            },
        )
