"""
Microsoft Copilot conversation extractor using the shares API.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict

from ..errors import ErrorCode, ExtractionError
from ..models import ConversationMessage, ProcessedConversation, normalize_role
from ..platforms import Platform
from .base import JsonApiExtractor

logger = logging.getLogger(__name__)

COPILOT_API_BASE = "https://copilot.microsoft.com/c/api/conversations/shares"
DEFAULT_TITLE = "Microsoft Copilot Conversation"
IMAGE_NOTE = "[Note: This message contained images that are not included in the digest]"


class CopilotContentPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    text: str | None = None
    url: str | None = None


class CopilotMessagePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    author: str
    createdAt: str | None = None
    content: list[CopilotContentPart]


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_chronologically(payloads: list[CopilotMessagePayload]) -> list[CopilotMessagePayload]:
    """
    Order messages by createdAt.

    The shares API does not return messages in conversation order. When any
    timestamp is missing or unparseable the source order is kept.
    """
    timestamps = [_parse_timestamp(payload.createdAt) for payload in payloads]
    if any(ts is None for ts in timestamps):
        logger.warning("Copilot messages missing timestamps, keeping source order")
        return payloads
    order = sorted(range(len(payloads)), key=lambda i: timestamps[i])
    return [payloads[i] for i in order]


class CopilotExtractor(JsonApiExtractor):
    """Extractor for copilot.microsoft.com share links."""

    platform = Platform.COPILOT
    URL_PATTERN = re.compile(r"^https://copilot\.microsoft\.com/shares/([A-Za-z0-9_-]+)$")
    EMPTY_ERROR = "No valid messages found in Copilot conversation"

    def api_url(self, conversation_id: str) -> str:
        return f"{COPILOT_API_BASE}/{conversation_id}"

    def map_message(self, payload: CopilotMessagePayload) -> ConversationMessage:
        role = normalize_role(payload.author)
        if role is None:
            raise ExtractionError(f"Unrecognized author {payload.author!r}", ErrorCode.INVALID_MESSAGE)

        text = "\n".join(part.text for part in payload.content if part.type == "text" and part.text)
        if any(part.type == "image" for part in payload.content):
            text = f"{text}\n\n{IMAGE_NOTE}" if text else IMAGE_NOTE

        return ConversationMessage(
            role=role,
            content=text,
            timestamp=payload.createdAt,
            id=payload.id or self.id_factory(),
        )

    def map_payload(self, payload: Any, url: str) -> ProcessedConversation:
        if not isinstance(payload, dict) or not isinstance(payload.get("messages"), list):
            raise ExtractionError("Invalid Copilot conversation data: messages not found", ErrorCode.NO_DATA)

        validated: list[CopilotMessagePayload] = []
        for index, raw in enumerate(payload["messages"]):
            try:
                validated.append(CopilotMessagePayload.model_validate(raw))
            except ValueError as e:
                logger.warning(f"Skipping copilot message {index}: {e}")

        messages = self.map_messages(sort_chronologically(validated), self.map_message)

        title = payload.get("conversationTitle")
        if not isinstance(title, str) or not title.strip():
            title = DEFAULT_TITLE

        return ProcessedConversation(
            messages=messages,
            title=title.strip(),
            platform=self.platform,
        )
