"""
Pydantic models for the extraction response wire shape.

Field names serialize in camelCase (extractionTime, messageCount) to match
what API consumers receive.
"""

from pydantic import BaseModel, ConfigDict, Field

from .models import ConversationMessage, ExtractionMetadata, ExtractionResult, ProcessedConversation


class MessageSchema(BaseModel):
    """One conversation turn."""
    role: str
    content: str
    timestamp: str | None = None

    @classmethod
    def from_message(cls, message: ConversationMessage) -> "MessageSchema":
        return cls(role=message.role, content=message.content, timestamp=message.timestamp)


class ConversationSchema(BaseModel):
    messages: list[MessageSchema]
    title: str
    platform: str
    model: str | None = None

    @classmethod
    def from_conversation(cls, conversation: ProcessedConversation) -> "ConversationSchema":
        return cls(
            messages=[MessageSchema.from_message(m) for m in conversation.messages],
            title=conversation.title,
            platform=conversation.platform.value,
            model=conversation.model,
        )


class MetadataSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    extraction_time: int = Field(alias="extractionTime")
    method: str
    message_count: int = Field(alias="messageCount")

    @classmethod
    def from_metadata(cls, metadata: ExtractionMetadata) -> "MetadataSchema":
        return cls(
            extraction_time=metadata.extraction_time,
            method=metadata.method,
            message_count=metadata.message_count,
        )


class ExtractionResponse(BaseModel):
    """Envelope returned to callers of the extraction API."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    conversation: ConversationSchema | None = None
    error: str | None = None
    error_code: str | None = Field(default=None, alias="errorCode")
    metadata: MetadataSchema | None = None

    @classmethod
    def from_result(cls, result: ExtractionResult) -> "ExtractionResponse":
        return cls(
            success=result.success,
            conversation=ConversationSchema.from_conversation(result.conversation) if result.conversation else None,
            error=result.error,
            error_code=result.error_code.value if result.error_code else None,
            metadata=MetadataSchema.from_metadata(result.metadata) if result.metadata else None,
        )

    def to_wire(self) -> dict:
        """camelCase dict without unset optional fields."""
        return self.model_dump(by_alias=True, exclude_none=True)
