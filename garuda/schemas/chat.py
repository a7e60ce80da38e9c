from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


# ==================================================
# Message Content (tagged union)
# ==================================================
class TextSegment(BaseModel):
    """One typed segment of a structured message. Only "text" segments carry prose."""

    type: str = Field(..., description="Segment type, e.g. 'text'")
    text: str = Field(default="")


class PlainContent(BaseModel):
    kind: Literal["plain"] = "plain"
    text: str = ""


class SegmentedContent(BaseModel):
    kind: Literal["segmented"] = "segmented"
    segments: List[TextSegment] = Field(default_factory=list)


MessageContent = Annotated[Union[PlainContent, SegmentedContent], Field(discriminator="kind")]


def flatten_content(content: MessageContent) -> str:
    """
    Project message content to the flat text sent to a provider.
    Segmented content keeps only its text-typed segments, in order.
    """
    if isinstance(content, SegmentedContent):
        return "".join(seg.text for seg in content.segments if seg.type == "text")
    return content.text


# ==================================================
# Chat Schemas
# ==================================================
class Message(BaseModel):
    """
    Represents a single message in the conversation history.
    Browser clients may send structured `parts` instead of a `content` string.
    """

    id: Optional[str] = Field(default=None, description="Client generated message id")
    role: Literal["user", "assistant", "system"] = Field(..., description="Who sent the message")
    content: Optional[str] = Field(default=None, description="The message text")
    parts: Optional[List[TextSegment]] = Field(default=None, description="Structured message segments")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: Optional[str]) -> Optional[str]:
        # Check for null bytes
        if v is not None and "\0" in v:
            raise ValueError("Content contains null bytes")
        return v

    @property
    def body(self) -> MessageContent:
        """The message content as a tagged union."""
        if self.content is not None:
            return PlainContent(text=self.content)
        if self.parts is not None:
            return SegmentedContent(segments=self.parts)
        return PlainContent(text="")

    def to_provider(self) -> dict:
        """The {role, content} pair providers understand."""
        return {"role": self.role, "content": flatten_content(self.body)}


class ChatRequest(BaseModel):
    """
    Payload sent to the /chat endpoint: the whole conversation so far,
    without the system persona.
    """

    messages: List[Message] = Field(default_factory=list)


class DailyQuote(BaseModel):
    """A verse shown above the chat window."""

    text: str
    source: str
