# Re-export schemas so "from garuda.schemas import ChatRequest, Message" works
from garuda.schemas.chat import (
    ChatRequest,
    DailyQuote,
    Message,
    MessageContent,
    PlainContent,
    SegmentedContent,
    TextSegment,
    flatten_content,
)
from garuda.schemas.session import Session

__all__ = [
    "ChatRequest",
    "DailyQuote",
    "Message",
    "MessageContent",
    "PlainContent",
    "SegmentedContent",
    "Session",
    "TextSegment",
    "flatten_content",
]
