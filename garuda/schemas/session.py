import time
from typing import List

from pydantic import BaseModel, Field

from garuda.schemas.chat import Message


def now_ms() -> int:
    """Wall clock in epoch milliseconds, the unit session timestamps use."""
    return int(time.time() * 1000)


# ==================================================
# Session Schema (client-local persistence)
# ==================================================
class Session(BaseModel):
    """
    One persisted conversation thread.
    The whole object is rewritten on every update, never patched.
    """

    id: str = Field(..., description="Stable session id")
    title: str = Field(default="", description="Derived from the first user message")
    timestamp: int = Field(default_factory=now_ms, description="Last update, epoch milliseconds")
    messages: List[Message] = Field(default_factory=list)
