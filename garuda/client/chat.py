import codecs
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

import httpx

from garuda.client.sessions import SessionStore, new_id
from garuda.core.config import settings
from garuda.core.config.logging import get_logger
from garuda.schemas.chat import Message
from garuda.schemas.session import Session

logger = get_logger(__name__)

APOLOGY = "Sorry, I encountered an error connecting to the spiritual realm."


def clean_input(text: str) -> str:
    """Typed text as it is stored: NUL bytes are dropped."""
    return text.replace("\0", "")


class ChatState(str, Enum):
    IDLE = "idle"
    AWAITING_FIRST_BYTE = "awaiting_first_byte"
    STREAMING = "streaming"
    SETTLED = "settled"


class Outcome(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class ChatOutcome:
    session_id: str
    outcome: Outcome
    reply: Message


# ==================================================
# Chat Client
# ==================================================
class ChatClient:
    """
    Drives one conversation turn at a time against the streaming proxy.

    State per request: idle -> awaiting_first_byte -> streaming -> settled -> idle.
    The user turn is persisted before the request is sent; the assistant turn
    is persisted once, when the stream ends or fails. `on_update` is called
    after every visible change (new message, each chunk, state changes).
    """

    def __init__(
        self,
        store: SessionStore,
        api_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_update: Optional[Callable[["ChatClient"], None]] = None,
    ):
        self.store = store
        self.api_url = api_url or settings.GARUDA_API_URL
        self.on_update = on_update
        self._transport = transport

        self.state = ChatState.IDLE
        self.last_outcome: Optional[Outcome] = None
        # No session is pre-selected: the first submission creates one
        self.active_session_id: Optional[str] = None
        # Session the in-flight reply belongs to
        self.pending_session_id: Optional[str] = None

    # --------------------------------------------------
    # Session selection
    # --------------------------------------------------
    @property
    def active_session(self) -> Optional[Session]:
        if self.active_session_id is None:
            return None
        return self.store.get(self.active_session_id)

    @property
    def active_messages(self) -> List[Message]:
        session = self.active_session
        return list(session.messages) if session else []

    def select_session(self, session_id: str) -> Session:
        session = self.store.get(session_id)
        if session is None:
            raise ValueError(f"session '{session_id}' not found")
        self.active_session_id = session_id
        self._notify()
        return session

    def new_chat(self) -> None:
        self.active_session_id = None
        self._notify()

    # --------------------------------------------------
    # Request state
    # --------------------------------------------------
    @property
    def is_working(self) -> bool:
        """True while no response has arrived yet (the UI shows a working indicator)."""
        return self.state == ChatState.AWAITING_FIRST_BYTE

    def can_submit(self, text: str) -> bool:
        return self.state == ChatState.IDLE and bool(clean_input(text).strip())

    def _notify(self) -> None:
        if self.on_update is not None:
            self.on_update(self)

    def _set_state(self, state: ChatState) -> None:
        self.state = state
        self._notify()

    def _append_user_turn(self, text: str) -> Session:
        message = Message(id=new_id(), role="user", content=text)
        session = self.active_session
        if session is None:
            session = self.store.new_session(message)
            self.active_session_id = session.id
            logger.info("chat_session_created", session_id=session.id, title=session.title)
        else:
            session.messages.append(message)
        # Optimistic: saved before the network call, whatever happens next
        self.store.upsert(session)
        self._notify()
        return session

    async def submit(self, text: str) -> Optional[ChatOutcome]:
        """Send `text` in the active session and stream the reply into it.

        Returns None when nothing was submitted (empty text or a request
        already in flight).
        """
        if not self.can_submit(text):
            return None
        text = clean_input(text)

        # The reply is bound to this session even if the user switches away
        target = self._append_user_turn(text)
        self.pending_session_id = target.id
        self.last_outcome = None
        self._set_state(ChatState.AWAITING_FIRST_BYTE)

        placeholder: Optional[Message] = None
        payload = {"messages": [m.model_dump(exclude_none=True) for m in target.messages]}

        try:
            async with httpx.AsyncClient(timeout=None, transport=self._transport) as client:
                async with client.stream("POST", self.api_url, json=payload) as response:
                    response.raise_for_status()

                    placeholder = Message(id=new_id(), role="assistant", content="")
                    target.messages.append(placeholder)
                    self._set_state(ChatState.STREAMING)

                    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
                    accumulated = ""
                    async for chunk in response.aiter_bytes():
                        accumulated += decoder.decode(chunk)
                        placeholder.content = accumulated
                        self._notify()

                    tail = decoder.decode(b"", final=True)
                    if tail:
                        accumulated += tail
                        placeholder.content = accumulated
                        self._notify()

        except Exception as e:
            # Any fetch or read failure: the conversation carries on with an apology
            logger.error(
                "chat_request_failed",
                session_id=target.id,
                error_type=type(e).__name__,
                error=str(e),
            )
            if placeholder is not None and not placeholder.content:
                target.messages.remove(placeholder)
            reply = Message(id=new_id(), role="assistant", content=APOLOGY)
            target.messages.append(reply)
            return self._settle(target, Outcome.ERROR, reply)
        except BaseException:
            # Cancellation: unlock the input, keep the user turn
            self.pending_session_id = None
            self.state = ChatState.IDLE
            raise

        logger.info("chat_reply_received", session_id=target.id, chars=len(placeholder.content or ""))
        return self._settle(target, Outcome.SUCCESS, placeholder)

    def _settle(self, target: Session, outcome: Outcome, reply: Message) -> ChatOutcome:
        # One write for the whole reply
        self.store.upsert(target)
        if self.active_session_id != target.id:
            logger.info(
                "chat_reply_saved_to_inactive_session",
                session_id=target.id,
                active_session_id=self.active_session_id,
            )
        self.last_outcome = outcome
        self._set_state(ChatState.SETTLED)
        self.pending_session_id = None
        self._set_state(ChatState.IDLE)
        return ChatOutcome(session_id=target.id, outcome=outcome, reply=reply)
