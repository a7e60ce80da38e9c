import uuid
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from garuda.client.storage import (
    LEGACY_HISTORY_KEY,
    SESSIONS_KEY,
    UNREADABLE_SESSIONS_KEY,
    KeyValueStore,
)
from garuda.core.config.logging import get_logger
from garuda.schemas.chat import Message
from garuda.schemas.session import Session, now_ms

logger = get_logger(__name__)

TITLE_MAX_CHARS = 30

_sessions_adapter = TypeAdapter(List[Session])
_messages_adapter = TypeAdapter(List[Message])


def new_id() -> str:
    return uuid.uuid4().hex


def make_title(text: str) -> str:
    """Session title from the first user message: at most 30 chars, then '...'."""
    text = text.strip()
    if len(text) > TITLE_MAX_CHARS:
        return text[:TITLE_MAX_CHARS] + "..."
    return text


def dumps(sessions: List[Session]) -> str:
    return _sessions_adapter.dump_json(sessions, exclude_none=True).decode("utf-8")


def loads(raw: str) -> List[Session]:
    return _sessions_adapter.validate_json(raw)


# ==================================================
# Session Store
# ==================================================
class SessionStore:
    """
    Ordered session collection, most recently active first.

    The collection is persisted as a single value under SESSIONS_KEY and is
    rewritten in full on every mutation.
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv
        # Raw value that failed to parse; set aside before the first save
        self._unreadable: Optional[str] = None
        self.sessions: List[Session] = self.load()

    def load(self) -> List[Session]:
        raw = self.kv.get(SESSIONS_KEY)
        if not raw:
            return []
        try:
            return loads(raw)
        except ValidationError as e:
            logger.warning(
                "session_store_unreadable",
                error_count=e.error_count(),
                raw=raw[:200],
            )
            self._unreadable = raw
            return []

    def save(self) -> None:
        if self._unreadable is not None:
            self.kv.set(UNREADABLE_SESSIONS_KEY, self._unreadable)
            logger.warning("session_store_unreadable_set_aside", key=UNREADABLE_SESSIONS_KEY)
            self._unreadable = None
        self.kv.set(SESSIONS_KEY, dumps(self.sessions))

    def get(self, session_id: str) -> Optional[Session]:
        for session in self.sessions:
            if session.id == session_id:
                return session
        return None

    def upsert(self, session: Session) -> Session:
        """Stamp the session, move it to the front and persist the collection."""
        session.timestamp = now_ms()
        self.sessions = [session] + [s for s in self.sessions if s.id != session.id]
        self.save()
        return session

    def new_session(self, first_message: Message) -> Session:
        """A fresh session titled after its first message. Not persisted yet."""
        return Session(
            id=new_id(),
            title=make_title(first_message.content or ""),
            messages=[first_message],
        )

    def migrate_legacy(self) -> Optional[Session]:
        """
        One-time upgrade of the old single-conversation history key.

        A non-empty legacy history becomes a new session at the front of the
        list. The legacy key is removed whatever it held.
        """
        raw = self.kv.get(LEGACY_HISTORY_KEY)
        if raw is None:
            return None

        migrated = None
        try:
            messages = _messages_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("legacy_history_unreadable", error_count=e.error_count())
            messages = []

        if messages:
            first_user = next((m for m in messages if m.role == "user"), messages[0])
            migrated = Session(
                id=new_id(),
                title=make_title(first_user.content or ""),
                messages=messages,
            )
            self.upsert(migrated)
            logger.info("legacy_history_migrated", session_id=migrated.id, message_count=len(messages))

        self.kv.delete(LEGACY_HISTORY_KEY)
        return migrated
