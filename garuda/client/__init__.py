# Re-export so "from garuda.client import ChatClient, SessionStore" works
from garuda.client.chat import APOLOGY, ChatClient, ChatOutcome, ChatState, Outcome
from garuda.client.sessions import SessionStore, make_title
from garuda.client.storage import InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore

__all__ = [
    "APOLOGY",
    "ChatClient",
    "ChatOutcome",
    "ChatState",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "Outcome",
    "SessionStore",
    "make_title",
]
