from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime
from typing import TextIO

from dotenv import load_dotenv

from garuda.client.chat import APOLOGY, ChatClient, ChatState
from garuda.client.preferences import load_theme, save_theme, toggle_theme
from garuda.client.render import EMPTY_STATE_HINT, EXAMPLE_QUESTIONS, WORKING_INDICATOR, speech_text
from garuda.client.sessions import SessionStore
from garuda.client.storage import JsonFileKeyValueStore
from garuda.core.config import settings
from garuda.services.quotes import daily_quote


def main() -> int:
    load_dotenv()
    return _main(sys.argv[1:])


class TerminalRenderer:
    """Prints the streaming reply as it grows; only the unseen suffix is written."""

    def __init__(self, out: TextIO = sys.stdout):
        self.out = out
        self._printed = 0

    def __call__(self, client: ChatClient) -> None:
        if client.state == ChatState.AWAITING_FIRST_BYTE:
            self._printed = 0
            self.out.write(f"{WORKING_INDICATOR}\n")
            self.out.flush()
            return
        if client.state != ChatState.STREAMING or client.pending_session_id is None:
            return
        session = client.store.get(client.pending_session_id)
        if session is None or not session.messages:
            return
        content = session.messages[-1].content or ""
        if len(content) > self._printed:
            self.out.write(content[self._printed:])
            self.out.flush()
            self._printed = len(content)


def _format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def _print_sessions(store: SessionStore) -> None:
    if not store.sessions:
        print("No conversations yet.")
        return
    for index, session in enumerate(store.sessions, start=1):
        print(f"{index:>3}. {session.title or '(untitled)'}  [{_format_timestamp(session.timestamp)}, {len(session.messages)} messages]")


def _print_quote() -> None:
    quote = daily_quote()
    print(f"“{quote.text}”\n  - {quote.source}\n")


def _open_store(path: str) -> SessionStore:
    kv = JsonFileKeyValueStore(path)
    store = SessionStore(kv)
    store.migrate_legacy()
    return store


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="garuda", description="Garuda - Wisdom from the Eternal Scriptures")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the streaming chat proxy")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    chat = subparsers.add_parser("chat", help="Chat in the terminal")
    chat.add_argument("--url", default=settings.GARUDA_API_URL, help="Chat endpoint of the proxy")
    chat.add_argument("--store", default=settings.GARUDA_STORE_PATH, help="Local storage file")
    chat.add_argument("--session", type=int, default=None, help="Resume conversation N from `garuda sessions`")
    chat.add_argument("--message", "-m", help="Single question (non-interactive)")

    sessions = subparsers.add_parser("sessions", help="List saved conversations")
    sessions.add_argument("--store", default=settings.GARUDA_STORE_PATH, help="Local storage file")

    subparsers.add_parser("quote", help="Show the verse of the day")
    return parser


def _switch(client: ChatClient, arg: str) -> None:
    try:
        session = client.store.sessions[int(arg) - 1]
    except (ValueError, IndexError):
        print(f"No conversation '{arg}'.")
        return
    client.select_session(session.id)
    print(f"-- {session.title} --")
    for message in session.messages:
        speaker = "You" if message.role == "user" else "Garuda"
        # Terminals show markdown markers literally
        print(f"{speaker}: {speech_text(message.content or '')}\n")


def _ask(client: ChatClient, text: str) -> None:
    outcome = asyncio.run(client.submit(text))
    if outcome is None:
        return
    if outcome.reply.content == APOLOGY:
        print(APOLOGY)
    print("\n")


def _run_chat(args: argparse.Namespace) -> int:
    store = _open_store(args.store)
    client = ChatClient(store, api_url=args.url, on_update=TerminalRenderer())

    if args.session is not None:
        _switch(client, str(args.session))

    if args.message:
        _ask(client, args.message)
        return 0

    theme = load_theme(store.kv)
    _print_quote()
    if client.active_session is None:
        print(EMPTY_STATE_HINT)
        print("Examples: " + ", ".join(f'"{q}"' for q in EXAMPLE_QUESTIONS))
    print("Commands: /new, /sessions, /switch N, /theme, /quit\n")

    while True:
        try:
            text = input("> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return 0

        command, _, arg = text.strip().partition(" ")
        if command == "/quit":
            return 0
        if command == "/new":
            client.new_chat()
            print("-- new conversation --")
            continue
        if command == "/sessions":
            _print_sessions(store)
            continue
        if command == "/switch":
            _switch(client, arg.strip())
            continue
        if command == "/theme":
            theme = toggle_theme(theme)
            save_theme(store.kv, theme)
            print(f"Theme: {theme}")
            continue

        _ask(client, text)


def _main(argv: list[str]) -> int:
    args = _build_parser().parse_args(argv)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("garuda.main:app", host=args.host, port=args.port, reload=args.reload)
        return 0

    if args.command == "chat":
        return _run_chat(args)

    if args.command == "sessions":
        _print_sessions(_open_store(args.store))
        return 0

    if args.command == "quote":
        _print_quote()
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
