import codecs
import json
from typing import AsyncIterable, AsyncIterator, Optional, Tuple

from garuda.core.config.logging import get_logger

logger = get_logger(__name__)


def parse_event(line: str) -> Tuple[Optional[str], bool]:
    """
    Parse one line of an Ollama chat stream.

    Returns (text, done): text is the `message.content` string when present
    and non-empty, done is True when the event carries `done: true`.
    Malformed lines parse to (None, False).
    """
    try:
        event = json.loads(line)
    except json.JSONDecodeError:
        logger.debug("ndjson_line_skipped", line=line[:200])
        return None, False

    if not isinstance(event, dict):
        logger.debug("ndjson_non_object_skipped", value_type=type(event).__name__)
        return None, False

    text = None
    message = event.get("message")
    if isinstance(message, dict):
        content = message.get("content")
        if isinstance(content, str) and content:
            text = content

    return text, event.get("done") is True


async def ndjson_text_stream(chunks: AsyncIterable[bytes]) -> AsyncIterator[bytes]:
    """
    Turn a newline-delimited JSON chat stream into plain UTF-8 reply text.

    Bytes are decoded incrementally, so a multi-byte character split across
    chunks survives. A partial line stays buffered until its newline arrives
    or the input ends. The first `done: true` event ends the output; whatever
    follows it is never read.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    buffer = ""

    async for chunk in chunks:
        buffer += decoder.decode(chunk)
        *lines, buffer = buffer.split("\n")
        for line in lines:
            if not line.strip():
                continue
            text, done = parse_event(line)
            if text:
                yield text.encode("utf-8")
            if done:
                return

    # Upstream closed without a done event; flush the tail
    buffer += decoder.decode(b"", final=True)
    for line in buffer.split("\n"):
        if not line.strip():
            continue
        text, done = parse_event(line)
        if text:
            yield text.encode("utf-8")
        if done:
            return
