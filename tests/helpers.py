from typing import AsyncIterator, List, Optional

from garuda.services.providers import ChatProvider


async def collect(stream) -> bytes:
    out = b""
    async for chunk in stream:
        out += chunk
    return out


async def aiter_chunks(*chunks: bytes):
    for chunk in chunks:
        yield chunk


class FakeProvider(ChatProvider):
    """Scripted provider: replies with `chunks`, or raises `error` when opened."""

    def __init__(
        self,
        name: str,
        chunks: List[bytes] = (),
        error: Optional[Exception] = None,
        configured: bool = True,
    ):
        self.name = name
        self.chunks = list(chunks)
        self.error = error
        self.configured = configured
        self.calls: List[List[dict]] = []

    def is_configured(self) -> bool:
        return self.configured

    async def open_stream(self, prompt: List[dict]) -> AsyncIterator[bytes]:
        self.calls.append(prompt)
        if self.error is not None:
            raise self.error
        return aiter_chunks(*self.chunks)
