import json

import httpx
import pytest

from garuda.services.errors import ProviderError
from garuda.services.providers import SecondaryProvider
from tests.helpers import collect

OLLAMA_URL = "http://ollama.test/api/chat"

OM_SHANTI = (
    b'{"message":{"role":"assistant","content":"Om"},"done":false}\n'
    b"not json\n"
    b'{"message":{"role":"assistant","content":" Shanti"},"done":true}\n'
    b'{"message":{"role":"assistant","content":" leftover"},"done":false}\n'
)


@pytest.mark.anyio
async def test_streams_text_and_sends_ollama_payload():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, content=OM_SHANTI)

    provider = SecondaryProvider(base_url=OLLAMA_URL, model="llama3", transport=httpx.MockTransport(handler))
    prompt = [{"role": "system", "content": "persona"}, {"role": "user", "content": "peace?"}]
    stream = await provider.open_stream(prompt)

    assert await collect(stream) == b"Om Shanti"
    assert seen["url"] == OLLAMA_URL
    assert seen["body"] == {"model": "llama3", "messages": prompt, "stream": True}


@pytest.mark.anyio
async def test_error_status_raises_with_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text='model "llama3" not found')

    provider = SecondaryProvider(base_url=OLLAMA_URL, transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderError, match='Ollama error: model "llama3" not found'):
        await provider.open_stream([{"role": "user", "content": "hi"}])


@pytest.mark.anyio
async def test_unreachable_server_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    provider = SecondaryProvider(base_url=OLLAMA_URL, transport=httpx.MockTransport(handler))
    with pytest.raises(ProviderError, match="Ollama error: connection refused"):
        await provider.open_stream([{"role": "user", "content": "hi"}])


def test_defaults_come_from_settings():
    provider = SecondaryProvider()
    assert provider.base_url == "http://localhost:11434/api/chat"
    assert provider.model == "llama3"
