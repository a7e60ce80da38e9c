from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, List, Optional

import httpx
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from garuda.core.config import settings
from garuda.core.config.logging import get_logger
from garuda.services.errors import ProviderError
from garuda.services.ndjson import ndjson_text_stream

logger = get_logger(__name__)


async def _empty_stream() -> AsyncIterator[bytes]:
    return
    yield


# ==================================================
# Provider Contract
# ==================================================
class ChatProvider(ABC):
    """
    A chat-completion backend that streams reply text as bytes.

    open_stream() must raise if the provider cannot start, so the caller can
    still fall back before any byte has been sent to the client.
    """

    name: str = "provider"

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def open_stream(self, prompt: List[dict]) -> AsyncIterator[bytes]:
        """Start a completion for `prompt` and return the reply byte stream."""


# ==================================================
# Primary: Groq through its OpenAI-compatible API
# ==================================================
def _to_langchain_message(message: dict) -> BaseMessage:
    role = message.get("role", "user")
    content = message.get("content", "")
    if role == "system":
        return SystemMessage(content=content)
    if role == "assistant":
        return AIMessage(content=content)
    return HumanMessage(content=content)


def _chunk_text(content: Any) -> str:
    """Text of one streamed chunk; structured chunks keep their text blocks."""
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return str(content)


class PrimaryProvider(ChatProvider):
    """Hosted provider, used only when an API key is configured."""

    name = "groq"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        llm: Optional[BaseChatModel] = None,
    ):
        self.api_key = settings.GROQ_API_KEY if api_key is None else api_key
        self.model = model or settings.GROQ_MODEL
        self.base_url = base_url or settings.GROQ_BASE_URL
        self._llm = llm

    def is_configured(self) -> bool:
        return self._llm is not None or bool(self.api_key)

    def get_llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = ChatOpenAI(
                model=self.model,
                api_key=self.api_key,
                base_url=self.base_url,
                temperature=settings.DEFAULT_LLM_TEMPERATURE,
                streaming=True,
                # Failures go straight to the fallback provider
                max_retries=0,
            )
            logger.debug("primary_llm_created", model=self.model, base_url=self.base_url)
        return self._llm

    async def open_stream(self, prompt: List[dict]) -> AsyncIterator[bytes]:
        stream = self.get_llm().astream([_to_langchain_message(m) for m in prompt])
        # Pull the first chunk now: errors surface here, while fallback is still possible
        try:
            first = await stream.__anext__()
        except StopAsyncIteration:
            return _empty_stream()
        return self._pass_through(first, stream)

    async def _pass_through(self, first: Any, stream: Any) -> AsyncIterator[bytes]:
        try:
            text = _chunk_text(getattr(first, "content", first))
            if text:
                yield text.encode("utf-8")
            async for chunk in stream:
                text = _chunk_text(getattr(chunk, "content", chunk))
                if text:
                    yield text.encode("utf-8")
        finally:
            await stream.aclose()


# ==================================================
# Secondary: self-hosted Ollama over plain HTTP
# ==================================================
class SecondaryProvider(ChatProvider):
    """Ollama /api/chat, streamed as newline-delimited JSON and relayed as text."""

    name = "ollama"

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.OLLAMA_BASE_URL
        self.model = model or settings.OLLAMA_MODEL
        self.timeout = settings.OLLAMA_TIMEOUT if timeout is None else timeout
        self._transport = transport

    def build_payload(self, prompt: List[dict]) -> dict:
        return {
            "model": self.model,
            "messages": [{"role": m["role"], "content": m.get("content", "")} for m in prompt],
            "stream": True,
        }

    async def open_stream(self, prompt: List[dict]) -> AsyncIterator[bytes]:
        client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )
        try:
            request = client.build_request("POST", self.base_url, json=self.build_payload(prompt))
            response = await client.send(request, stream=True)
        except httpx.HTTPError as e:
            await client.aclose()
            raise ProviderError(f"Ollama error: {e}", provider=self.name) from e

        if not response.is_success:
            body = (await response.aread()).decode("utf-8", errors="replace")
            await response.aclose()
            await client.aclose()
            logger.error("ollama_bad_status", status_code=response.status_code, body=body[:500])
            raise ProviderError(f"Ollama error: {body}", provider=self.name)

        logger.debug("ollama_stream_opened", model=self.model, status_code=response.status_code)
        return self._relay(client, response)

    async def _relay(self, client: httpx.AsyncClient, response: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for text in ndjson_text_stream(response.aiter_bytes()):
                yield text
        finally:
            await response.aclose()
            await client.aclose()
