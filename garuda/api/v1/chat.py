from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, StreamingResponse

from garuda.core.config.logging import get_logger
from garuda.core.metrics import llm_stream_duration_seconds
from garuda.schemas.chat import ChatRequest
from garuda.services.errors import AllProvidersFailedError
from garuda.services.llm import LLMService

logger = get_logger(__name__)
router = APIRouter()

PROVIDER_HEADER = "X-Garuda-Provider"

# Initialize the provider chain once - module scoped
llm_service = LLMService()


def get_llm_service() -> LLMService:
    """Dependency hook so tests can swap the provider chain."""
    return llm_service


@router.post("/chat")
async def chat(
    chat_request: ChatRequest,
    service: LLMService = Depends(get_llm_service),
):
    """
    Streaming chat endpoint.
    The reply is sent as raw UTF-8 text, chunk by chunk, so the UI can
    append it as it arrives. Failure of every provider is a 500 whose body
    starts with "Error: ".
    """
    logger.info("chat_request_received", message_count=len(chat_request.messages))

    try:
        provider, stream = await service.stream_reply(chat_request.messages)
    except AllProvidersFailedError as e:
        logger.error("chat_request_failed", error=str(e))
        return PlainTextResponse(f"Error: {e}", status_code=500)

    async def relay():
        """Pass the provider stream through, timing it."""
        sent = 0
        with llm_stream_duration_seconds.labels(provider=provider).time():
            try:
                async for chunk in stream:
                    sent += len(chunk)
                    yield chunk
            except Exception as e:
                # Headers are already out; all we can do is end the body
                logger.error(
                    "chat_stream_interrupted",
                    provider=provider,
                    bytes_sent=sent,
                    error=str(e),
                    exc_info=True,
                )
                return
        logger.info("chat_stream_completed", provider=provider, bytes_sent=sent)

    return StreamingResponse(
        relay(),
        media_type="text/plain; charset=utf-8",
        headers={PROVIDER_HEADER: provider},
    )
