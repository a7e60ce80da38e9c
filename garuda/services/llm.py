from typing import AsyncIterator, Iterable, List, Optional, Tuple

from garuda.core.config.logging import get_logger
from garuda.core.metrics import llm_provider_fallbacks_total
from garuda.core.prompts import build_prompt
from garuda.schemas.chat import Message
from garuda.services.errors import AllProvidersFailedError
from garuda.services.providers import ChatProvider, PrimaryProvider, SecondaryProvider

logger = get_logger(__name__)


# ==================================================
# LLM Service (The Fallback Chain)
# ==================================================
class LLMService:
    """
    Streams a reply from the first provider that can start one.

    Providers are tried strictly in order, each at most once per request.
    A failed provider is logged and skipped; only when the whole chain has
    failed does the caller see an error.
    """

    def __init__(self, providers: Optional[List[ChatProvider]] = None):
        self.providers: List[ChatProvider] = (
            providers if providers is not None else [PrimaryProvider(), SecondaryProvider()]
        )
        logger.info(
            "llm_service_initialized",
            providers=[p.name for p in self.providers],
            configured=[p.name for p in self.providers if p.is_configured()],
        )

    async def stream_reply(self, messages: Iterable[Message]) -> Tuple[str, AsyncIterator[bytes]]:
        """Start a reply for the conversation.

        Args:
            messages: Conversation so far, without the system persona.

        Returns:
            The name of the provider that answered and its reply byte stream.

        Raises:
            AllProvidersFailedError: If no provider could start a reply.
        """
        prompt = build_prompt(messages)
        last_error: Optional[Exception] = None
        providers_tried = 0

        for index, provider in enumerate(self.providers):
            if not provider.is_configured():
                logger.info("llm_provider_skipped_unconfigured", provider=provider.name)
                continue

            providers_tried += 1
            try:
                stream = await provider.open_stream(prompt)
                logger.info(
                    "llm_provider_selected",
                    provider=provider.name,
                    prompt_messages=len(prompt),
                )
                return provider.name, stream
            except Exception as e:
                last_error = e
                # Only a configured provider further down the chain makes this a fallback
                has_next = any(p.is_configured() for p in self.providers[index + 1:])
                if has_next:
                    llm_provider_fallbacks_total.labels(provider=provider.name).inc()
                    logger.warning(
                        "llm_provider_failed_falling_back",
                        provider=provider.name,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                else:
                    logger.error(
                        "llm_provider_failed",
                        provider=provider.name,
                        error_type=type(e).__name__,
                        error=str(e),
                    )

        logger.error("all_providers_failed", providers_tried=providers_tried)
        if last_error is None:
            raise AllProvidersFailedError("no chat provider is configured")
        raise AllProvidersFailedError(str(last_error)) from last_error
