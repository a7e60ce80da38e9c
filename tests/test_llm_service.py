import pytest
from langchain_core.language_models.fake_chat_models import GenericFakeChatModel
from langchain_core.messages import AIMessage

from garuda.core.metrics import llm_provider_fallbacks_total
from garuda.core.prompts import SYSTEM_PROMPT
from garuda.schemas.chat import Message
from garuda.services.errors import AllProvidersFailedError, ProviderError
from garuda.services.llm import LLMService
from garuda.services.providers import PrimaryProvider
from tests.helpers import FakeProvider, collect


QUESTION = [Message(id="1", role="user", content="What is Dharma?")]


@pytest.mark.anyio
async def test_primary_success_is_passed_through_untouched():
    primary = FakeProvider("groq", [b"Hare ", b"Rama!\n", b"\xe0\xa5\x90"])
    secondary = FakeProvider("ollama", [b"never"])
    name, stream = await LLMService([primary, secondary]).stream_reply(QUESTION)

    assert name == "groq"
    assert await collect(stream) == b"Hare Rama!\n\xe0\xa5\x90"
    assert secondary.calls == []
    assert primary.calls[0][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert primary.calls[0][1] == {"role": "user", "content": "What is Dharma?"}


@pytest.mark.anyio
async def test_unconfigured_primary_goes_straight_to_secondary():
    primary = FakeProvider("groq", configured=False)
    secondary = FakeProvider("ollama", [b"Om"])
    name, stream = await LLMService([primary, secondary]).stream_reply(QUESTION)

    assert name == "ollama"
    assert await collect(stream) == b"Om"
    assert primary.calls == []
    assert len(secondary.calls) == 1


@pytest.mark.anyio
async def test_failing_primary_falls_back_exactly_once():
    primary = FakeProvider("groq", error=RuntimeError("rate limited"))
    secondary = FakeProvider("ollama", [b"Om"])
    name, stream = await LLMService([primary, secondary]).stream_reply(QUESTION)

    assert name == "ollama"
    assert await collect(stream) == b"Om"
    assert len(primary.calls) == 1
    assert len(secondary.calls) == 1


@pytest.mark.anyio
async def test_both_failing_surfaces_last_error():
    primary = FakeProvider("groq", error=RuntimeError("rate limited"))
    secondary = FakeProvider("ollama", error=ProviderError("Ollama error: model not found"))

    with pytest.raises(AllProvidersFailedError, match="Ollama error: model not found"):
        await LLMService([primary, secondary]).stream_reply(QUESTION)
    assert len(secondary.calls) == 1


@pytest.mark.anyio
async def test_no_configured_provider():
    with pytest.raises(AllProvidersFailedError, match="no chat provider"):
        await LLMService([FakeProvider("groq", configured=False)]).stream_reply(QUESTION)


@pytest.mark.anyio
async def test_failure_counts_as_fallback_only_when_a_configured_provider_follows():
    def fallbacks(name):
        return llm_provider_fallbacks_total.labels(provider=name)._value.get()

    # Unconfigured secondary: the chain ends at the primary
    lone = FakeProvider("groq-lone", error=RuntimeError("rate limited"))
    with pytest.raises(AllProvidersFailedError, match="rate limited"):
        await LLMService([lone, FakeProvider("ollama", configured=False)]).stream_reply(QUESTION)
    assert fallbacks("groq-lone") == 0

    chained = FakeProvider("groq-chained", error=RuntimeError("rate limited"))
    await LLMService([chained, FakeProvider("ollama", [b"Om"])]).stream_reply(QUESTION)
    assert fallbacks("groq-chained") == 1


@pytest.mark.anyio
async def test_primary_provider_streams_model_chunks():
    llm = GenericFakeChatModel(messages=iter([AIMessage(content="Om Shanti Shanti")]))
    provider = PrimaryProvider(api_key="", llm=llm)

    assert provider.is_configured()
    stream = await provider.open_stream([{"role": "user", "content": "peace?"}])
    assert await collect(stream) == b"Om Shanti Shanti"


def test_primary_provider_needs_a_key():
    assert not PrimaryProvider(api_key="").is_configured()
    assert PrimaryProvider(api_key="gsk_test").is_configured()
