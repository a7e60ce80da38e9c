import pytest
from pydantic import ValidationError

from garuda.core.prompts import SYSTEM_PROMPT, build_prompt
from garuda.schemas.chat import (
    Message,
    PlainContent,
    SegmentedContent,
    TextSegment,
    flatten_content,
)


def test_plain_content_flattens_to_its_text():
    assert flatten_content(PlainContent(text="What is Dharma?")) == "What is Dharma?"


def test_segmented_content_keeps_only_text_segments():
    content = SegmentedContent(
        segments=[
            TextSegment(type="text", text="What is "),
            TextSegment(type="image", text="ignored"),
            TextSegment(type="text", text="Dharma?"),
        ]
    )
    assert flatten_content(content) == "What is Dharma?"


def test_message_body_prefers_content_then_parts():
    assert Message(role="user", content="hi").body == PlainContent(text="hi")
    assert Message(role="user", content="", parts=[TextSegment(type="text", text="x")]).body == PlainContent(text="")

    parts_only = Message(role="user", parts=[TextSegment(type="text", text="x")])
    assert isinstance(parts_only.body, SegmentedContent)
    assert parts_only.to_provider() == {"role": "user", "content": "x"}

    assert Message(role="assistant").to_provider() == {"role": "assistant", "content": ""}


def test_message_rejects_null_bytes():
    with pytest.raises(ValidationError):
        Message(role="user", content="bad\0byte")


def test_build_prompt_prepends_system_persona():
    prompt = build_prompt(
        [
            Message(id="1", role="user", content="Why do we suffer?"),
            Message(id="2", role="assistant", parts=[TextSegment(type="text", text="Hare Rama!")]),
        ]
    )
    assert prompt[0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert prompt[1:] == [
        {"role": "user", "content": "Why do we suffer?"},
        {"role": "assistant", "content": "Hare Rama!"},
    ]
    assert "Bhagavad Gita" in SYSTEM_PROMPT
