import re

from garuda.utils.sanitization import sanitize_string

WORKING_INDICATOR = "Contemplating the scriptures..."
EMPTY_STATE_HINT = "Ask a question to receive guidance from the ancient texts."
EXAMPLE_QUESTIONS = ("Why do we suffer?", "What is Dharma?", "How to find peace?")

_BOLD = re.compile(r"\*\*(.*?)\*\*")


def to_html(content: str) -> str:
    """
    Message text as HTML for the chat window.
    Text is escaped first; only **bold** and line breaks are rendered.
    """
    escaped = sanitize_string(content)
    escaped = _BOLD.sub(r"<strong>\1</strong>", escaped)
    return escaped.replace("\n", "<br/>")


def speech_text(content: str) -> str:
    """Strip markdown markers before handing text to a speech synthesizer."""
    return re.sub(r"[*#]", "", content)
