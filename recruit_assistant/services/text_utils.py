import re
from typing import List, Tuple

SCROLL_TO_FORM_TAG = "[SCROLL_TO_FORM]"

_PUNCTUATION = re.compile(r"[?!.,]")
_WHITESPACE = re.compile(r"\s+")

# Citation markers emitted by the file_search tool
_CITATION_PATTERNS = (
    re.compile(r"【\d+:\d+†[^】]+】"),
    re.compile(r"\[\d+:\d+†[^\]]+\]"),
    re.compile(r"\[\d+\]"),
    re.compile(r"†[^\s]+\.pdf"),
)


def normalize(text: str) -> str:
    """Canonical comparable form: lowercase, no ``?!.,``, single spaces."""
    text = _PUNCTUATION.sub("", text.lower().strip())
    return _WHITESPACE.sub(" ", text).strip()


def tokens(text: str) -> List[str]:
    normalized = normalize(text)
    return normalized.split(" ")


def remove_citations(text: str) -> str:
    for pattern in _CITATION_PATTERNS:
        text = pattern.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def extract_scroll_signal(text: str) -> Tuple[str, bool]:
    """Return ``(text without the sentinel, whether it was present)``."""
    if SCROLL_TO_FORM_TAG not in text:
        return text.strip(), False
    cleaned = text.replace(SCROLL_TO_FORM_TAG, "")
    return _WHITESPACE.sub(" ", cleaned).strip(), True
