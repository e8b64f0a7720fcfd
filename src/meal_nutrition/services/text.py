"""Text normalization shared by lookup and parsing."""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
# Full-width ！ and ？ fold to ASCII under NFKC.
_KEY_PUNCTUATION = re.compile(r"[、。!?]")


def fold(text: str | None) -> str:
    """Apply NFKC width folding, lowercase and strip."""
    if not text:
        return ""
    return unicodedata.normalize("NFKC", text).lower().strip()


def normalize_key(text: str | None) -> str:
    """Return the exact-lookup key: folded, with whitespace and 、。！？ removed."""
    folded = _WHITESPACE.sub("", fold(text))
    return _KEY_PUNCTUATION.sub("", folded)


def normalize_query(text: str | None) -> str:
    """Return the search form: folded, with whitespace runs collapsed."""
    return _WHITESPACE.sub(" ", fold(text))
