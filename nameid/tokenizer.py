import re
import unicodedata
from typing import Optional, Tuple

# Runs of letters or digits; underscores and punctuation separate tokens
_TOKEN_PATTERN = re.compile(r"[^\W_]+")


def tokenize(text: Optional[str]) -> Tuple[str, ...]:
    """
    Split raw text into lowercase word tokens.

    Absent or blank text yields an empty tuple, never an error.
    """
    if not text or not text.strip():
        return ()
    normalized = unicodedata.normalize("NFKC", text).lower()
    return tuple(_TOKEN_PATTERN.findall(normalized))


def normalize_name_key(name: str) -> str:
    """Lowercase a dictionary name and drop every non-letter character."""
    return "".join(ch for ch in unicodedata.normalize("NFKC", name).lower() if ch.isalpha())
