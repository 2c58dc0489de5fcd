"""Text normalization used to key watcher keywords and film titles."""

import re
from typing import List

# ASCII letters, Latin-1 Supplement through Latin Extended-B, Latin Extended Additional
_NOT_LETTER_OR_SPACE = re.compile("[^a-zA-Z\u00C0-\u024F\u1E00-\u1EFF ]+")
_MULTIPLE_SPACES = re.compile(" {2,}")


def normalize(text: str) -> str:
    """
    Canonicalize text for case- and punctuation-insensitive comparison.

    Drops every character that is not a Latin letter or a space, collapses
    runs of spaces and lower-cases the result. Diacritics are kept.

    Lower-casing runs first: a few capitals (e.g. "İ") lower-case into a
    letter plus a combining mark, which the filter must still see.

    Args:
        text: Raw keywords or film title

    Returns:
        Normalized matching key
    """
    text = _NOT_LETTER_OR_SPACE.sub("", text.lower())
    return _MULTIPLE_SPACES.sub(" ", text)


def tokenize(text: str) -> List[str]:
    """Split normalized text into unique tokens, keeping first-seen order."""
    tokens = []
    for token in normalize(text).split(" "):
        if token and token not in tokens:
            tokens.append(token)
    return tokens
