"""String helpers."""

from __future__ import annotations

import string

_ASCII_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)


def uppercase_copy(text: str) -> str:
    """Return ``text`` with ASCII letters a-z uppercased; other characters are kept."""
    return text.translate(_ASCII_UPPER)