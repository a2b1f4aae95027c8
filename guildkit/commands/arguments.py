"""
Argument Tokenizing

Splits command text into whitespace-delimited tokens while remembering
where each token started, so a capture-rest parameter can recover the
original text verbatim.
"""

import re
from collections.abc import Sequence

_TOKEN = re.compile(r"\S+")


class Argument(str):
    """A command token that also carries the text from its start to the end of input."""

    eol: str

    def __new__(cls, value: str, eol: str | None = None) -> "Argument":
        token = super().__new__(cls, value)
        token.eol = value if eol is None else eol
        return token


def split_arguments(text: str) -> list[Argument]:
    """
    Split text into tokens.

    Args:
        text: Command text, without the prefix

    Returns:
        Tokens in order; empty for blank text
    """
    return [
        Argument(match.group(), text[match.start():].rstrip())
        for match in _TOKEN.finditer(text)
    ]


def join_rest(tokens: Sequence[str]) -> str:
    """Rejoin the remaining tokens, keeping their original delimiting when known."""
    if not tokens:
        return ""
    first = tokens[0]
    if isinstance(first, Argument):
        return first.eol
    return " ".join(tokens)
