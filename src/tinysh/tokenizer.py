# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Quote-aware tokenizer for tinysh.

Splits one input line into shell words:
- unquoted whitespace separates words (runs never yield empty words)
- single quotes preserve every character literally
- double quotes preserve characters except backslash escapes of
  \\ " $ ` (any other backslash is kept as-is)
- an unquoted backslash escapes the next character, whatever it is
- a closing quote directly followed by the same quote char is merged
  ('a''b' -> ab)
- quoted and unquoted segments with no whitespace between them form a
  single word, regardless of quote kind

Nothing is ever expanded: $, ` and friends only matter for deciding
whether a backslash inside double quotes is an escape.
"""

from __future__ import annotations

import shlex
from enum import Enum, auto

from .errors import UnterminatedQuote

# Characters a backslash may escape inside double quotes
DOUBLE_QUOTE_SPECIALS = frozenset({"\\", '"', "$", "`"})


class QuoteMode(Enum):
    """Scanner states for the tokenizer."""
    NONE = auto()
    SINGLE = auto()
    DOUBLE = auto()


_QUOTE_CHARS = {"'": QuoteMode.SINGLE, '"': QuoteMode.DOUBLE}
_CLOSING_CHAR = {QuoteMode.SINGLE: "'", QuoteMode.DOUBLE: '"'}


class Tokenizer:
    """Single-use scanner over one input line.

    Holds an explicit cursor into the line. Construct a fresh instance for
    every line; calling tokenize() twice on one instance raises
    RuntimeError.
    """

    def __init__(self, line: str) -> None:
        self.line = line
        self.position = 0
        self.mode = QuoteMode.NONE
        self._quote_start = -1
        self._used = False

    # ---------- cursor helpers ----------

    def _has_current(self) -> bool:
        return self.position < len(self.line)

    def _current(self) -> str:
        return self.line[self.position]

    def _peek(self) -> str | None:
        nxt = self.position + 1
        if nxt < len(self.line):
            return self.line[nxt]
        return None

    # ---------- scanning ----------

    def tokenize(self) -> list[str]:
        """Scan the whole line and return its words.

        Raises:
            UnterminatedQuote: if the line ends inside a quote
            RuntimeError: if this instance was already used
        """
        if self._used:
            raise RuntimeError("Tokenizer instances are single-use")
        self._used = True

        tokens: list[str] = []
        buf: list[str] = []
        # Distinguishes '' (present, empty) from no word at all
        in_word = False

        while self._has_current():
            ch = self._current()

            if self.mode is QuoteMode.NONE:
                if ch.isspace():
                    if in_word:
                        tokens.append("".join(buf))
                        buf = []
                        in_word = False
                    self.position += 1
                    continue

                in_word = True

                if ch in _QUOTE_CHARS:
                    self.mode = _QUOTE_CHARS[ch]
                    self._quote_start = self.position
                    self.position += 1
                    continue

                if ch == "\\":
                    nxt = self._peek()
                    if nxt is None:
                        # Trailing backslash: nothing to escape, keep it
                        buf.append(ch)
                        self.position += 1
                    else:
                        buf.append(nxt)
                        self.position += 2
                    continue

                buf.append(ch)
                self.position += 1
                continue

            closing = _CLOSING_CHAR[self.mode]

            if ch == closing:
                if self._peek() == closing:
                    # '' or "" glued to the quote: keep scanning in this mode
                    self.position += 2
                    continue
                self.mode = QuoteMode.NONE
                self.position += 1
                continue

            if self.mode is QuoteMode.DOUBLE and ch == "\\":
                nxt = self._peek()
                if nxt is not None and nxt in DOUBLE_QUOTE_SPECIALS:
                    buf.append(nxt)
                    self.position += 2
                    continue

            buf.append(ch)
            self.position += 1

        if self.mode is not QuoteMode.NONE:
            raise UnterminatedQuote(
                _CLOSING_CHAR[self.mode], self._quote_start
            )

        if in_word:
            tokens.append("".join(buf))

        return tokens


def tokenize(line: str) -> list[str]:
    """Split a line into an argument vector.

    Returns an empty list for blank input.

    >>> tokenize("echo 'hello   world'")
    ['echo', 'hello   world']
    """
    return Tokenizer(line).tokenize()


def quote(token: str) -> str:
    """Quote a word so that tokenize(quote(word)) == [word].

    Text made only of shell-safe characters is returned unchanged.
    """
    return shlex.quote(token)


def join(argv: list[str]) -> str:
    """Render an argument vector back into a single line."""
    return " ".join(quote(arg) for arg in argv)


def is_input_incomplete(line: str) -> bool:
    """Return True if the line ends inside an open quote."""
    try:
        tokenize(line)
    except UnterminatedQuote:
        return True
    return False
