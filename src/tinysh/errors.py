# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Exception hierarchy for tinysh.

The tokenizer and resolver never print; they raise one of these and the
shell kernel decides how the failure is presented. Every error carries a
suggested exit status that the kernel records as ``last_status``.
"""

from __future__ import annotations


class ShellError(Exception):
    """Base class for all tinysh errors.

    Attributes:
        message: Human-readable error message
        exit_code: Suggested exit status (default: 1)
    """

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code

    def __str__(self) -> str:
        return self.message


class UnterminatedQuote(ShellError):
    """Raised when input ends while a quote is still open.

    The whole line fails to parse; no partial token list is returned.

    Attributes:
        quote: The opening quote character (``'`` or ``"``)
        position: Index of the opening quote in the input line
    """

    def __init__(self, quote: str, position: int):
        kind = "single" if quote == "'" else "double"
        super().__init__(f"unterminated {kind} quote", exit_code=2)
        self.quote = quote
        self.position = position


class CommandNotFound(ShellError):
    """Raised when a name is neither a builtin nor on the search path."""

    def __init__(self, name: str):
        super().__init__(f"{name}: command not found", exit_code=127)
        self.name = name


class ConfigError(ShellError):
    """Raised for malformed configuration at startup."""
