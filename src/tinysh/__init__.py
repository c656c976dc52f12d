# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
tinysh core package.

The core is the quote-aware tokenizer and the command resolver; the
kernel, executor and UI wire them into an interactive shell.
"""
from .errors import CommandNotFound, ShellError, UnterminatedQuote  # noqa: F401
from .kernel import Shell as Shell  # noqa: F401 (re-export)
from .registry import BuiltinId, BuiltinRegistry  # noqa: F401
from .resolver import Command, CommandKind, CommandResolver, resolve  # noqa: F401
from .tokenizer import QuoteMode, Tokenizer, quote, tokenize  # noqa: F401
