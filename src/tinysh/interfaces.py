# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Protocol definitions for dependency injection.

These interfaces keep the shell kernel independent of how processes are
spawned and where configuration comes from.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .executor import ExecResult  # pragma: no cover


class Executor(Protocol):
    """Protocol for external command execution."""

    def run(
        self, path: str, argv: list[str], cwd: str | None = None
    ) -> ExecResult:
        """Run an executable and return its buffered combined output."""
        ...

    def run_stream(
        self,
        path: str,
        argv: list[str],
        on_output: Callable[[str], None] | None = None,
        timeout: int | None = None,
        cwd: str | None = None,
    ) -> ExecResult:
        """Run an executable, streaming combined output to on_output."""
        ...


class ConfigModel(Protocol):
    """Protocol for configuration access."""

    @property
    def system(self) -> dict[str, Any]:
        """System configuration (prompt, welcome, continuation)."""
        ...

    @property
    def execution(self) -> dict[str, Any]:
        """Execution configuration (search path, timeouts)."""
        ...

    @property
    def builtins(self) -> dict[str, Any]:
        """Builtin configuration (enabled names)."""
        ...

    def get_path(self, path: str, default: Any = None) -> Any:
        """Nested lookup using a dot-separated path."""
        ...
