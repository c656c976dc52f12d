# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
tinysh kernel.

The Shell is the session engine:
- tokenize a line into an argument vector
- resolve the command name (builtin or search path)
- dispatch to a builtin handler or the external executor

Important boundary:
- Shell does not load YAML or build the registry.
- Shell consumes the injected registry, executor and ConfigModel.

Streaming:
- If output_fn is wired (by the UI/CLI), external command output is
  streamed through it as it arrives and handle_command() returns "".
"""

from __future__ import annotations

import os
import traceback
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from . import config as cfg_module
from .builtins import HANDLERS
from .config import ANSI_COLORS
from .errors import CommandNotFound, UnterminatedQuote
from .interfaces import ConfigModel, Executor
from .registry import BuiltinRegistry
from .resolver import Command, CommandResolver
from .tokenizer import tokenize


def write_crash_log(
    error: Exception,
    raw_command: str = "",
    resolved_command: str = "",
    cwd: str = "",
) -> None:
    """Write an entry to the crash log.

    Logs unhandled exceptions that escape command handling.
    Only creates the log directory when actually needed.
    Appends to crash.log (never overwrites).
    """
    try:
        logs_dir = cfg_module.get_data_root() / "tinysh" / "logs"

        # Create logs directory only when we need to write
        logs_dir.mkdir(parents=True, exist_ok=True)

        crash_log_path = logs_dir / "crash.log"

        timestamp = datetime.now().isoformat()
        lines = [f"{timestamp}"]

        if cwd:
            lines.append(f"cwd={cwd}")
        if raw_command:
            lines.append(f"raw={raw_command}")
        if resolved_command:
            lines.append(f"resolved={resolved_command}")

        lines.append(f"error={type(error).__name__}: {error}")
        lines.append("traceback:")
        lines.append(traceback.format_exc())
        lines.append("----")

        with crash_log_path.open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    except OSError:
        # Already handling a failure; a missing crash log is not worth
        # taking the session down.
        pass


@dataclass
class Shell:
    """tinysh session engine."""

    registry: BuiltinRegistry
    executor: Executor
    config: ConfigModel

    resolver: CommandResolver = field(init=False)

    running: bool = False
    # Status of the last command, and the status requested by `exit`
    last_status: int = 0
    exit_code: int = 0

    # Working directory for builtins and spawned commands
    cwd: str = field(default_factory=os.getcwd)

    # Tokens of the line being handled, for crash reports
    last_argv: list[str] = field(default_factory=list)

    # Streaming hook (wired by UI/CLI)
    output_fn: Callable[[str], None] | None = None

    def __post_init__(self) -> None:
        exec_cfg = self.config.execution
        self.resolver = CommandResolver(
            self.registry,
            path_var=str(exec_cfg.get("path_var") or "PATH"),
            require_executable=bool(exec_cfg.get("require_executable", False)),
        )

    # -----------------------
    # Session
    # -----------------------

    def start(self) -> str:
        """Start a session and return the welcome text (may be empty)."""
        self.running = True
        self.exit_code = 0

        welcome = self.config.system.get("welcome") or {}
        if isinstance(welcome, dict) and welcome.get("enabled"):
            msg = welcome.get("message")
            if isinstance(msg, str) and msg.strip():
                return msg.strip()
        return ""

    def prompt(self) -> str:
        """Return the prompt string with ANSI colors."""
        sys_cfg = self.config.system
        text = str(sys_cfg.get("prompt", "$"))
        color = ANSI_COLORS.get(str(sys_cfg.get("prompt_color", "")), "")
        if not color:
            return text
        return f"{color}{text}{ANSI_COLORS['reset']}"

    def continuation_prompt(self) -> str:
        return str(self.config.system.get("continuation_prompt", ">"))

    # -----------------------
    # Command handling
    # -----------------------

    def parse(self, line: str) -> list[str]:
        """Tokenize a line (raises UnterminatedQuote)."""
        return tokenize(line)

    def handle_command(self, line: str) -> str:
        """Handle a single command line and return text to display."""
        self.last_argv = []
        try:
            argv = self.parse(line)
        except UnterminatedQuote as e:
            self.last_status = e.exit_code
            return f"tinysh: syntax error: {e}"
        self.last_argv = argv

        if not argv:
            return ""

        name, args = argv[0], argv[1:]

        try:
            command = self.resolver.resolve(name)
        except CommandNotFound as e:
            self.last_status = e.exit_code
            return str(e)

        return self.dispatch(command, args)

    def dispatch(self, command: Command, args: list[str]) -> str:
        """Run a resolved command with its arguments."""
        if command.is_builtin:
            assert command.builtin_id is not None
            handler = HANDLERS[command.builtin_id]
            result = handler(self, args)
            self.last_status = result.status
            return result.output

        assert command.path is not None
        return self._execute_external(command.name, command.path, args)

    def _can_stream(self) -> bool:
        if self.output_fn is None:
            return False
        stream = self.config.execution.get("stream", True)
        return bool(stream) and hasattr(self.executor, "run_stream")

    def _execute_external(self, name: str, path: str, args: list[str]) -> str:
        argv = [name, *args]

        if self._can_stream():

            def _out(s: str) -> None:
                if self.output_fn:
                    self.output_fn(s)

            result = self.executor.run_stream(
                path, argv, on_output=_out, cwd=self.cwd
            )
            self.last_status = result.exit_code
            return ""

        result = self.executor.run(path, argv, cwd=self.cwd)
        self.last_status = result.exit_code
        return result.output
