# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
tinysh CLI entry point and REPL loop.

Design:
- CLI owns process startup: config, registry, executor wiring.
- Shell (kernel) is the session engine (registry+executor+config injected).
- UI is terminal-friendly PromptSession (keeps scrollback + copy/select).
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable

from . import config
from .errors import ConfigError
from .executor import SubprocessExecutor
from .kernel import Shell, write_crash_log
from .registry import BuiltinRegistry
from .tokenizer import is_input_incomplete, join
from .ui import PromptToolkitUI


def _read_continuation(
    shell: Shell,
    line: str,
    ui: PromptToolkitUI | None,
    input_fn: Callable[[str], str],
) -> str:
    """Keep reading lines while ``line`` ends inside an open quote.

    Raises KeyboardInterrupt/EOFError if the user aborts.
    """
    while is_input_incomplete(line):
        prompt = shell.continuation_prompt()
        if ui is not None:
            continuation = ui.read(prompt)
        else:
            continuation = input_fn(prompt + " ")
        line = line + "\n" + (continuation or "")
    return line


def run_repl(
    shell: Shell,
    ui: PromptToolkitUI | None = None,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> None:
    """Run the standard tinysh REPL loop."""

    def _write(text: str) -> None:
        if ui is not None:
            if not text.endswith("\n"):
                text += "\n"
            ui.write(text)
        else:
            output_fn(text.removesuffix("\n"))

    continuation = bool(shell.config.system.get("continuation", True))

    while shell.running:
        try:
            prompt = shell.prompt()

            if ui is not None:
                line = ui.read(prompt)
            else:
                line = input_fn(prompt + " ")

            line = (line or "").strip()
            if not line:
                continue

            if continuation:
                try:
                    line = _read_continuation(shell, line, ui, input_fn)
                except (KeyboardInterrupt, EOFError):
                    # User aborted - drop the line
                    _write("\n[Cancelled]\n")
                    continue

            try:
                response = shell.handle_command(line)
                if response:
                    _write(response)

            except Exception as e:
                # Unhandled exception - write crash log
                write_crash_log(
                    e,
                    raw_command=line,
                    resolved_command=join(shell.last_argv),
                    cwd=shell.cwd,
                )
                _write(
                    f"[ERROR] Unhandled exception: "
                    f"{type(e).__name__}: {e}"
                )
                # Continue session

        except (KeyboardInterrupt, EOFError):
            _write("\nBye!\n")
            break


def _stdout_write(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def build_shell(cfg: config.YAMLConfig) -> Shell:
    """Wire registry + executor + config into a Shell."""
    registry = BuiltinRegistry.from_names(cfg.enabled_builtins())

    exec_cfg = cfg.execution
    timeout = exec_cfg.get("timeout")
    executor = SubprocessExecutor(
        force_color=bool(exec_cfg.get("force_color", False)),
        timeout=int(timeout) if timeout is not None else None,
        max_capture_bytes=int(exec_cfg.get("max_capture_bytes", 256_000)),
    )
    return Shell(registry=registry, executor=executor, config=cfg)


def main() -> None:
    """Main entry point for the tinysh CLI."""
    try:
        cfg = config.load_system_config()
        shell = build_shell(cfg)
    except ConfigError as e:
        print(f"tinysh: {e}", file=sys.stderr)
        sys.exit(2)

    start_output = shell.start()

    # If user explicitly disables prompt_toolkit UI:
    if os.environ.get("TINYSH_LEGACY_UI") == "1" or not sys.stdin.isatty():
        if start_output:
            print(start_output)
        shell.output_fn = _stdout_write
        run_repl(shell)
        sys.exit(shell.exit_code)

    # Default: PromptToolkitUI (keeps terminal scrollback/copy/select)
    ui = PromptToolkitUI(shell)

    # Route streaming output through UI
    shell.output_fn = ui.write

    if start_output:
        ui.write(start_output + "\n")

    run_repl(shell, ui=ui)
    sys.exit(shell.exit_code)
