# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Builtin command handlers.

Every handler takes the running Shell and the arguments (command name
excluded) and returns a BuiltinResult. Bad usage is reported through the
result, never raised.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .registry import BuiltinId

if TYPE_CHECKING:
    from .kernel import Shell  # pragma: no cover


@dataclass(frozen=True)
class BuiltinResult:
    status: int = 0
    output: str = ""


def run_echo(shell: Shell, args: list[str]) -> BuiltinResult:
    return BuiltinResult(0, " ".join(args) + "\n")


def run_exit(shell: Shell, args: list[str]) -> BuiltinResult:
    if len(args) != 1:
        return BuiltinResult(1, "exit: incorrect number of arguments\n")

    try:
        code = int(args[0])
    except ValueError:
        return BuiltinResult(1, f"exit {args[0]}: invalid exit code\n")

    shell.running = False
    shell.exit_code = code
    return BuiltinResult(code)


def run_type(shell: Shell, args: list[str]) -> BuiltinResult:
    lines: list[str] = []
    status = 0
    for name in args:
        if name in shell.registry:
            lines.append(f"{name} is a shell builtin")
            continue

        path = shell.resolver.find_executable(name)
        if path is None:
            lines.append(f"{name}: not found")
            status = 1
            continue

        lines.append(f"{name} is {path}")

    output = "".join(line + "\n" for line in lines)
    return BuiltinResult(status, output)


def run_pwd(shell: Shell, args: list[str]) -> BuiltinResult:
    return BuiltinResult(0, shell.cwd + "\n")


def run_cd(shell: Shell, args: list[str]) -> BuiltinResult:
    if len(args) != 1:
        return BuiltinResult(1, "cd: incorrect number of arguments\n")

    to = args[0].strip()

    target = os.path.expanduser(to)
    if not os.path.isabs(target):
        target = os.path.join(shell.cwd, target)
    target = os.path.normpath(target)

    if not os.path.isdir(target):
        return BuiltinResult(1, f"cd: {to}: No such file or directory\n")

    shell.cwd = target
    return BuiltinResult(0)


HANDLERS: dict[BuiltinId, Callable[[Shell, list[str]], BuiltinResult]] = {
    BuiltinId.ECHO: run_echo,
    BuiltinId.EXIT: run_exit,
    BuiltinId.TYPE: run_type,
    BuiltinId.PWD: run_pwd,
    BuiltinId.CD: run_cd,
}
