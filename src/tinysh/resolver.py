# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Command resolution for tinysh.

Resolution order:
1. builtin registry (builtins always shadow executables)
2. search path directories, in order; first existing entry wins
3. otherwise CommandNotFound

Nothing is cached: every call re-reads the path variable and re-stats the
directories, so results always reflect the current environment.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from .errors import CommandNotFound
from .registry import BuiltinId, BuiltinRegistry


class CommandKind(Enum):
    BUILTIN = "builtin"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Command:
    """A resolved command: exactly one of builtin id or external path."""

    name: str
    kind: CommandKind
    builtin_id: BuiltinId | None = None
    path: str | None = None

    def __post_init__(self) -> None:
        if self.kind is CommandKind.BUILTIN:
            if self.builtin_id is None or self.path is not None:
                raise ValueError("builtin command needs a builtin_id and no path")
        elif self.kind is CommandKind.EXTERNAL:
            if not self.path or self.builtin_id is not None:
                raise ValueError("external command needs a path and no builtin_id")

    @classmethod
    def builtin(cls, name: str, builtin_id: BuiltinId) -> Command:
        return cls(name=name, kind=CommandKind.BUILTIN, builtin_id=builtin_id)

    @classmethod
    def external(cls, name: str, path: str) -> Command:
        return cls(name=name, kind=CommandKind.EXTERNAL, path=path)

    @property
    def is_builtin(self) -> bool:
        return self.kind is CommandKind.BUILTIN


class CommandResolver:
    """Resolve command names against a builtin registry and a search path."""

    def __init__(
        self,
        registry: BuiltinRegistry,
        path_var: str = "PATH",
        require_executable: bool = False,
        environ: Mapping[str, str] | None = None,
    ):
        """
        Args:
            registry: Builtin names; consulted first
            path_var: Environment variable holding the search path
            require_executable: If True, only regular files with the
                execute bit count as matches
            environ: Environment mapping to read (default: os.environ,
                read at call time)
        """
        self.registry = registry
        self.path_var = path_var
        self.require_executable = require_executable
        self._environ = environ

    def search_path(self) -> list[str]:
        """Return the current search path directories, in order."""
        environ = self._environ if self._environ is not None else os.environ
        value = environ.get(self.path_var, "")
        return [d for d in value.split(os.pathsep) if d]

    def _matches(self, candidate: str) -> bool:
        if self.require_executable:
            return os.path.isfile(candidate) and os.access(candidate, os.X_OK)
        return os.path.exists(candidate)

    def find_executable(self, name: str) -> str | None:
        """Return the first search path entry named ``name``, or None.

        Only entries directly inside a search directory match, so a name
        carrying a directory part never resolves.
        """
        if not name or os.path.dirname(name):
            return None
        for directory in self.search_path():
            candidate = os.path.join(directory, name)
            if self._matches(candidate):
                return candidate
        return None

    def resolve(self, name: str) -> Command:
        """Resolve ``name`` to a Command.

        Raises:
            CommandNotFound: if neither a builtin nor a path entry matches
        """
        builtin_id = self.registry.get(name)
        if builtin_id is not None:
            return Command.builtin(name, builtin_id)

        path = self.find_executable(name)
        if path is not None:
            return Command.external(name, path)

        raise CommandNotFound(name)


def resolve(
    name: str,
    registry: BuiltinRegistry,
    environ: Mapping[str, str] | None = None,
) -> Command:
    """One-shot resolution using PATH from ``environ`` (or os.environ)."""
    return CommandResolver(registry, environ=environ).resolve(name)
