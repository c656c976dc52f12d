# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Builtin registry.

The registry maps builtin names to a closed set of handler identifiers.
It is built once at startup (from config) and cannot be changed
afterwards; the dispatcher turns identifiers into behavior.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import Enum
from types import MappingProxyType

from .errors import ConfigError


class BuiltinId(Enum):
    """Builtin capabilities known to the shell."""
    ECHO = "echo"
    EXIT = "exit"
    TYPE = "type"
    PWD = "pwd"
    CD = "cd"


class BuiltinRegistry(Mapping[str, BuiltinId]):
    """Read-only mapping of builtin name -> BuiltinId."""

    def __init__(self, entries: Mapping[str, BuiltinId] | None = None):
        self._entries: Mapping[str, BuiltinId] = MappingProxyType(
            dict(entries or {})
        )

    @classmethod
    def from_names(cls, names: Iterable[str]) -> BuiltinRegistry:
        """Build a registry from builtin names (e.g. config ``builtins.enabled``).

        Raises:
            ConfigError: if a name is not a known builtin
        """
        entries: dict[str, BuiltinId] = {}
        for name in names:
            try:
                entries[name] = BuiltinId(name)
            except ValueError:
                raise ConfigError(f"Unknown builtin in config: {name!r}") from None
        return cls(entries)

    @classmethod
    def default(cls) -> BuiltinRegistry:
        """Registry with every builtin enabled under its own name."""
        return cls({b.value: b for b in BuiltinId})

    def __getitem__(self, name: str) -> BuiltinId:
        return self._entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"BuiltinRegistry({sorted(self._entries)!r})"
