from __future__ import annotations

import pytest

from tinysh.errors import ConfigError
from tinysh.registry import BuiltinId, BuiltinRegistry


def test_default_registry_has_every_builtin():
    reg = BuiltinRegistry.default()
    assert set(reg) == {"echo", "exit", "type", "pwd", "cd"}
    assert reg["cd"] is BuiltinId.CD
    assert len(reg) == 5


def test_from_names_builds_subset():
    reg = BuiltinRegistry.from_names(["echo", "pwd"])
    assert "echo" in reg
    assert "exit" not in reg
    assert reg.get("exit") is None


def test_from_names_rejects_unknown_builtin():
    with pytest.raises(ConfigError) as exc:
        BuiltinRegistry.from_names(["echo", "history"])
    assert "history" in str(exc.value)


def test_registry_is_read_only():
    reg = BuiltinRegistry.default()
    with pytest.raises(TypeError):
        reg["ls"] = BuiltinId.ECHO  # type: ignore[index]
    with pytest.raises(TypeError):
        reg._entries["ls"] = BuiltinId.ECHO  # type: ignore[index]
    assert not hasattr(reg, "register")


def test_registry_is_isolated_from_source_mapping():
    source = {"echo": BuiltinId.ECHO}
    reg = BuiltinRegistry(source)
    source["cd"] = BuiltinId.CD
    assert "cd" not in reg
