# tests/test_ui.py
from __future__ import annotations

from pathlib import Path

import pytest

prompt_toolkit = pytest.importorskip("prompt_toolkit")

from prompt_toolkit.completion import CompleteEvent  # noqa: E402
from prompt_toolkit.document import Document  # noqa: E402

from tinysh.config import YAMLConfig  # noqa: E402
from tinysh.kernel import Shell  # noqa: E402
from tinysh.registry import BuiltinRegistry  # noqa: E402
from tinysh.ui import (  # noqa: E402
    ExecutableCompleter,
    PathCompleter,
    PromptToolkitUI,
    ShellCompleter,
    _build_style,
)


class FakeExecutor:
    def run(self, path, argv, cwd=None):
        raise AssertionError("not used")

    def run_stream(self, path, argv, on_output=None, timeout=None, cwd=None):
        raise AssertionError("not used")


def make_shell(cwd: Path, cfg: dict | None = None) -> Shell:
    return Shell(
        registry=BuiltinRegistry.default(),
        executor=FakeExecutor(),
        config=YAMLConfig(cfg or {}),
        cwd=str(cwd),
    )


def completions(completer, text: str) -> list[str]:
    doc = Document(text, cursor_position=len(text))
    return [c.text for c in completer.get_completions(doc, CompleteEvent())]


@pytest.fixture
def bindir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    d = tmp_path / "bin"
    d.mkdir()
    for name in ("cat", "cargo", "echo"):
        p = d / name
        p.write_text("#!/bin/sh\n")
        p.chmod(0o755)
    (d / "cfg.txt").write_text("not executable")
    monkeypatch.setenv("PATH", str(d))
    return d


# ----------------------------------------------------------------
# ExecutableCompleter
# ----------------------------------------------------------------


def test_executable_completer_offers_builtins_and_path(tmp_path, bindir):
    comp = ExecutableCompleter(make_shell(tmp_path))

    assert completions(comp, "c") == ["cd", "cargo", "cat"]
    # echo is a builtin; listed once
    assert completions(comp, "ec") == ["echo"]


def test_executable_completer_skips_non_executables(tmp_path, bindir):
    comp = ExecutableCompleter(make_shell(tmp_path))
    assert "cfg.txt" not in completions(comp, "cf")


def test_executable_completer_only_on_first_token(tmp_path, bindir):
    comp = ExecutableCompleter(make_shell(tmp_path))
    assert completions(comp, "echo ca") == []


def test_executable_completer_refreshes_when_path_changes(tmp_path, bindir, monkeypatch):
    comp = ExecutableCompleter(make_shell(tmp_path))
    assert "cat" in completions(comp, "ca")

    other = tmp_path / "other"
    other.mkdir()
    monkeypatch.setenv("PATH", str(other))
    assert completions(comp, "ca") == []


# ----------------------------------------------------------------
# PathCompleter
# ----------------------------------------------------------------


def test_path_completer_lists_shell_cwd(tmp_path):
    (tmp_path / "notes.txt").write_text("")
    (tmp_path / "nested").mkdir()
    (tmp_path / ".hidden").write_text("")
    comp = PathCompleter(make_shell(tmp_path))

    assert completions(comp, "cat n") == ["nested/", "notes.txt"]
    assert completions(comp, "cat ") == ["nested/", "notes.txt"]
    assert completions(comp, "cat .h") == [".hidden"]


def test_path_completer_descends_directories(tmp_path):
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "inner.py").write_text("")
    comp = PathCompleter(make_shell(tmp_path))

    assert completions(comp, "cat nested/") == ["nested/inner.py"]
    assert completions(comp, "cat nested/in") == ["nested/inner.py"]


def test_path_completer_ignores_command_token(tmp_path):
    (tmp_path / "notes.txt").write_text("")
    comp = PathCompleter(make_shell(tmp_path))
    assert completions(comp, "no") == []


def test_shell_completer_combines(tmp_path, bindir):
    (tmp_path / "cake").write_text("")
    comp = ShellCompleter(make_shell(tmp_path))

    assert completions(comp, "ca") == ["cargo", "cat"]
    assert completions(comp, "cat ca") == ["cake"]


# ----------------------------------------------------------------
# Style + UI object
# ----------------------------------------------------------------


def test_style_overrides_from_config(tmp_path):
    shell = make_shell(
        tmp_path,
        {"ui": {"theme": {"style": {"completion-menu": "bg:#000000", "bad": 3}}}},
    )
    style = _build_style(shell)
    rules = dict(style.style_rules)
    assert rules["completion-menu"] == "bg:#000000"
    assert "bad" not in rules


def test_ui_constructs_without_session(tmp_path):
    ui = PromptToolkitUI(make_shell(tmp_path))
    assert ui.session is None
    assert isinstance(ui._completer, ShellCompleter)


def test_ui_key_bindings_include_clear(tmp_path):
    ui = PromptToolkitUI(make_shell(tmp_path))
    kb = ui.build_key_bindings()
    assert len(kb.bindings) == 1


def test_write_tracks_trailing_newline(tmp_path, monkeypatch):
    import tinysh.ui as ui_mod

    written: list[str] = []
    monkeypatch.setattr(
        ui_mod, "print_formatted_text", lambda text, **kw: written.append(text.value)
    )
    ui = PromptToolkitUI(make_shell(tmp_path))

    ui.write("")
    assert written == []

    ui.write("partial")
    assert ui._needs_newline_before_prompt is True

    ui.write("done\n")
    assert ui._needs_newline_before_prompt is False
    assert written == ["partial", "done\n"]
