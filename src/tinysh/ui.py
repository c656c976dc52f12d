# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import clear as pt_clear
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.styles import Style

if TYPE_CHECKING:
    from .kernel import Shell  # pragma: no cover


# ----------------------------
# Config helpers
# ----------------------------


def _cfg_get_path(shell: Shell | None, path: str, default):
    if shell is None:
        return default
    cfg = getattr(shell, "config", None)
    if cfg is None or not hasattr(cfg, "get_path"):
        return default
    return cfg.get_path(path, default)


def _cfg_dict(shell: Shell | None, path: str, default: dict) -> dict:
    val = _cfg_get_path(shell, path, default)
    return val if isinstance(val, dict) else default


# ----------------------------
# Theme / Style
# ----------------------------


def _default_style_dict() -> dict[str, str]:
    return {
        "completion-menu": "bg:#111111 #d0d0d0",
        "completion-menu.completion": "bg:#111111 #d0d0d0",
        "completion-menu.completion.current": "bg:#303030 #ffffff bold",
        "completion-menu.meta.completion": "bg:#111111 #808080",
        "completion-menu.meta.completion.current": "bg:#303030 #a0a0a0",
        "scrollbar.background": "bg:#202020",
        "scrollbar.button": "bg:#505050",
    }


def _build_style(shell: Shell | None) -> Style:
    base = _default_style_dict()
    overrides = _cfg_dict(shell, "ui.theme.style", {})
    # only keep string->string
    for k, v in list(overrides.items()):
        if isinstance(k, str) and isinstance(v, str):
            base[k] = v
    return Style.from_dict(base)


# ----------------------------
# Completers
# ----------------------------


class ExecutableCompleter(Completer):
    """Completes builtin names and executables on the search path."""

    def __init__(self, shell: Shell | None = None) -> None:
        self.shell = shell
        self._cache: set[str] | None = None
        self._cache_path: str | None = None

    def _path_value(self) -> str:
        var = "PATH"
        if self.shell is not None:
            var = self.shell.resolver.path_var
        return os.environ.get(var, "")

    def _load(self) -> set[str]:
        path_val = self._path_value()
        if self._cache is not None and self._cache_path == path_val:
            return self._cache

        exes: set[str] = set()
        for p in path_val.split(os.pathsep):
            if not p:
                continue
            try:
                for name in os.listdir(p):
                    full = os.path.join(p, name)
                    if os.path.isfile(full) and os.access(full, os.X_OK):
                        exes.add(name)
            except OSError:
                continue

        self._cache = exes
        self._cache_path = path_val
        return exes

    def candidates(self, token: str) -> list[tuple[str, str]]:
        """Return (name, meta) pairs starting with token, builtins first."""
        out: list[tuple[str, str]] = []
        builtins: set[str] = set()
        if self.shell is not None:
            builtins = set(self.shell.registry)
            for name in sorted(builtins):
                if name.startswith(token):
                    out.append((name, "builtin"))
        for exe in sorted(self._load() - builtins):
            if exe.startswith(token):
                out.append((exe, "exe"))
        return out

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        before = (document.text_before_cursor or "").lstrip()

        # Past the command token: not ours
        if not before or any(c.isspace() for c in before):
            return

        for name, meta in self.candidates(before):
            yield Completion(
                name, start_position=-len(before), display_meta=meta
            )


class PathCompleter(Completer):
    """Filesystem path completion for arguments, relative to the shell cwd."""

    def __init__(self, shell: Shell | None = None) -> None:
        self.shell = shell

    def _base_cwd(self) -> str:
        if self.shell is not None:
            return self.shell.cwd
        return os.getcwd()

    def _current_arg_token(self, text: str) -> str | None:
        """Return the argument fragment under the cursor, or None.

        None means the cursor is still on the command token.
        """
        stripped = text.lstrip()
        if not stripped or not any(c.isspace() for c in stripped):
            return None
        if stripped[-1].isspace():
            return ""
        return stripped.split()[-1]

    def _list_dir(self, directory: str) -> list[str]:
        try:
            return sorted(os.listdir(directory))
        except OSError:
            return []

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        token = self._current_arg_token(document.text_before_cursor or "")
        if token is None:
            return

        expanded = os.path.expanduser(token)

        if token == "":
            base_dir = "."
            prefix = ""
            insert_prefix = ""
        elif expanded.endswith("/") or expanded.endswith(os.sep):
            base_dir = expanded
            prefix = ""
            insert_prefix = token
        else:
            base_dir = os.path.dirname(expanded) or "."
            prefix = os.path.basename(expanded)
            insert_prefix = os.path.dirname(token)
            if insert_prefix and not insert_prefix.endswith("/"):
                insert_prefix += "/"

        if not os.path.isabs(base_dir):
            base_dir = os.path.join(self._base_cwd(), base_dir)

        for name in self._list_dir(base_dir):
            if not name.startswith(prefix):
                continue
            if name.startswith(".") and not prefix.startswith("."):
                continue
            full = os.path.join(base_dir, name)
            is_dir = os.path.isdir(full)
            ins = f"{insert_prefix}{name}" + ("/" if is_dir else "")
            meta = "dir" if is_dir else "file"
            yield Completion(
                ins, start_position=-len(token), display_meta=meta
            )


class ShellCompleter(Completer):
    """Command names on the first token, paths afterwards."""

    def __init__(self, shell: Shell | None) -> None:
        self.shell = shell
        self._exe = ExecutableCompleter(shell)
        self._path = PathCompleter(shell)

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        yield from self._exe.get_completions(document, complete_event)
        yield from self._path.get_completions(document, complete_event)


# ----------------------------
# PromptSession UI
# ----------------------------


class PromptToolkitUI:
    """
    Terminal-friendly line editor:
      - Keeps normal terminal scrollback + drag-select copy.
      - Tab completion of builtins, executables and paths.
      - Ctrl+L clears the screen.
    """

    def __init__(self, shell: Shell | None = None) -> None:
        self.shell = shell
        self.session: PromptSession[str] | None = None
        self._completer = ShellCompleter(shell)
        self._style = _build_style(shell)

        # Track whether we ended on a newline (to prevent prompt mangling)
        self._needs_newline_before_prompt = False

    def _ensure_session(self) -> None:
        if self.session is not None:
            return

        self.session = PromptSession(
            key_bindings=self.build_key_bindings(),
            completer=self._completer,
            complete_while_typing=bool(
                _cfg_get_path(self.shell, "ui.complete_while_typing", False)
            ),
            style=self._style,
        )

    # ---------- public API ----------

    def read(self, prompt: str) -> str:
        self._ensure_session()
        assert self.session is not None

        # If last output didn't end with newline, insert one
        # before prompt redraw
        if self._needs_newline_before_prompt:
            print_formatted_text(
                ANSI("\n"), style=self._style, end=""
            )
            self._needs_newline_before_prompt = False

        with patch_stdout():
            # prompt may contain ANSI from shell.prompt(), so preserve it
            return self.session.prompt(ANSI(prompt + " "))

    def write(self, text: str) -> None:
        """Write EXACTLY what we receive (no extra newline).

        Track prompt safety.
        """
        if not text:
            return
        print_formatted_text(ANSI(text), style=self._style, end="")
        self._needs_newline_before_prompt = not text.endswith("\n")

    def clear(self) -> None:
        pt_clear()

    # ---------- keybindings ----------

    def build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("c-l")
        def _(event):
            event.app.renderer.clear()
            event.app.invalidate()

        return kb
