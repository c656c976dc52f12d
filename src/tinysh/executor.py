# tinysh — Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Subprocess-backed executor for external commands.

This module provides:
- run(): buffered execution, returns the combined stdout/stderr
- run_stream(): streams combined output line-by-line in real time
  (used by the prompt_toolkit UI)

Commands are never passed through /bin/sh: the resolved path is executed
directly with argv[0] set to the name the user typed.
"""

from __future__ import annotations

import os
import subprocess
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ExecResult:
    exit_code: int
    output: str
    started_at: str
    duration_ms: int
    output_bytes: int = 0
    truncated: bool = False


class SubprocessExecutor:
    """Subprocess implementation of the Executor protocol."""

    def __init__(
        self, force_color: bool = False, timeout: int | None = None,
        max_capture_bytes: int = 256_000
    ):
        """Initialize executor with configuration.

        Args:
            force_color: If True, set color-forcing env variables
            timeout: Command timeout in seconds (None: wait forever)
            max_capture_bytes: Max bytes kept in captured output
        """
        self.force_color = force_color
        self.timeout = timeout
        self.max_capture_bytes = max_capture_bytes

    def _build_env(self) -> dict:
        env = os.environ.copy()
        if self.force_color:
            env["PY_COLORS"] = "1"
            env["FORCE_COLOR"] = "1"
            env["CLICOLOR_FORCE"] = "1"
        return env

    @staticmethod
    def _spawn_error(argv: list[str], e: Exception) -> str:
        name = argv[0] if argv else ""
        return f"{name}: Error executing command: {e}\n"

    def run(
        self, path: str, argv: list[str], cwd: str | None = None
    ) -> ExecResult:
        """Run an executable and return its combined output.

        Args:
            path: resolved executable path
            argv: full argument vector (argv[0] is the command name)
            cwd: working directory for the command

        Returns:
            ExecResult with stdout and stderr interleaved in ``output``
        """
        started_at = datetime.now().isoformat()
        start_time = datetime.now()

        try:
            result = subprocess.run(
                argv,
                executable=path,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                timeout=self.timeout,
                env=self._build_env(),
                cwd=cwd,
            )
        except subprocess.TimeoutExpired as e:
            duration_ms = int(
                (datetime.now() - start_time).total_seconds() * 1000
            )
            partial = (e.output or b"").decode("utf-8", errors="replace")
            msg = f"Command timed out after {self.timeout} seconds\n"
            return ExecResult(
                1, partial + msg, started_at, duration_ms,
                output_bytes=len(e.output or b""),
            )
        except OSError as e:
            duration_ms = int(
                (datetime.now() - start_time).total_seconds() * 1000
            )
            return ExecResult(
                126, self._spawn_error(argv, e), started_at, duration_ms
            )

        duration_ms = int(
            (datetime.now() - start_time).total_seconds() * 1000
        )
        raw = result.stdout or b""
        return ExecResult(
            exit_code=result.returncode,
            output=raw.decode("utf-8", errors="replace"),
            started_at=started_at,
            duration_ms=duration_ms,
            output_bytes=len(raw),
        )

    def run_stream(
        self,
        path: str,
        argv: list[str],
        on_output: Callable[[str], None] | None = None,
        timeout: int | None = None,
        cwd: str | None = None,
    ) -> ExecResult:
        """Run an executable and stream its combined output in real time.

        Args:
            path: resolved executable path
            argv: full argument vector (argv[0] is the command name)
            on_output: called with each output line (newline included
                if present)
            timeout: overrides self.timeout
            cwd: working directory for the command

        Returns:
            ExecResult (captured output up to max_capture_bytes)
        """
        started_at = datetime.now().isoformat()
        start_ts = time.time()

        cap: list[str] = []
        total_bytes = 0
        truncated = False
        # The reader may outlive the child when a grandchild holds the pipe
        cap_lock = threading.Lock()

        max_bytes = max(0, int(self.max_capture_bytes))
        limit = timeout if timeout is not None else self.timeout
        deadline = start_ts + limit if limit is not None else None

        def _append_capped(s: str, current_bytes: int) -> int:
            nonlocal truncated
            b = len(s.encode("utf-8", errors="replace"))
            if max_bytes == 0 or current_bytes >= max_bytes:
                truncated = True
                return current_bytes + b
            remaining = max_bytes - current_bytes
            if b > remaining:
                raw = s.encode("utf-8", errors="replace")[:remaining]
                cap.append(raw.decode("utf-8", errors="replace"))
                truncated = True
                return current_bytes + b
            cap.append(s)
            return current_bytes + b

        try:
            proc = subprocess.Popen(
                argv,
                executable=path,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                stdin=subprocess.DEVNULL,
                text=True,
                errors="replace",
                bufsize=1,
                env=self._build_env(),
                cwd=cwd,
            )
        except OSError as e:
            duration_ms = int((time.time() - start_ts) * 1000)
            msg = self._spawn_error(argv, e)
            if on_output:
                on_output(msg)
            return ExecResult(
                exit_code=126,
                output=msg,
                started_at=started_at,
                duration_ms=duration_ms,
            )

        assert proc.stdout is not None

        def _reader(pipe) -> None:
            nonlocal total_bytes
            try:
                for line in iter(pipe.readline, ""):
                    if on_output:
                        on_output(line)
                    with cap_lock:
                        total_bytes = _append_capped(line, total_bytes)
            finally:
                try:
                    pipe.close()
                except OSError:
                    pass

        reader = threading.Thread(
            target=_reader, args=(proc.stdout,), daemon=True
        )
        reader.start()

        timed_out = False
        try:
            while True:
                if proc.poll() is not None:
                    break
                if deadline is not None and time.time() >= deadline:
                    timed_out = True
                    break
                time.sleep(0.03)
        finally:
            if timed_out:
                # Terminate nicely then kill if needed.
                proc.terminate()
                try:
                    proc.wait(timeout=1.0)
                except subprocess.TimeoutExpired:
                    proc.kill()
                    proc.wait()

            # The pipe hits EOF once the child exits; drain what's left.
            reader.join(timeout=1.0)

        duration_ms = int((time.time() - start_ts) * 1000)

        if timed_out:
            msg = f"Command timed out after {limit} seconds\n"
            if on_output:
                on_output(msg)
            with cap_lock:
                total_bytes = _append_capped(msg, total_bytes)
            exit_code = 1
        else:
            exit_code = proc.returncode if proc.returncode is not None else 1

        with cap_lock:
            output = "".join(cap)
            output_bytes = total_bytes
            was_truncated = truncated

        return ExecResult(
            exit_code=exit_code,
            output=output,
            started_at=started_at,
            duration_ms=duration_ms,
            output_bytes=output_bytes,
            truncated=was_truncated,
        )
