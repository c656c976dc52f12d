"""
Tests for the subprocess implementation of the Executor protocol.
Covers command execution in isolation from the Shell kernel.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from tinysh.executor import SubprocessExecutor

PY = sys.executable


def py(code: str) -> list[str]:
    return ["python", "-c", code]


@pytest.fixture
def executor() -> SubprocessExecutor:
    return SubprocessExecutor()


# ----------------------------------------------------------------
# Buffered execution (run)
# ----------------------------------------------------------------


def test_run_returns_combined_output(executor):
    result = executor.run(
        PY, py("import sys; print('out'); sys.stdout.flush(); sys.stderr.write('err\\n')")
    )

    assert result.exit_code == 0
    assert result.output == "out\nerr\n"
    assert result.started_at
    assert result.duration_ms >= 0
    assert result.output_bytes == len(b"out\nerr\n")


def test_run_passes_arguments_verbatim(executor):
    result = executor.run(
        PY, py("import sys; print(sys.argv[1:])") + ["a b", "", "$HOME"]
    )
    assert result.output == "['a b', '', '$HOME']\n"


def test_run_sets_argv0_to_command_name(executor):
    result = executor.run(
        PY, ["my-python", "-c", "import sys; print(sys.orig_argv[0])"]
    )
    assert result.exit_code == 0
    assert result.output == "my-python\n"


def test_run_returns_non_zero_exit_code(executor):
    result = executor.run(PY, py("import sys; sys.exit(42)"))
    assert result.exit_code == 42


def test_run_respects_cwd(executor, tmp_path: Path):
    (tmp_path / "test.txt").write_text("hello")
    result = executor.run(
        PY, py("print(open('test.txt').read())"), cwd=str(tmp_path)
    )
    assert result.output == "hello\n"


def test_run_non_executable_file_reports_126(executor, tmp_path: Path):
    data = tmp_path / "data"
    data.write_text("not a program")
    data.chmod(0o644)

    result = executor.run(str(data), ["data"])

    assert result.exit_code == 126
    assert result.output.startswith("data: Error executing command:")


def test_run_handles_timeout():
    executor = SubprocessExecutor(timeout=1)
    result = executor.run(PY, py("import time; time.sleep(10)"))
    assert result.exit_code == 1
    assert "timed out" in result.output.lower()


def test_force_color_env(monkeypatch):
    monkeypatch.delenv("FORCE_COLOR", raising=False)
    code = "import os; print(os.getenv('FORCE_COLOR', 'NONE'))"

    assert SubprocessExecutor(force_color=True).run(PY, py(code)).output == "1\n"
    assert SubprocessExecutor(force_color=False).run(PY, py(code)).output == "NONE\n"


# ----------------------------------------------------------------
# Streaming execution (run_stream)
# ----------------------------------------------------------------


def test_run_stream_calls_back_per_line(executor):
    lines: list[str] = []
    result = executor.run_stream(
        PY, py("print('a'); print('b')"), on_output=lines.append
    )

    assert result.exit_code == 0
    assert lines == ["a\n", "b\n"]
    assert result.output == "a\nb\n"


def test_run_stream_merges_stderr(executor):
    lines: list[str] = []
    result = executor.run_stream(
        PY, py("import sys; sys.stderr.write('error\\n')"), on_output=lines.append
    )
    assert "error\n" in lines
    assert "error" in result.output


def test_run_stream_no_callbacks(executor):
    result = executor.run_stream(PY, py("print('test')"))
    assert result.exit_code == 0
    assert result.output == "test\n"


def test_run_stream_timeout(executor):
    lines: list[str] = []
    result = executor.run_stream(
        PY, py("import time; time.sleep(10)"), on_output=lines.append, timeout=1
    )
    assert result.exit_code == 1
    assert "timed out" in result.output.lower()
    assert any("timed out" in s.lower() for s in lines)


def test_run_stream_max_capture_bytes():
    executor = SubprocessExecutor(max_capture_bytes=100)
    result = executor.run_stream(PY, py("print('x' * 1000)"))
    assert result.truncated is True
    assert result.output_bytes > 100
    assert len(result.output) <= 100


def test_run_stream_handles_popen_oserror(executor, monkeypatch):
    def fake_popen(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(subprocess, "Popen", fake_popen)
    lines: list[str] = []

    result = executor.run_stream("/x/tool", ["tool"], on_output=lines.append)

    assert result.exit_code == 126
    assert "tool: Error executing command: denied" in result.output
    assert lines == [result.output]


def test_run_stream_with_cwd(executor, tmp_path: Path):
    (tmp_path / "test.txt").write_text("hello")
    result = executor.run_stream(
        PY, py("print(open('test.txt').read())"), cwd=str(tmp_path)
    )
    assert result.exit_code == 0
    assert "hello" in result.output


def test_run_stream_returns_when_grandchild_holds_pipe(executor):
    code = (
        "import subprocess, sys; "
        "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(3)']); "
        "print('parent done', flush=True)"
    )
    lines: list[str] = []

    result = executor.run_stream(PY, py(code), on_output=lines.append)

    assert result.exit_code == 0
    assert result.output == "parent done\n"
    assert lines == ["parent done\n"]
    assert result.duration_ms < 3000
