"""Tests for the subprocess-backed process runner."""
import inspect
import io
import sys

import pytest

from pcfdev.backends.subprocess_runner import COMMAND_NOT_FOUND, SubprocessRunner
from pcfdev.interfaces.process import ProcessRunner


@pytest.fixture
def runner():
    return SubprocessRunner()


class TestRun:
    def test_captures_output(self, runner):
        result = runner.run([sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr)"])

        assert result.success
        assert result.stdout == "out\n"
        assert result.stderr == "err\n"

    def test_nonzero_exit_is_returned(self, runner):
        result = runner.run([sys.executable, "-c", "raise SystemExit(3)"])

        assert result.returncode == 3
        assert not result.success

    def test_missing_binary(self, runner):
        result = runner.run(["pcfdev-no-such-binary"])

        assert result.returncode == COMMAND_NOT_FOUND
        assert "command not found" in result.stderr

    @pytest.mark.parametrize("method", [ProcessRunner.run, SubprocessRunner.run])
    def test_run_takes_only_command_and_timeout(self, method):
        assert list(inspect.signature(method).parameters) == ["self", "command", "timeout"]


class TestStream:
    def test_copies_lines_to_sinks(self, runner):
        out, err = io.StringIO(), io.StringIO()

        result = runner.stream(
            [sys.executable, "-c", "import sys; print('a'); print('b'); print('c', file=sys.stderr)"],
            out,
            err,
        )

        assert result.success
        assert out.getvalue() == "a\nb\n"
        assert err.getvalue() == "c\n"
        assert result.stdout == "a\nb\n"
