"""Subprocess process runner implementation."""

import subprocess
import threading
from typing import IO, List, Optional

from ..interfaces.process import ProcessResult, ProcessRunner
from ..logging import get_logger

log = get_logger(__name__)

COMMAND_NOT_FOUND = 127


class SubprocessRunner(ProcessRunner):
    """Run processes using the subprocess module."""

    def run(
        self,
        command: List[str],
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        """Run a command and capture its output.

        A missing executable is reported the way a shell would, with exit
        status 127, instead of raising.
        """
        log.debug("process_run", argv0=command[0], argc=len(command), timeout=timeout)
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                timeout=timeout,
                text=True,
            )
        except FileNotFoundError:
            return ProcessResult(
                returncode=COMMAND_NOT_FOUND,
                stdout="",
                stderr=f"{command[0]}: command not found",
            )
        return ProcessResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    def stream(
        self,
        command: List[str],
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        """Run a command, copying its output line by line to the given streams.

        The returned result carries the full output as well.
        """
        log.debug("process_stream", argv0=command[0], argc=len(command), timeout=timeout)
        try:
            proc = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                bufsize=1,
            )
        except FileNotFoundError:
            return ProcessResult(
                returncode=COMMAND_NOT_FOUND,
                stdout="",
                stderr=f"{command[0]}: command not found",
            )

        captured = {"stdout": [], "stderr": []}

        def pump(source, sink, key):
            for line in source:
                captured[key].append(line)
                if sink is not None:
                    sink.write(line)
                    sink.flush()
            source.close()

        pumps = [
            threading.Thread(target=pump, args=(proc.stdout, stdout, "stdout"), daemon=True),
            threading.Thread(target=pump, args=(proc.stderr, stderr, "stderr"), daemon=True),
        ]
        for t in pumps:
            t.start()
        try:
            returncode = proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
            raise
        finally:
            for t in pumps:
                t.join(timeout=5)

        return ProcessResult(
            returncode=returncode,
            stdout="".join(captured["stdout"]),
            stderr="".join(captured["stderr"]),
        )
