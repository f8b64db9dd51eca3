"""
Guest shell on top of the OpenSSH client.

Commands are retried across the given addresses until one of them accepts the
connection or the timeout runs out. The private key is handed to ssh through a
short-lived 0600 file.
"""

import os
import socket
import subprocess
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Callable, Iterator, List, Optional, Tuple

from ..errors import GuestCommandError, PCFDevError
from ..interfaces.process import ProcessResult, ProcessRunner
from ..interfaces.shell import GuestShell, SSHAddress
from ..logging import get_logger

log = get_logger(__name__)

# ssh exits with 255 when it could not connect or authenticate
SSH_CONNECTION_FAILED = 255

# ── default SSH flags ────────────────────────────────────────────────────────

DEFAULT_SSH_OPTS: List[str] = [
    "-o", "StrictHostKeyChecking=no",
    "-o", "UserKnownHostsFile=/dev/null",
    "-o", "BatchMode=yes",
    "-o", "IdentitiesOnly=yes",
    "-o", "LogLevel=ERROR",
]


# ── command builder ──────────────────────────────────────────────────────────

def build_ssh_command(
    address: SSHAddress,
    key: Path,
    username: str = "vcap",
    connect_timeout: int = 10,
) -> List[str]:
    """Build the ssh argv for one address, without the remote command.

    >>> cmd = build_ssh_command(SSHAddress("127.0.0.1", "2222"), Path("/tmp/key"))
    >>> cmd[-1]
    'vcap@127.0.0.1'
    """
    cmd: List[str] = ["ssh"] + list(DEFAULT_SSH_OPTS)
    cmd.extend(["-o", f"ConnectTimeout={connect_timeout}"])
    cmd.extend(["-i", str(key)])
    cmd.extend(["-p", str(address.port)])
    cmd.append(f"{username}@{address.ip}")
    return cmd


@contextmanager
def private_key_file(private_key: bytes) -> Iterator[Path]:
    """Write ``private_key`` to a temporary file only the owner can read."""
    fd, name = tempfile.mkstemp(prefix="pcfdev-key-")
    path = Path(name)
    try:
        os.chmod(name, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(private_key)
        yield path
    finally:
        path.unlink(missing_ok=True)


class OpenSSHShell(GuestShell):
    """Run guest commands with the ``ssh`` binary."""

    retry_interval = 1.0
    max_connect_timeout = 10

    def __init__(self, runner: ProcessRunner, username: str = "vcap"):
        self.runner = runner
        self.username = username

    def run_command(
        self,
        command: str,
        addresses: List[SSHAddress],
        private_key: bytes,
        timeout: float,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ) -> None:
        def execute(argv: List[str], remaining: float) -> ProcessResult:
            return self.runner.stream(argv, stdout=stdout, stderr=stderr, timeout=remaining)

        self._run_with_retry(command, addresses, private_key, timeout, execute)

    def get_output(
        self,
        command: str,
        addresses: List[SSHAddress],
        private_key: bytes,
        timeout: float,
    ) -> str:
        def execute(argv: List[str], remaining: float) -> ProcessResult:
            return self.runner.run(argv, timeout=remaining)

        return self._run_with_retry(command, addresses, private_key, timeout, execute).stdout

    def _run_with_retry(
        self,
        command: str,
        addresses: List[SSHAddress],
        private_key: bytes,
        timeout: float,
        execute: Callable[[List[str], float], ProcessResult],
    ) -> ProcessResult:
        if not addresses:
            raise GuestCommandError("no SSH address to connect to")

        deadline = time.monotonic() + timeout
        with private_key_file(private_key) as key_path:
            while True:
                for address in addresses:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        raise GuestCommandError(
                            f"ssh: timed out after {timeout:g}s connecting to "
                            + ", ".join(str(a) for a in addresses)
                        )
                    argv = build_ssh_command(
                        address,
                        key_path,
                        username=self.username,
                        connect_timeout=max(1, min(self.max_connect_timeout, int(remaining))),
                    )
                    argv.append(command)

                    try:
                        result = execute(argv, remaining)
                    except subprocess.TimeoutExpired:
                        raise GuestCommandError(
                            f"ssh: command timed out after {timeout:g}s on {address}"
                        ) from None

                    if result.returncode == SSH_CONNECTION_FAILED:
                        log.debug(
                            "ssh_unreachable",
                            address=str(address),
                            stderr=result.stderr.strip()[:120],
                        )
                        continue
                    if not result.success:
                        raise GuestCommandError(
                            f"ssh: remote command exited with status {result.returncode}"
                            + (f": {result.stderr.strip()}" if result.stderr.strip() else ""),
                            exit_status=result.returncode,
                        )
                    return result

                time.sleep(min(self.retry_interval, max(0.0, deadline - time.monotonic())))

    def generate_keypair(self) -> Tuple[bytes, bytes]:
        with tempfile.TemporaryDirectory() as tmpdir:
            key_path = Path(tmpdir) / "key"
            result = self.runner.run(
                ["ssh-keygen", "-t", "rsa", "-b", "2048", "-N", "", "-C", "pcfdev",
                 "-f", str(key_path), "-q"],
            )
            if not result.success:
                raise PCFDevError(f"failed to generate SSH keypair: {result.output.strip()}")
            private_key = key_path.read_bytes()
            public_key = key_path.with_suffix(".pub").read_bytes().strip()
        return private_key, public_key

    def generate_address(self) -> Tuple[str, str]:
        """Ask the kernel for a free loopback port."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind(("127.0.0.1", 0))
            host, port = s.getsockname()
        return host, str(port)
