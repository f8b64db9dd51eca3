"""Interfaces for running commands inside the guest."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import IO, List, Optional, Tuple


@dataclass(frozen=True)
class SSHAddress:
    """One way of reaching the guest's SSH daemon."""

    ip: str
    port: str

    def __str__(self) -> str:
        return f"{self.ip}:{self.port}"


class GuestShell(ABC):
    """Abstract interface for a remote shell into the guest."""

    @abstractmethod
    def run_command(
        self,
        command: str,
        addresses: List[SSHAddress],
        private_key: bytes,
        timeout: float,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ) -> None:
        """Run ``command``, trying each address until one answers or time runs out.

        Output is streamed to ``stdout``/``stderr`` when given and discarded
        otherwise.
        """
        pass

    @abstractmethod
    def get_output(
        self,
        command: str,
        addresses: List[SSHAddress],
        private_key: bytes,
        timeout: float,
    ) -> str:
        """Run ``command`` and return what it printed on stdout."""
        pass

    @abstractmethod
    def generate_keypair(self) -> Tuple[bytes, bytes]:
        """Return (private_key, public_key)."""
        pass

    @abstractmethod
    def generate_address(self) -> Tuple[str, str]:
        """Return a (host, port) pair that is free for forwarding."""
        pass
