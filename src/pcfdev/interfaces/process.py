"""Abstract interface for process execution."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import IO, List, Optional


@dataclass
class ProcessResult:
    """Result of process execution."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stdout and stderr together, the way a terminal would show them."""
        return (self.stdout or "") + (self.stderr or "")


class ProcessRunner(ABC):
    """Abstract interface for process execution."""

    @abstractmethod
    def run(
        self,
        command: List[str],
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        """Run a command and capture its output."""
        pass

    @abstractmethod
    def stream(
        self,
        command: List[str],
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
        timeout: Optional[float] = None,
    ) -> ProcessResult:
        """Run a command, forwarding its output to the given streams as it arrives."""
        pass
