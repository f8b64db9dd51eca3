"""Interfaces for the host filesystem operations the core needs."""

from abc import ABC, abstractmethod


class FileSystem(ABC):
    """Abstract interface for host file access."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        pass

    @abstractmethod
    def read(self, path: str) -> bytes:
        pass

    @abstractmethod
    def write(self, path: str, contents: bytes, append: bool = False) -> None:
        """Write ``contents``, creating parent directories as needed."""
        pass

    @abstractmethod
    def chmod(self, path: str, mode: int) -> None:
        pass

    @abstractmethod
    def remove(self, path: str) -> None:
        """Remove a file or a whole directory tree. Missing paths are ignored."""
        pass

    @abstractmethod
    def extract(self, archive_path: str, destination_path: str, pattern: str) -> None:
        """Copy the first member of a tar archive whose name matches ``pattern`` to destination_path."""
        pass
