"""Local filesystem implementation."""

import os
import re
import shutil
import tarfile
from pathlib import Path

from ..errors import PCFDevError
from ..interfaces.fs import FileSystem


class LocalFileSystem(FileSystem):
    """Host file access through pathlib and shutil."""

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def read(self, path: str) -> bytes:
        return Path(path).read_bytes()

    def write(self, path: str, contents: bytes, append: bool = False) -> None:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "ab" if append else "wb") as f:
            f.write(contents)

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(path, mode)

    def remove(self, path: str) -> None:
        target = Path(path)
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        else:
            target.unlink(missing_ok=True)

    def extract(self, archive_path: str, destination_path: str, pattern: str) -> None:
        """Copy one member of an OVA (a plain tar archive) out to destination_path."""
        regex = re.compile(pattern)
        with tarfile.open(archive_path) as archive:
            for member in archive:
                if not member.isfile() or not regex.search(member.name):
                    continue
                source = archive.extractfile(member)
                destination = Path(destination_path)
                destination.parent.mkdir(parents=True, exist_ok=True)
                with source, open(destination, "wb") as out:
                    shutil.copyfileobj(source, out)
                return
        raise PCFDevError(f"could not find a file matching '{pattern}' in {archive_path}")
