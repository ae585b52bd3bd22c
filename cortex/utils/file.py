"""
File Utility Functions
======================

Byte-level writes used for every file the installer owns. Writes go through a
temporary sibling file and ``os.replace`` so a reader never sees a half-written
rule file, index or checksum store.
"""

import os
import shutil
import stat
import tempfile
from pathlib import Path

from cortex.core.errors import FileWriteError


def current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def target_mode(path: Path) -> int:
    """Permissions for a write to ``path``: the existing file's, else 0666 less the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        return 0o666 & ~current_umask()


def write_bytes(file_path: str | Path, content: bytes) -> None:
    """
    Atomically replace ``file_path`` with ``content``.

    Args:
        file_path: Destination path; parent directories are created
        content: Bytes to write

    Raises:
        FileWriteError: If any filesystem operation fails
    """
    path = Path(file_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        mode = target_mode(path)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(content)
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as error:
        raise FileWriteError(path, error.strerror or str(error)) from error


def write_text(file_path: str | Path, content: str) -> None:
    write_bytes(file_path, content.encode("utf-8"))


def copy_file(source: str | Path, destination: str | Path) -> None:
    """
    Copy ``source`` over ``destination``, creating parent directories.

    Raises:
        FileWriteError: If the copy fails
    """
    destination = Path(destination)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
    except OSError as error:
        raise FileWriteError(destination, error.strerror or str(error)) from error
