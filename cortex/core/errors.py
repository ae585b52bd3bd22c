"""
Error Types
===========

Every fatal condition the installer can hit is a ``CortexError``. The CLI turns
these into a one-line message on stderr and exit status 1.
"""

from pathlib import Path


class CortexError(Exception):
    """Base exception for installer errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class SourceUnavailableError(CortexError):
    """Raised when the rule-file tree cannot be obtained."""

    pass


class AlreadyInstalledError(CortexError):
    """Raised when installing over an existing installation without --force."""

    def __init__(self, rules_dir: Path):
        self.rules_dir = rules_dir
        super().__init__(
            f"cortex is already installed at {rules_dir}. "
            "Use 'cortex update' to pull upstream changes, or --force to reinstall."
        )


class NotInstalledError(CortexError):
    """Raised when updating a target that has no checksum store."""

    def __init__(self, rules_dir: Path):
        self.rules_dir = rules_dir
        super().__init__(
            f"No existing installation found at {rules_dir}. Run 'cortex install' first."
        )


class DigestUnavailableError(CortexError):
    """Raised when the configured hash algorithm is not available."""

    pass


class FileWriteError(CortexError):
    """Raised when a file under the installation cannot be written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Failed to write {path}: {reason}")


class FileReadError(CortexError):
    """Raised when an installed file or the checksum store cannot be read."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Failed to read {path}: {reason}")
