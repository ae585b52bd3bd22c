"""
Checksum Store
==============

Content fingerprints for every file the installer wrote. The store lives at
``<rules-dir>/.checksums`` as sorted ``<digest>  <relative_path>`` lines and is
always rewritten in full.
"""

import hashlib
from pathlib import Path

from loguru import logger

from cortex.core.errors import DigestUnavailableError, FileReadError
from cortex.utils.file import write_bytes

CHECKSUMS_FILENAME = ".checksums"
DEFAULT_ALGORITHM = "sha256"

HEADER = (
    "# cortex checksums - do not edit manually\n"
    "# Used to detect local modifications during update\n"
)


class ChecksumStore:
    """Reads, writes and computes digests for tracked files."""

    def __init__(self, path: Path, algorithm: str = DEFAULT_ALGORITHM):
        if algorithm not in hashlib.algorithms_available:
            raise DigestUnavailableError(
                f"Hash algorithm '{algorithm}' is not available. Cannot compute checksums."
            )
        self.path = Path(path)
        self.algorithm = algorithm

    def fingerprint(self, content: bytes) -> str:
        """Return the hex digest of ``content``."""
        return hashlib.new(self.algorithm, content).hexdigest()

    def fingerprint_file(self, file_path: Path) -> str:
        try:
            content = Path(file_path).read_bytes()
        except OSError as error:
            raise FileReadError(file_path, error.strerror or str(error)) from error
        return self.fingerprint(content)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> dict[str, str]:
        """Load the stored mapping of relative path to digest.

        A missing or empty store yields an empty mapping. Comment lines and
        lines that do not split into a digest and a path are ignored.
        """
        if not self.path.is_file():
            return {}

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as error:
            raise FileReadError(self.path, error.strerror or str(error)) from error

        records: dict[str, str] = {}
        for line in text.splitlines():
            if not line.strip() or line.startswith("#"):
                continue
            digest, sep, rel_path = line.partition("  ")
            if not sep or not digest or not rel_path:
                logger.debug(f"Ignoring malformed checksum line: {line!r}")
                continue
            records[rel_path] = digest
        return records

    def render(self, records: dict[str, str]) -> str:
        lines = [f"{records[rel_path]}  {rel_path}" for rel_path in sorted(records)]
        return HEADER + "".join(f"{line}\n" for line in lines)

    def save(self, records: dict[str, str]) -> None:
        """Overwrite the store with ``records``."""
        write_bytes(self.path, self.render(records).encode("utf-8"))
        logger.debug(f"Wrote {len(records)} checksum records to {self.path}")


def installed_categories(records: dict[str, str]) -> list[str]:
    """Categories present in a checksum record, derived from path prefixes."""
    categories = {rel_path.split("/", 1)[0] for rel_path in records if "/" in rel_path}
    return sorted(categories)
