"""Rule source management: where the rule-file tree comes from."""

import shutil
import subprocess
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict

from cortex.core.errors import SourceUnavailableError

STARTER_DIR = "starter"


class RuleFile(BaseModel):
    """One rule document in the source tree."""

    model_config = ConfigDict(frozen=True)

    category: str
    name: str
    content: bytes

    @property
    def rel_path(self) -> str:
        return f"{self.category}/{self.name}"


class RuleSource:
    """A rule-file tree laid out as ``<root>/<category>/*.md``."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        if not self.root.is_dir():
            raise SourceUnavailableError(f"Rules source {self.root} is not a directory.")

    def has_category(self, category: str) -> bool:
        return (self.root / category).is_dir()

    def rule_files(self, category: str) -> list[RuleFile]:
        """Rule files of ``category`` in name order; empty if the category is absent."""
        category_dir = self.root / category
        if not category_dir.is_dir():
            return []
        return [
            RuleFile(category=category, name=path.name, content=path.read_bytes())
            for path in sorted(category_dir.glob("*.md"))
            if path.is_file()
        ]

    def starter_file(self, name: str) -> Path:
        return self.root / STARTER_DIR / name


def is_local_source(location: str) -> bool:
    return Path(location).expanduser().is_dir()


def is_remote_location(location: str) -> bool:
    return "://" in location or location.startswith("git@") or location.endswith(".git")


def clone_repository(url: str, destination: Path) -> Path:
    """Shallow-clone ``url`` into ``destination``."""
    logger.debug(f"Running git clone --depth 1 {url} {destination}")
    try:
        subprocess.run(
            ["git", "clone", "--quiet", "--depth", "1", url, str(destination)],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            check=True,
        )
    except FileNotFoundError as error:
        raise SourceUnavailableError("git is not installed; cannot fetch rules.") from error
    except subprocess.CalledProcessError as error:
        logger.debug(f"git clone stderr: {error.stderr.strip() if error.stderr else ''}")
        raise SourceUnavailableError(
            f"Failed to clone {url}. Check your network connection and repo URL."
        ) from error
    return destination


@contextmanager
def open_source(location: str) -> Iterator[RuleSource]:
    """Yield a ``RuleSource`` for ``location``.

    A local directory is used in place. Anything else is treated as a git URL
    and cloned into a temporary directory that is removed when the block
    exits, whether it completes or raises.
    """
    if not location:
        raise SourceUnavailableError("No rules source given.")
    if is_local_source(location):
        yield RuleSource(Path(location).expanduser())
        return

    if not is_remote_location(location):
        raise SourceUnavailableError(f"Rules source {location} does not exist.")

    tmp_dir = Path(tempfile.mkdtemp(prefix="cortex-"))
    try:
        clone_dir = clone_repository(location, tmp_dir / "rules")
        yield RuleSource(clone_dir)
    finally:
        shutil.rmtree(tmp_dir, ignore_errors=True)
        logger.debug(f"Removed temporary clone {tmp_dir}")
