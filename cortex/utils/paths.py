from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from cortex.core.checksums import CHECKSUMS_FILENAME

INDEX_FILENAME = "CLAUDE.md"
PROJECT_RULES_PREFIX = ".claude/rules/"
GLOBAL_RULES_PREFIX = "rules/"


class Installation(BaseModel):
    """Paths that make up one installation of the rule files.

    A project install keeps rules under ``<root>/.claude/rules`` with the index
    at ``<root>/CLAUDE.md``. A global install uses ``<home>/.claude`` as root,
    ``<home>/.claude/rules`` for rules and ``<home>/.claude/CLAUDE.md``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    target_root: Path
    rules_dir: Path
    index_file: Path
    rules_prefix: str = PROJECT_RULES_PREFIX
    is_global: bool = False
    scan_dir: Path = Field(default_factory=Path.cwd)

    @classmethod
    def for_project(cls, root: str | Path) -> "Installation":
        root = Path(root)
        return cls(
            target_root=root,
            rules_dir=root / ".claude" / "rules",
            index_file=root / INDEX_FILENAME,
            rules_prefix=PROJECT_RULES_PREFIX,
            is_global=False,
            scan_dir=root,
        )

    @classmethod
    def for_global(cls, home: str | Path, scan_dir: str | Path | None = None) -> "Installation":
        target = Path(home) / ".claude"
        return cls(
            target_root=target,
            rules_dir=target / "rules",
            index_file=target / INDEX_FILENAME,
            rules_prefix=GLOBAL_RULES_PREFIX,
            is_global=True,
            scan_dir=Path(scan_dir) if scan_dir is not None else Path.cwd(),
        )

    @property
    def checksums_file(self) -> Path:
        return self.rules_dir / CHECKSUMS_FILENAME

    @property
    def index_key(self) -> str:
        """Reserved checksum-store path for the generated index."""
        return self.index_file.name

    def is_installed(self) -> bool:
        return self.checksums_file.is_file()


def get_installation(global_install: bool, cwd: Path | None = None, home: Path | None = None) -> Installation:
    """Resolve the installation for the current invocation."""
    cwd = cwd or Path.cwd()
    if global_install:
        return Installation.for_global(home or Path.home(), scan_dir=cwd)
    return Installation.for_project(cwd)
