"""
Rule Synchronization
====================

Installs rule files into a target and keeps them in sync with the source
without clobbering local edits.

Every run is split in two phases. Planning classifies each source file against
the target and the checksum store and never touches the filesystem. Applying
performs the writes the plan calls for, regenerates the index and rewrites the
checksum store. A dry run stops after planning, so it reports exactly what a
real run would do.

A file is only replaced silently when its content on disk still matches the
digest the engine recorded when it last wrote it.
"""

from enum import Enum
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from cortex.core.checksums import ChecksumStore, installed_categories
from cortex.core.detector import GENERAL_CATEGORY, DetectionResult, LanguageDetector
from cortex.core.errors import AlreadyInstalledError, NotInstalledError
from cortex.core.index import INDEX_MESSAGES, IndexGenerator, IndexOutcome, decide_index_action, read_rule_files
from cortex.core.starter import StarterOutcome, sync_starter_files
from cortex.source import RuleFile, RuleSource
from cortex.utils.file import write_bytes, write_text
from cortex.utils.paths import Installation


class FileAction(str, Enum):
    """Outcome of reconciling one rule file."""

    COPIED = "copied"
    ADDED = "added"
    UPDATED = "updated"
    OVERWRITTEN = "overwritten"
    UNCHANGED = "unchanged"
    SKIPPED_MODIFIED = "skipped_modified"
    SKIPPED_UNTRACKED = "skipped_untracked"

    @property
    def writes(self) -> bool:
        return self in (FileAction.COPIED, FileAction.ADDED, FileAction.UPDATED, FileAction.OVERWRITTEN)

    @property
    def skipped(self) -> bool:
        return self in (FileAction.SKIPPED_MODIFIED, FileAction.SKIPPED_UNTRACKED)


ACTION_MESSAGES = {
    FileAction.COPIED: "Copied {path}",
    FileAction.ADDED: "Added: {path}",
    FileAction.UPDATED: "Updated: {path}",
    FileAction.OVERWRITTEN: "Overwritten (--force): {path}",
    FileAction.UNCHANGED: "Unchanged: {path}",
    FileAction.SKIPPED_MODIFIED: "Skipped (locally modified): {path}",
    FileAction.SKIPPED_UNTRACKED: "Skipped (no checksum record): {path}",
}


def classify(
    current_digest: str | None, source_digest: str, stored_digest: str | None, force: bool
) -> FileAction:
    """Decide what an update does with one file.

    Args:
        current_digest: Digest of the destination file, None if it doesn't exist
        source_digest: Digest of the incoming source content
        stored_digest: Digest recorded at the last sync, None if untracked
        force: Overwrite locally modified and untracked files

    Returns:
        FileAction: The reconciliation outcome
    """
    if current_digest is None:
        return FileAction.ADDED
    if current_digest == source_digest:
        return FileAction.UNCHANGED
    if stored_digest is None:
        return FileAction.OVERWRITTEN if force else FileAction.SKIPPED_UNTRACKED
    if current_digest == stored_digest:
        return FileAction.UPDATED
    return FileAction.OVERWRITTEN if force else FileAction.SKIPPED_MODIFIED


class SyncEntry(BaseModel):
    """A planned (or performed) action for one rule file."""

    model_config = ConfigDict(frozen=True)

    rel_path: str
    action: FileAction
    content: bytes = Field(repr=False, exclude=True)

    @property
    def message(self) -> str:
        return ACTION_MESSAGES[self.action].format(path=self.rel_path)


class SyncReport(BaseModel):
    """Everything a run did, or would do in dry-run mode."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    mode: str
    dry_run: bool
    detection: DetectionResult
    categories: list[str]
    entries: list[SyncEntry] = Field(default_factory=list)
    index: IndexOutcome | None = None
    starter: list[StarterOutcome] = Field(default_factory=list)

    def count(self, *actions: FileAction) -> int:
        return sum(1 for entry in self.entries if entry.action in actions)

    @property
    def added(self) -> int:
        return self.count(FileAction.ADDED, FileAction.COPIED)

    @property
    def updated(self) -> int:
        return self.count(FileAction.UPDATED, FileAction.OVERWRITTEN)

    @property
    def skipped(self) -> int:
        return self.count(FileAction.SKIPPED_MODIFIED, FileAction.SKIPPED_UNTRACKED)

    @property
    def unchanged(self) -> int:
        return self.count(FileAction.UNCHANGED)

    @property
    def counts(self) -> dict[str, int]:
        return {"added": self.added, "updated": self.updated, "skipped": self.skipped}

    @property
    def messages(self) -> list[str]:
        lines = [entry.message for entry in self.entries]
        lines.extend(outcome.message for outcome in self.starter)
        if self.index is not None:
            lines.append(self.index.message)
        return lines


class RuleSyncEngine:
    """Installs and updates rule files for one installation."""

    def __init__(
        self,
        installation: Installation,
        source: RuleSource,
        detector: LanguageDetector | None = None,
        store: ChecksumStore | None = None,
        force: bool = False,
        dry_run: bool = False,
    ):
        self.installation = installation
        self.source = source
        self.detector = detector or LanguageDetector()
        self.store = store or ChecksumStore(installation.checksums_file)
        self.force = force
        self.dry_run = dry_run
        self.index_generator = IndexGenerator(installation.rules_prefix)

    def detect(self) -> DetectionResult:
        return self.detector.detect(self.installation.scan_dir)

    def _categories(self, detection: DetectionResult, records: dict[str, str]) -> list[str]:
        """General, then detected, then anything already installed. Never shrinks."""
        categories = [GENERAL_CATEGORY] + detection.categories
        for category in installed_categories(records):
            if category not in categories:
                categories.append(category)
        return categories

    def _current_digest(self, path: Path) -> str | None:
        if not path.is_file():
            return None
        return self.store.fingerprint_file(path)

    # Planning

    def plan_install(self, categories: list[str]) -> list[SyncEntry]:
        """Every source file of ``categories`` is copied unconditionally."""
        return [
            SyncEntry(rel_path=rule.rel_path, action=FileAction.COPIED, content=rule.content)
            for category in categories
            for rule in self.source.rule_files(category)
        ]

    def plan_update(self, categories: list[str], records: dict[str, str]) -> list[SyncEntry]:
        """Classify every source file of ``categories`` against the target."""
        entries: list[SyncEntry] = []
        for category in categories:
            for rule in self.source.rule_files(category):
                entries.append(self._plan_file(rule, records))
        return entries

    def _plan_file(self, rule: RuleFile, records: dict[str, str]) -> SyncEntry:
        destination = self.installation.rules_dir / rule.rel_path
        action = classify(
            current_digest=self._current_digest(destination),
            source_digest=self.store.fingerprint(rule.content),
            stored_digest=records.get(rule.rel_path),
            force=self.force,
        )
        logger.debug(f"{rule.rel_path}: {action.value}")
        return SyncEntry(rel_path=rule.rel_path, action=action, content=rule.content)

    def plan_index(
        self,
        detection: DetectionResult,
        categories: list[str],
        entries: list[SyncEntry],
        records: dict[str, str],
    ) -> IndexOutcome:
        """Render the index over the file set as it will be after ``entries`` apply."""
        files = read_rule_files(self.installation.rules_dir, categories)
        for entry in entries:
            if entry.action.writes:
                category, name = entry.rel_path.split("/", 1)
                files.setdefault(category, {})[name] = entry.content

        extras = [category for category in categories if category != GENERAL_CATEGORY and category not in detection]
        content = self.index_generator.render(detection, files, extras)

        index_file = self.installation.index_file
        action = decide_index_action(
            current_digest=self._current_digest(index_file),
            stored_digest=records.get(self.installation.index_key),
            force=self.force,
        )
        return IndexOutcome(
            action=action,
            path=index_file,
            content=content,
            message=INDEX_MESSAGES[action].format(name=index_file.name),
        )

    # Applying

    def _apply(self, entries: list[SyncEntry], index: IndexOutcome) -> None:
        for entry in entries:
            if entry.action.writes:
                write_bytes(self.installation.rules_dir / entry.rel_path, entry.content)
        if index.action.writes:
            write_text(index.path, index.content)

    def _record_index(self, records: dict[str, str], index: IndexOutcome, previous: dict[str, str]) -> None:
        key = self.installation.index_key
        records.pop(key, None)
        if index.action.writes:
            records[key] = self.store.fingerprint(index.content.encode("utf-8"))
        elif key in previous:
            records[key] = previous[key]

    # Operations

    def install(self) -> SyncReport:
        """Fresh install (or reinstall with force) of general plus detected categories.

        Raises:
            AlreadyInstalledError: If a checksum store exists and force is not set
        """
        if self.installation.is_installed() and not self.force:
            raise AlreadyInstalledError(self.installation.rules_dir)

        previous = self.store.load()
        detection = self.detect()
        categories = self._categories(detection, previous)
        entries = self.plan_install(categories)
        index = self.plan_index(detection, categories, entries, previous)
        starter = sync_starter_files(self.source, self.installation, dry_run=True) if self.installation.is_global else []

        if not self.dry_run:
            self._apply(entries, index)
            if self.installation.is_global:
                starter = sync_starter_files(self.source, self.installation, dry_run=False)
            self.store.save(self._rebuild_records(entries, index, previous))
            logger.debug(f"Installed {len(entries)} rule files into {self.installation.rules_dir}")

        return SyncReport(
            mode="install",
            dry_run=self.dry_run,
            detection=detection,
            categories=categories,
            entries=entries,
            index=index,
            starter=starter,
        )

    def update(self) -> SyncReport:
        """Reconcile general, detected and already-installed categories.

        Raises:
            NotInstalledError: If there is no checksum store
        """
        if not self.installation.is_installed():
            raise NotInstalledError(self.installation.rules_dir)

        previous = self.store.load()
        detection = self.detect()
        categories = self._categories(detection, previous)
        entries = self.plan_update(categories, previous)
        index = self.plan_index(detection, categories, entries, previous)

        if not self.dry_run:
            self._apply(entries, index)
            self.store.save(self._rebuild_records(entries, index, previous))

        return SyncReport(
            mode="update",
            dry_run=self.dry_run,
            detection=detection,
            categories=categories,
            entries=entries,
            index=index,
        )

    def _rebuild_records(
        self, entries: list[SyncEntry], index: IndexOutcome, previous: dict[str, str]
    ) -> dict[str, str]:
        """Checksum records after an install or update.

        Files whose content now matches the source are recorded with their new
        digest. Locally modified files keep their previous digest so they stay
        protected; untracked files stay untracked.
        """
        rules_dir = self.installation.rules_dir
        records = {
            rel_path: digest
            for rel_path, digest in previous.items()
            if rel_path != self.installation.index_key and (rules_dir / rel_path).is_file()
        }
        for entry in entries:
            if entry.action.skipped:
                continue
            records[entry.rel_path] = self.store.fingerprint(entry.content)
        self._record_index(records, index, previous)
        return records
