"""
Index Generation
================

Builds the generated index document (``CLAUDE.md``) that references every
installed rule file, and decides whether an existing index may be replaced.
"""

from enum import Enum
from pathlib import Path, PurePosixPath

from pydantic import BaseModel

from cortex.core.detector import GENERAL_CATEGORY, DetectionResult, label_for

FRONTMATTER_DELIMITER = "---"
TITLE = "# Project Coding Conventions"
NOTES_PLACEHOLDER = "<!-- Add project-specific conventions below -->"


class _ParseState(Enum):
    OUTSIDE = "outside"
    INSIDE = "inside"


def extract_description(text: str, fallback: str) -> str:
    """Return the first top-level heading of a markdown document.

    A front-matter block is only recognised when the document starts with a
    ``---`` line; everything up to the closing ``---`` is ignored. When no
    ``# `` heading exists, ``fallback`` is returned.
    """
    lines = text.splitlines()
    state = _ParseState.OUTSIDE
    if lines and lines[0].strip() == FRONTMATTER_DELIMITER:
        state = _ParseState.INSIDE
        lines = lines[1:]

    for line in lines:
        if state is _ParseState.INSIDE:
            if line.strip() == FRONTMATTER_DELIMITER:
                state = _ParseState.OUTSIDE
            continue
        if line.startswith("# "):
            heading = line[2:].strip()
            if heading:
                return heading
    return fallback


def describe(name: str, content: bytes) -> str:
    return extract_description(content.decode("utf-8", errors="replace"), PurePosixPath(name).stem)


class IndexAction(str, Enum):
    """What happens to the index file during a sync."""

    CREATED = "created"
    REGENERATED = "regenerated"
    FORCED = "forced"
    PRESERVED = "preserved"

    @property
    def writes(self) -> bool:
        return self is not IndexAction.PRESERVED


INDEX_MESSAGES = {
    IndexAction.CREATED: "Generated {name}",
    IndexAction.REGENERATED: "Regenerated {name}",
    IndexAction.FORCED: "Regenerated {name} (--force)",
    IndexAction.PRESERVED: "{name} has local changes - skipping regeneration (use --force to overwrite)",
}


class IndexOutcome(BaseModel):
    action: IndexAction
    path: Path
    content: str
    message: str


def decide_index_action(current_digest: str | None, stored_digest: str | None, force: bool) -> IndexAction:
    """Regeneration policy for the index.

    ``current_digest`` is None when no index exists. An existing index is only
    replaced when it still matches the digest recorded at the last sync, or
    when forced.
    """
    if current_digest is None:
        return IndexAction.CREATED
    if stored_digest is not None and current_digest == stored_digest:
        return IndexAction.REGENERATED
    if force:
        return IndexAction.FORCED
    return IndexAction.PRESERVED


class IndexGenerator:
    """Renders the index document for a set of installed rule files."""

    def __init__(self, rules_prefix: str, generator_name: str = "cortex"):
        self.rules_prefix = rules_prefix
        self.generator_name = generator_name

    def ordered_categories(
        self, detection: DetectionResult, files: dict[str, dict[str, bytes]], extra_categories: list[str] | None = None
    ) -> list[tuple[str, str]]:
        """(category, heading) pairs: general, detected in detector order, then extras sorted."""
        ordered: list[tuple[str, str]] = [(GENERAL_CATEGORY, label_for(GENERAL_CATEGORY))]
        for label, category in detection:
            ordered.append((category, label))
        seen = {category for category, _ in ordered}
        for category in sorted(extra_categories or []):
            if category not in seen:
                ordered.append((category, label_for(category)))
                seen.add(category)
        return [(category, heading) for category, heading in ordered if files.get(category)]

    def render(
        self,
        detection: DetectionResult,
        files: dict[str, dict[str, bytes]],
        extra_categories: list[str] | None = None,
    ) -> str:
        """Render the index.

        Args:
            detection: Detected categories, in detector order
            files: Installed files as ``{category: {file name: content}}``
            extra_categories: Installed categories that were not detected

        Returns:
            str: The document text, newline terminated
        """
        detected = " ".join(detection.labels) if detection else "(none)"
        lines = [
            TITLE,
            "",
            f"> Auto-generated by {self.generator_name}",
            f"> Detected: {detected}",
            "",
            "## Rules Reference",
        ]

        for category, heading in self.ordered_categories(detection, files, extra_categories):
            lines.append("")
            lines.append(f"### {heading}")
            for name in sorted(files[category]):
                description = describe(name, files[category][name])
                lines.append(f"- @{self.rules_prefix}{category}/{name} - {description}")

        lines.extend(["", "## Project-Specific Notes", "", NOTES_PLACEHOLDER])
        return "\n".join(lines) + "\n"


def read_rule_files(rules_dir: Path, categories: list[str]) -> dict[str, dict[str, bytes]]:
    """Read ``<rules_dir>/<category>/*.md`` for each category that exists."""
    files: dict[str, dict[str, bytes]] = {}
    for category in categories:
        category_dir = rules_dir / category
        if not category_dir.is_dir():
            continue
        files[category] = {
            path.name: path.read_bytes() for path in sorted(category_dir.glob("*.md")) if path.is_file()
        }
    return files
