"""
Language Detection
==================

Decides which rule categories apply to a project by looking for ecosystem
marker files directly under a directory.
"""

from collections import OrderedDict
from collections.abc import Iterator
from pathlib import Path
from typing import NamedTuple

from loguru import logger

GENERAL_CATEGORY = "general"
GENERAL_LABEL = "General (All Languages)"


class MarkerRule(NamedTuple):
    """A marker file and the category it implies."""

    marker: str
    label: str
    category: str


# Order matters: it is the order categories are reported in.
MARKER_RULES: tuple[MarkerRule, ...] = (
    MarkerRule("go.mod", "Go", "golang"),
    MarkerRule("go.sum", "Go", "golang"),
    MarkerRule("Gemfile", "Ruby", "ruby"),
    MarkerRule("Rakefile", "Ruby", "ruby"),
    MarkerRule(".ruby-version", "Ruby", "ruby"),
    MarkerRule("package.json", "JavaScript", "javascript"),
    MarkerRule("tsconfig.json", "TypeScript", "typescript"),
    MarkerRule("requirements.txt", "Python", "python"),
    MarkerRule("pyproject.toml", "Python", "python"),
    MarkerRule("setup.py", "Python", "python"),
    MarkerRule("Pipfile", "Python", "python"),
    MarkerRule("Cargo.toml", "Rust", "rust"),
    MarkerRule("pom.xml", "Java", "java"),
    MarkerRule("build.gradle", "Java", "java"),
)


def label_for(category: str, rules: tuple[MarkerRule, ...] = MARKER_RULES) -> str:
    """Display label for a category key, falling back to the key itself."""
    if category == GENERAL_CATEGORY:
        return GENERAL_LABEL
    for rule in rules:
        if rule.category == category:
            return rule.label
    return category


class DetectionResult:
    """Ordered, category-unique set of (label, category) pairs."""

    def __init__(self, pairs: OrderedDict[str, str] | None = None):
        self._labels: OrderedDict[str, str] = OrderedDict(pairs or {})

    def add(self, label: str, category: str) -> bool:
        """Record a category; returns False if it was already present."""
        if category in self._labels:
            return False
        self._labels[category] = label
        return True

    @property
    def categories(self) -> list[str]:
        return list(self._labels)

    @property
    def labels(self) -> list[str]:
        return list(self._labels.values())

    def label(self, category: str) -> str | None:
        return self._labels.get(category)

    def __contains__(self, category: object) -> bool:
        return category in self._labels

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter((label, category) for category, label in self._labels.items())

    def __len__(self) -> int:
        return len(self._labels)

    def __bool__(self) -> bool:
        return bool(self._labels)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DetectionResult):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"DetectionResult({list(self)!r})"


class LanguageDetector:
    """Scans a directory against the marker table."""

    def __init__(self, rules: tuple[MarkerRule, ...] = MARKER_RULES):
        self.rules = rules

    def detect(self, directory: str | Path) -> DetectionResult:
        """Return the categories whose markers exist directly under ``directory``.

        The first matching marker of a category supplies its label; later
        markers for the same category are ignored. No markers gives an empty
        result; the general category is never part of detection.
        """
        directory = Path(directory)
        result = DetectionResult()
        for rule in self.rules:
            if rule.category in result:
                continue
            if (directory / rule.marker).is_file():
                result.add(rule.label, rule.category)
                logger.debug(f"Marker {rule.marker} found in {directory}: {rule.category}")
        return result
