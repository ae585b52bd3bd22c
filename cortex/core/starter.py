"""Starter files copied next to a global installation."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel

from cortex.source import RuleSource
from cortex.utils.file import copy_file
from cortex.utils.paths import Installation

# (file in the source's starter/ directory, name in the target root)
STARTER_FILES: tuple[tuple[str, str], ...] = (
    ("settings.json.example", "settings.json"),
    (".gitignore.example", ".gitignore"),
)


class StarterAction(str, Enum):
    CREATED = "created"
    EXISTS = "exists"
    MISSING = "missing"


STARTER_MESSAGES = {
    StarterAction.CREATED: "Created {name}",
    StarterAction.EXISTS: "{name} already exists - skipping",
    StarterAction.MISSING: "{name} not provided by the rules source - skipping",
}


class StarterOutcome(BaseModel):
    name: str
    action: StarterAction
    path: Path

    @property
    def message(self) -> str:
        return STARTER_MESSAGES[self.action].format(name=self.name)


def sync_starter_files(source: RuleSource, installation: Installation, dry_run: bool = False) -> list[StarterOutcome]:
    """Copy starter files into the target root, never replacing existing ones."""
    outcomes = []
    for source_name, target_name in STARTER_FILES:
        target = installation.target_root / target_name
        template = source.starter_file(source_name)
        if target.exists():
            action = StarterAction.EXISTS
        elif not template.is_file():
            action = StarterAction.MISSING
        else:
            action = StarterAction.CREATED
            if not dry_run:
                copy_file(template, target)
        outcomes.append(StarterOutcome(name=target_name, action=action, path=target))
    return outcomes
