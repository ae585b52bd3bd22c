"""
Main CLI entry point for cortex.
"""

# Standard library imports
import importlib.metadata
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

# Third-party imports
import typer

# Local imports
from cortex.core.checksums import ChecksumStore, installed_categories
from cortex.core.detector import GENERAL_CATEGORY, LanguageDetector
from cortex.core.errors import CortexError, NotInstalledError, SourceUnavailableError
from cortex.core.index import IndexGenerator, read_rule_files
from cortex.core.sync import RuleSyncEngine, SyncReport
from cortex.environment import get_settings
from cortex.source import open_source
from cortex.utils.file import write_text
from cortex.utils.paths import GLOBAL_RULES_PREFIX, get_installation
from cortex.utils.rich_console import configure_logging, get_console, print_error, print_panel, print_table

DIST_NAME = "cortex-rules"

app = typer.Typer(
    help="cortex - install coding-convention rules into your project and keep them in sync.\n\n"
    "Run without a command to install.",
)

DryRunOption = typer.Option(False, "--dry-run", help="Preview what would happen without writing files")
ForceOption = typer.Option(False, "--force", help="Reinstall, and overwrite locally modified files and CLAUDE.md")
GlobalOption = typer.Option(False, "--global", help="Install to ~/.claude instead of the current project")
SourceOption = typer.Option(
    None, "--source", "--repo", help="Rules source: git URL or local directory (default: $CORTEX_REPO)"
)


@contextmanager
def cli_errors() -> Iterator[None]:
    """Turn installer errors into a one-line message and exit status 1."""
    try:
        yield
    except CortexError as error:
        print_error(error.message)
        raise typer.Exit(1)


def say(message: str, indent: int = 2) -> None:
    get_console().print(" " * indent + message, markup=False, highlight=False, soft_wrap=True)


def render_report(report: SyncReport) -> None:
    """Print the per-file outcomes of a run. Dry and real runs print the same lines."""
    if report.dry_run:
        say("Dry run: no files will be written.", indent=0)

    if report.detection:
        say(f"Detected languages: {' '.join(report.detection.labels)}", indent=0)
    elif report.mode == "install":
        say("No language markers detected - installing general rules only.", indent=0)
    else:
        say("No language markers detected.", indent=0)

    for message in report.messages:
        say(message)

    if report.dry_run and report.index is not None and report.index.action.writes:
        print_panel(report.index.content, title=f"{report.index.path.name} (preview)", style="none", border_style="blue")

    say("")
    counts = f"Added: {report.added}, Updated: {report.updated}, Skipped: {report.skipped}"
    if report.dry_run:
        say(f"Dry run complete - no files were written. {counts}", indent=0)
    elif report.mode == "install":
        say(f"cortex installed successfully! {len(report.entries)} rule files copied.", indent=0)
    else:
        say(f"Update complete! {counts}", indent=0)


def run_sync(update: bool, dry_run: bool, force: bool, global_install: bool, source: str | None) -> SyncReport:
    settings = get_settings()
    installation = get_installation(global_install, cwd=Path.cwd(), home=settings.home)
    location = source or settings.repo

    if update and not installation.is_installed():
        raise NotInstalledError(installation.rules_dir)

    with open_source(location) as rule_source:
        engine = RuleSyncEngine(installation, rule_source, force=force, dry_run=dry_run)
        if update:
            report = engine.update()
        else:
            report = engine.install()
    render_report(report)
    if not report.dry_run:
        say(f"Rules are in: {installation.rules_dir}", indent=0)
    return report


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    dry_run: bool = DryRunOption,
    force: bool = ForceOption,
    global_install: bool = GlobalOption,
    update: bool = typer.Option(False, "--update", help="Same as the update command"),
    source: str | None = SourceOption,
):
    """
    cortex - coding-convention rules installer
    """
    configure_logging()
    if ctx.invoked_subcommand is None:
        with cli_errors():
            run_sync(update, dry_run, force, global_install, source)


@app.command()
def install(
    dry_run: bool = DryRunOption,
    force: bool = ForceOption,
    global_install: bool = GlobalOption,
    update: bool = typer.Option(False, "--update", help="Same as the update command"),
    source: str | None = SourceOption,
):
    """Install rules for the detected languages into the project (or ~/.claude with --global)."""
    with cli_errors():
        run_sync(update, dry_run, force, global_install, source)


@app.command()
def update(
    dry_run: bool = DryRunOption,
    force: bool = ForceOption,
    global_install: bool = GlobalOption,
    source: str | None = SourceOption,
):
    """Pull upstream rule changes, preserving files you edited locally."""
    with cli_errors():
        run_sync(True, dry_run, force, global_install, source)


@app.command()
def status(global_install: bool = GlobalOption):
    """Show tracked rule files and whether they were modified locally."""
    settings = get_settings()
    installation = get_installation(global_install, cwd=Path.cwd(), home=settings.home)
    with cli_errors():
        if not installation.is_installed():
            raise NotInstalledError(installation.rules_dir)
        store = ChecksumStore(installation.checksums_file)
        records = store.load()

        rows = []
        for rel_path in sorted(records):
            path = installation.index_file if rel_path == installation.index_key else installation.rules_dir / rel_path
            if not path.is_file():
                state = "missing"
            elif store.fingerprint_file(path) == records[rel_path]:
                state = "unmodified"
            else:
                state = "modified"
            rows.append([rel_path, state])

    print_table(["File", "State"], rows, title=f"cortex status ({installation.rules_dir})")
    categories = installed_categories(records)
    say(f"Installed categories: {', '.join(categories) if categories else '(none)'}", indent=0)


@app.command()
def setup(
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the generated CLAUDE.md instead of writing it"),
    output: Path = typer.Option(Path("CLAUDE.md"), "--output", help="Where to write the index"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing output file"),
    rules_path: Path | None = typer.Option(None, "--rules-path", help="Path to the rules directory"),
):
    """Generate a CLAUDE.md for this directory that references rules in a rules directory."""
    settings = get_settings()
    with cli_errors():
        rules_dir = rules_path or settings.home / ".claude" / "rules"
        if not rules_dir.is_dir():
            raise SourceUnavailableError(
                "could not locate the rules directory. Provide --rules-path or ensure ~/.claude/rules/ exists."
            )
        if Path.cwd().resolve() == rules_dir.resolve():
            raise CortexError(
                "setup should not be run inside the rules directory itself. Run it from your project directory instead."
            )
        if not dry_run and not force and output.exists():
            raise CortexError(f"{output} already exists. Use --force to overwrite.")

        detection = LanguageDetector().detect(Path.cwd())
        if not detection:
            say("No language marker files detected; including only general rules.", indent=0)
        for category in detection.categories:
            if not (rules_dir / category).is_dir():
                say(f"Rules directory '{category}' not found in {rules_dir} - skipping.", indent=0)

        files = read_rule_files(rules_dir, [GENERAL_CATEGORY] + detection.categories)
        content = IndexGenerator(GLOBAL_RULES_PREFIX).render(detection, files)

        if dry_run:
            get_console().print(content, markup=False, highlight=False, soft_wrap=True, end="")
            return
        write_text(output, content)
        targets = " ".join(detection.labels) if detection else "general only"
        say(f"Created {output} with rules for: {targets}", indent=0)


@app.command()
def version():
    """Show the cortex version."""
    try:
        installed = importlib.metadata.version(DIST_NAME)
    except importlib.metadata.PackageNotFoundError:
        from cortex import __version__ as installed
    typer.echo(f"cortex version: {installed}")


if __name__ == "__main__":
    app()
