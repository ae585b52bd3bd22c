"""Tests for the setup command."""

import pytest
from typer.testing import CliRunner

from cortex.cli.main import app


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def in_project(project, monkeypatch):
    monkeypatch.chdir(project)
    return project


def test_setup_writes_index(runner, in_project, source_dir):
    result = runner.invoke(app, ["setup", "--rules-path", str(source_dir)])

    assert result.exit_code == 0, result.output
    assert "Created CLAUDE.md with rules for: Go Python" in result.output
    content = (in_project / "CLAUDE.md").read_text()
    assert "- @rules/golang/errors.md - Error Handling in Go" in content
    assert "- @rules/python/testing.md - testing" in content
    assert "### Rust" not in content


def test_setup_defaults_to_home_rules(runner, in_project, source_dir, home):
    (home / ".claude").mkdir()
    source_dir.rename(home / ".claude" / "rules")

    result = runner.invoke(app, ["setup"])

    assert result.exit_code == 0, result.output
    assert (in_project / "CLAUDE.md").is_file()


def test_setup_dry_run_prints_without_writing(runner, in_project, source_dir):
    result = runner.invoke(app, ["setup", "--dry-run", "--rules-path", str(source_dir)])

    assert result.exit_code == 0, result.output
    assert "# Project Coding Conventions" in result.output
    assert not (in_project / "CLAUDE.md").exists()


def test_setup_refuses_existing_output(runner, in_project, source_dir):
    (in_project / "CLAUDE.md").write_text("mine\n")

    result = runner.invoke(app, ["setup", "--rules-path", str(source_dir)])

    assert result.exit_code == 1
    assert "already exists" in result.output
    assert (in_project / "CLAUDE.md").read_text() == "mine\n"


def test_setup_force_overwrites(runner, in_project, source_dir):
    (in_project / "CLAUDE.md").write_text("mine\n")

    result = runner.invoke(app, ["setup", "--force", "--rules-path", str(source_dir)])

    assert result.exit_code == 0, result.output
    assert (in_project / "CLAUDE.md").read_text().startswith("# Project Coding Conventions\n")


def test_setup_custom_output(runner, in_project, source_dir):
    result = runner.invoke(app, ["setup", "--output", "docs.md", "--rules-path", str(source_dir)])

    assert result.exit_code == 0, result.output
    assert (in_project / "docs.md").is_file()


def test_setup_missing_rules_directory(runner, in_project, tmp_path):
    result = runner.invoke(app, ["setup", "--rules-path", str(tmp_path / "nowhere")])

    assert result.exit_code == 1
    assert "could not locate the rules directory" in result.output


def test_setup_inside_rules_directory(runner, source_dir, monkeypatch):
    monkeypatch.chdir(source_dir)

    result = runner.invoke(app, ["setup", "--rules-path", str(source_dir)])

    assert result.exit_code == 1
    assert "should not be run inside the rules directory" in result.output


def test_setup_reports_missing_language_rules(runner, in_project, source_dir):
    (in_project / "Cargo.toml").write_text("[package]\n")
    (in_project / "pom.xml").write_text("<project/>\n")

    result = runner.invoke(app, ["setup", "--rules-path", str(source_dir)])

    assert result.exit_code == 0, result.output
    assert f"Rules directory 'java' not found in {source_dir} - skipping." in result.output
    assert "### Rust" in (in_project / "CLAUDE.md").read_text()


def test_setup_without_markers(runner, tmp_path, source_dir, monkeypatch):
    empty = tmp_path / "empty"
    empty.mkdir()
    monkeypatch.chdir(empty)

    result = runner.invoke(app, ["setup", "--rules-path", str(source_dir)])

    assert result.exit_code == 0, result.output
    assert "including only general rules" in result.output
    assert "Created CLAUDE.md with rules for: general only" in result.output
