"""Tests for index generation and its regeneration policy."""

import pytest

from cortex.core.detector import DetectionResult
from cortex.core.index import (
    IndexAction,
    IndexGenerator,
    decide_index_action,
    describe,
    extract_description,
    read_rule_files,
)


class TestExtractDescription:
    def test_first_heading(self):
        assert extract_description("# Code Style\n\nBody\n# Second\n", "fallback") == "Code Style"

    def test_skips_leading_frontmatter(self):
        text = "---\ntitle: meta\n# commented heading\n---\n# Real Title\n"
        assert extract_description(text, "fallback") == "Real Title"

    def test_later_delimiter_is_not_frontmatter(self):
        text = "Intro paragraph\n---\n# After Rule\n"
        assert extract_description(text, "fallback") == "After Rule"

    def test_unterminated_frontmatter_falls_back(self):
        assert extract_description("---\n# hidden\n", "notes") == "notes"

    def test_subheadings_are_not_titles(self):
        assert extract_description("## Section\n#NoSpace\n", "notes") == "notes"

    def test_empty_document(self):
        assert extract_description("", "empty") == "empty"

    def test_describe_falls_back_to_stem(self):
        assert describe("testing.md", b"no heading here\n") == "testing"


@pytest.mark.parametrize(
    "current,stored,force,expected",
    [
        (None, None, False, IndexAction.CREATED),
        (None, "abc", True, IndexAction.CREATED),
        ("abc", "abc", False, IndexAction.REGENERATED),
        ("abc", "abc", True, IndexAction.REGENERATED),
        ("edited", "abc", False, IndexAction.PRESERVED),
        ("edited", "abc", True, IndexAction.FORCED),
        ("handwritten", None, False, IndexAction.PRESERVED),
        ("handwritten", None, True, IndexAction.FORCED),
    ],
)
def test_decide_index_action(current, stored, force, expected):
    assert decide_index_action(current, stored, force) is expected


def test_preserved_is_the_only_non_writing_action():
    assert [action for action in IndexAction if not action.writes] == [IndexAction.PRESERVED]


def test_render_document():
    detection = DetectionResult()
    detection.add("Go", "golang")
    files = {
        "general": {"style.md": b"# Code Style\n", "naming.md": b"# Naming\n"},
        "golang": {"errors.md": b"---\nx: 1\n---\n# Errors\n"},
    }

    content = IndexGenerator(".claude/rules/").render(detection, files)

    assert content == (
        "# Project Coding Conventions\n"
        "\n"
        "> Auto-generated by cortex\n"
        "> Detected: Go\n"
        "\n"
        "## Rules Reference\n"
        "\n"
        "### General (All Languages)\n"
        "- @.claude/rules/general/naming.md - Naming\n"
        "- @.claude/rules/general/style.md - Code Style\n"
        "\n"
        "### Go\n"
        "- @.claude/rules/golang/errors.md - Errors\n"
        "\n"
        "## Project-Specific Notes\n"
        "\n"
        "<!-- Add project-specific conventions below -->\n"
    )


def test_render_without_detection():
    content = IndexGenerator("rules/").render(DetectionResult(), {"general": {"a.md": b"x"}})
    assert "> Detected: (none)" in content
    assert "- @rules/general/a.md - a" in content


def test_category_order_general_detected_then_extras():
    detection = DetectionResult()
    detection.add("Rust", "rust")
    detection.add("Go", "golang")
    files = {name: {"x.md": b"# X\n"} for name in ("general", "golang", "rust", "ruby", "elixir")}

    ordered = IndexGenerator("rules/").ordered_categories(detection, files, ["ruby", "elixir"])

    assert ordered == [
        ("general", "General (All Languages)"),
        ("rust", "Rust"),
        ("golang", "Go"),
        ("elixir", "elixir"),
        ("ruby", "Ruby"),
    ]


def test_categories_without_files_are_omitted():
    detection = DetectionResult()
    detection.add("Java", "java")
    content = IndexGenerator("rules/").render(detection, {"general": {"a.md": b"# A\n"}})
    assert "### Java" not in content
    assert "> Detected: Java" in content


def test_read_rule_files(tmp_path):
    (tmp_path / "general").mkdir()
    (tmp_path / "general" / "b.md").write_text("# B\n")
    (tmp_path / "general" / "a.md").write_text("# A\n")
    (tmp_path / "general" / "notes.txt").write_text("ignored")

    files = read_rule_files(tmp_path, ["general", "missing"])

    assert list(files) == ["general"]
    assert list(files["general"]) == ["a.md", "b.md"]
