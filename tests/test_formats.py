"""Tests for aumai_toolsearch.formats."""
from __future__ import annotations

import pytest

from aumai_toolsearch.formats import (
    estimate_format_tokens,
    format_tool_for_embedding,
    get_available_formats,
    get_format_description,
)
from aumai_toolsearch.models import EmbeddingFormat, ToolDefinition


# ---------------------------------------------------------------------------
# Individual strategies
# ---------------------------------------------------------------------------


class TestFormatStrategies:
    def test_minimal_is_description_only(self, issue_tool: ToolDefinition) -> None:
        text = format_tool_for_embedding(issue_tool, EmbeddingFormat.MINIMAL)
        assert text == "Create a new issue in a repository"

    def test_standard_spaces_name(self, issue_tool: ToolDefinition) -> None:
        text = format_tool_for_embedding(issue_tool, EmbeddingFormat.STANDARD)
        assert text == "create issue: Create a new issue in a repository"

    def test_rich_lists_parameter_names(self, issue_tool: ToolDefinition) -> None:
        text = format_tool_for_embedding(issue_tool, EmbeddingFormat.RICH)
        assert text == (
            "create issue - create_issue: Create a new issue in a repository. "
            "Parameters: title, body, labels"
        )

    def test_rich_without_parameters(self) -> None:
        tool = ToolDefinition(name="get_time", description="Current time")
        text = format_tool_for_embedding(tool, EmbeddingFormat.RICH)
        assert text == "get time - get_time: Current time"

    def test_verbose_includes_parameter_descriptions(self, issue_tool: ToolDefinition) -> None:
        text = format_tool_for_embedding(issue_tool, EmbeddingFormat.VERBOSE)
        assert text == (
            "create issue - create_issue: Create a new issue in a repository. "
            "Parameters: title: Issue title; body: Issue body in markdown; labels"
        )

    def test_verbose_skips_non_object_fragments(self) -> None:
        tool = ToolDefinition(
            name="open_file",
            description="Open a file",
            input_schema={
                "properties": {"strict": True, "path": {"type": "string"}, "mode": None}
            },
        )
        text = format_tool_for_embedding(tool, EmbeddingFormat.VERBOSE)
        assert text == "open file - open_file: Open a file. Parameters: path"

    def test_verbose_without_object_fragments(self) -> None:
        tool = ToolDefinition(
            name="open_file", description="Open a file", input_schema={"properties": {"x": 1}}
        )
        text = format_tool_for_embedding(tool, EmbeddingFormat.VERBOSE)
        assert text == "open file - open_file: Open a file"

    def test_structured_marks_required(self, issue_tool: ToolDefinition) -> None:
        text = format_tool_for_embedding(issue_tool, EmbeddingFormat.STRUCTURED)
        assert text.splitlines() == [
            "Tool: create_issue",
            "Description: Create a new issue in a repository",
            "Parameters:",
            "  title*: Issue title",
            "  body: Issue body in markdown",
            "  labels: ",
        ]

    def test_structured_without_parameters(self) -> None:
        tool = ToolDefinition(name="ping", description="Check liveness")
        text = format_tool_for_embedding(tool, EmbeddingFormat.STRUCTURED)
        assert text == "Tool: ping\nDescription: Check liveness"

    def test_default_is_rich(self, issue_tool: ToolDefinition) -> None:
        assert format_tool_for_embedding(issue_tool) == format_tool_for_embedding(
            issue_tool, EmbeddingFormat.RICH
        )

    def test_accepts_plain_string(self, issue_tool: ToolDefinition) -> None:
        assert format_tool_for_embedding(issue_tool, "minimal") == issue_tool.description

    def test_unknown_format_raises(self, issue_tool: ToolDefinition) -> None:
        with pytest.raises(ValueError):
            format_tool_for_embedding(issue_tool, "fancy")

    @pytest.mark.parametrize("fmt", list(EmbeddingFormat))
    def test_deterministic(self, issue_tool: ToolDefinition, fmt: EmbeddingFormat) -> None:
        assert format_tool_for_embedding(issue_tool, fmt) == format_tool_for_embedding(
            issue_tool, fmt
        )


# ---------------------------------------------------------------------------
# Format metadata
# ---------------------------------------------------------------------------


class TestFormatMetadata:
    def test_available_formats_ordered(self) -> None:
        assert get_available_formats() == [
            EmbeddingFormat.MINIMAL,
            EmbeddingFormat.STANDARD,
            EmbeddingFormat.RICH,
            EmbeddingFormat.VERBOSE,
            EmbeddingFormat.STRUCTURED,
        ]

    def test_every_format_has_description(self) -> None:
        for fmt in get_available_formats():
            assert get_format_description(fmt)

    def test_rich_described_as_default(self) -> None:
        assert "default" in get_format_description("rich")

    def test_estimate_rounds_up(self) -> None:
        tool = ToolDefinition(name="x", description="abcde")
        # "abcde" is 5 characters -> ceil(5 / 4)
        assert estimate_format_tokens(tool, EmbeddingFormat.MINIMAL) == 2

    def test_verbosity_is_monotonic(
        self, issue_tool: ToolDefinition, browser_tools: list[ToolDefinition]
    ) -> None:
        ordered = [
            EmbeddingFormat.MINIMAL,
            EmbeddingFormat.STANDARD,
            EmbeddingFormat.RICH,
            EmbeddingFormat.VERBOSE,
        ]
        for tool in [issue_tool, *browser_tools]:
            estimates = [estimate_format_tokens(tool, fmt) for fmt in ordered]
            assert estimates == sorted(estimates), tool.name
