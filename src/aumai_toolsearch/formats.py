"""Embedding text formats.

Each strategy turns a :class:`~aumai_toolsearch.models.ToolDefinition` into the
text that is sent to the embedding provider. Strategies are listed in order of
increasing verbosity (and token cost); ``structured`` is a labelled block that
tends to suit models trained on code.

All formatters are pure: the same tool always yields the same text.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from aumai_toolsearch.models import EmbeddingFormat, ToolDefinition

__all__ = [
    "estimate_format_tokens",
    "format_tool_for_embedding",
    "get_available_formats",
    "get_format_description",
]

_FORMAT_DESCRIPTIONS: dict[EmbeddingFormat, str] = {
    EmbeddingFormat.MINIMAL: "Just description (smallest token count)",
    EmbeddingFormat.STANDARD: "Name + description",
    EmbeddingFormat.RICH: "Name + description + parameter names (default)",
    EmbeddingFormat.VERBOSE: "Name + description + parameters with descriptions",
    EmbeddingFormat.STRUCTURED: "Labelled multi-line block with required markers",
}

# Rough characters-per-token ratio used for cost estimates.
_CHARS_PER_TOKEN = 4


def _spaced_name(tool: ToolDefinition) -> str:
    return tool.name.replace("_", " ")


def _format_minimal(tool: ToolDefinition) -> str:
    return tool.description


def _format_standard(tool: ToolDefinition) -> str:
    return f"{_spaced_name(tool)}: {tool.description}"


def _format_rich(tool: ToolDefinition) -> str:
    text = f"{_spaced_name(tool)} - {tool.name}: {tool.description}"
    if tool.parameter_names:
        text += f". Parameters: {', '.join(tool.parameter_names)}"
    return text


def _format_verbose(tool: ToolDefinition) -> str:
    params: list[str] = []
    for name, fragment in tool.input_schema.properties.items():
        # Non-object fragments (e.g. ``true``) carry no parameter info.
        if not isinstance(fragment, dict):
            continue
        description = tool.input_schema.parameter_description(name)
        params.append(f"{name}: {description}" if description else name)

    text = f"{_spaced_name(tool)} - {tool.name}: {tool.description}"
    if params:
        text += f". Parameters: {'; '.join(params)}"
    return text


def _format_structured(tool: ToolDefinition) -> str:
    required = set(tool.input_schema.required)
    lines = [f"Tool: {tool.name}", f"Description: {tool.description}"]
    if tool.parameter_names:
        lines.append("Parameters:")
        for name in tool.parameter_names:
            marker = "*" if name in required else ""
            description = tool.input_schema.parameter_description(name) or ""
            lines.append(f"  {name}{marker}: {description}")
    return "\n".join(lines)


_FORMATTERS: dict[EmbeddingFormat, Callable[[ToolDefinition], str]] = {
    EmbeddingFormat.MINIMAL: _format_minimal,
    EmbeddingFormat.STANDARD: _format_standard,
    EmbeddingFormat.RICH: _format_rich,
    EmbeddingFormat.VERBOSE: _format_verbose,
    EmbeddingFormat.STRUCTURED: _format_structured,
}


def format_tool_for_embedding(
    tool: ToolDefinition, format: EmbeddingFormat | str = EmbeddingFormat.RICH
) -> str:
    """Render *tool* as embedding input text using the *format* strategy.

    Args:
        tool: Tool definition to render.
        format: Strategy name; plain strings are accepted.

    Returns:
        The formatted text.

    Raises:
        ValueError: When *format* is not a known strategy.
    """
    return _FORMATTERS[EmbeddingFormat(format)](tool)


def get_available_formats() -> list[EmbeddingFormat]:
    """Return every format strategy, least verbose first."""
    return list(EmbeddingFormat)


def get_format_description(format: EmbeddingFormat | str) -> str:
    return _FORMAT_DESCRIPTIONS[EmbeddingFormat(format)]


def estimate_format_tokens(tool: ToolDefinition, format: EmbeddingFormat | str) -> int:
    """Estimate the token cost of *tool* rendered with *format* (~4 chars per token)."""
    return math.ceil(len(format_tool_for_embedding(tool, format)) / _CHARS_PER_TOKEN)
