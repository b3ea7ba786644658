"""CLI entry point for aumai-toolsearch."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import click
from pydantic import TypeAdapter, ValidationError

from aumai_toolsearch import __version__
from aumai_toolsearch.bm25 import BM25SearchEngine
from aumai_toolsearch.core import SearchEngine
from aumai_toolsearch.embedding import EmbeddingSearchEngine
from aumai_toolsearch.errors import ToolSearchError
from aumai_toolsearch.formats import (
    estimate_format_tokens,
    get_available_formats,
    get_format_description,
)
from aumai_toolsearch.models import (
    DEFAULT_TOP_K,
    EmbeddingFormat,
    SearchMethod,
    SearchRequest,
    SearchResponse,
    ToolDefinition,
)
from aumai_toolsearch.providers import OllamaEmbeddingProvider
from aumai_toolsearch.regex import RegexSearchEngine
from aumai_toolsearch.service import UnifiedSearchService

_TOOL_LIST = TypeAdapter(list[ToolDefinition])


def _load_tools(path: Path) -> list[ToolDefinition]:
    """Load tool definitions from a JSON list or an MCP ``tools/list`` result."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{path} is not valid JSON: {exc}") from exc

    if isinstance(raw, dict):
        raw = raw.get("tools", [])
    try:
        return _TOOL_LIST.validate_python(raw)
    except ValidationError as exc:
        raise click.ClickException(f"Invalid tool definitions in {path}:\n{exc}") from exc


async def _run_search(
    tools: list[ToolDefinition],
    request: SearchRequest,
    model: str | None,
    fmt: str | None,
    host: str | None,
) -> SearchResponse:
    service = UnifiedSearchService()
    engine: SearchEngine
    if request.method is SearchMethod.EMBEDDING:
        async with OllamaEmbeddingProvider(host=host) as provider:
            engine = EmbeddingSearchEngine(provider, model=model, format=fmt)
            service.register_engine(engine)
            await service.initialize_engine(engine.method, tools)
            return await service.search(request)

    engine = BM25SearchEngine() if request.method is SearchMethod.BM25 else RegexSearchEngine()
    service.register_engine(engine)
    await service.initialize_engine(engine.method, tools)
    return await service.search(request)


@click.group()
@click.version_option(version=__version__, prog_name="aumai-toolsearch")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """AumAI Toolsearch: rank tool definitions against natural-language queries."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command("search")
@click.option(
    "--tools",
    "tools_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with tool definitions.",
)
@click.option("--query", required=True, help="Natural-language search query.")
@click.option(
    "--top-k",
    default=DEFAULT_TOP_K,
    show_default=True,
    type=click.IntRange(min=1),
    help="Maximum number of results to return.",
)
@click.option(
    "--method",
    default=SearchMethod.BM25.value,
    show_default=True,
    type=click.Choice([m.value for m in SearchMethod]),
)
@click.option(
    "--format",
    "fmt",
    default=None,
    type=click.Choice([f.value for f in EmbeddingFormat]),
    help="Embedding format (embedding method only).",
)
@click.option("--model", default=None, help="Embedding model (embedding method only).")
@click.option("--host", default=None, help="Ollama server URL (embedding method only).")
@click.option(
    "--timeout",
    default=None,
    type=click.FloatRange(min=0, min_open=True),
    help="Search deadline in seconds.",
)
@click.option(
    "--output-format",
    default="text",
    type=click.Choice(["text", "json"]),
    show_default=True,
)
def search_cmd(
    tools_file: Path,
    query: str,
    top_k: int,
    method: str,
    fmt: str | None,
    model: str | None,
    host: str | None,
    timeout: float | None,
    output_format: str,
) -> None:
    """Rank the tools in TOOLS against a natural-language query."""
    tools = _load_tools(tools_file)
    request = SearchRequest(
        query=query, top_k=top_k, method=SearchMethod(method), timeout=timeout
    )

    try:
        response = asyncio.run(_run_search(tools, request, model, fmt, host))
    except ToolSearchError as exc:
        raise click.ClickException(f"[{exc.code}] {exc}") from exc

    if output_format == "json":
        click.echo(json.dumps(response.model_dump(mode="json"), indent=2))
        return

    if not response.results:
        click.echo("No matching tools found.")
        return

    click.echo(f"method={response.method.value} took={response.took:.1f}ms")
    for rank, result in enumerate(response.results, start=1):
        click.echo(
            f"  [{rank}] {result.name} (score={result.score:.4f})\n"
            f"      {result.description}"
        )


@main.command("formats")
@click.option(
    "--tools",
    "tools_file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file with tool definitions.",
)
@click.option("--name", "tool_name", default=None, help="Only report this tool.")
def formats_cmd(tools_file: Path, tool_name: str | None) -> None:
    """Show the estimated token cost of each embedding format."""
    tools = _load_tools(tools_file)
    if tool_name is not None:
        tools = [tool for tool in tools if tool.name == tool_name]
        if not tools:
            raise click.ClickException(f"Tool {tool_name!r} not found in {tools_file}")

    for fmt in get_available_formats():
        total = sum(estimate_format_tokens(tool, fmt) for tool in tools)
        click.echo(f"  {fmt.value:<11} ~{total:>6} tokens  {get_format_description(fmt)}")


if __name__ == "__main__":
    main()
