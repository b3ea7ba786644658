"""Quickstart examples for aumai-toolsearch.

Demonstrates routing queries across the BM25 and regex engines, comparing
embedding text formats, hot-reloading the corpus, and, when an Ollama server
is reachable, semantic search.

Run this file directly to verify your installation:

    python examples/quickstart.py

Only the semantic demo needs Ollama (``$OLLAMA_HOST``, default
``http://localhost:11434``); it is skipped when the server does not answer.
"""

import asyncio

from aumai_toolsearch import (
    BM25SearchEngine,
    EmbeddingSearchEngine,
    FanOutError,
    MethodNotRegisteredError,
    OllamaEmbeddingProvider,
    RegexSearchEngine,
    SearchMethod,
    SearchRequest,
    ToolDefinition,
    UnifiedSearchService,
    estimate_format_tokens,
    format_tool_for_embedding,
    get_available_formats,
)


# ---------------------------------------------------------------------------
# Shared fixture: a small but varied tool corpus
# ---------------------------------------------------------------------------


def _sample_tools() -> list[ToolDefinition]:
    """Tool definitions as an MCP server would list them."""
    raw = [
        {
            "name": "read_file",
            "description": "Read the contents of a file from the local filesystem.",
            "inputSchema": {
                "type": "object",
                "properties": {"path": {"type": "string", "description": "Absolute file path"}},
                "required": ["path"],
            },
        },
        {
            "name": "write_file",
            "description": "Write text content to a file, creating it if needed.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Absolute file path"},
                    "content": {"type": "string", "description": "Text to write"},
                },
                "required": ["path", "content"],
            },
        },
        {
            "name": "browser_navigate",
            "description": "Navigate the browser to a URL.",
            "inputSchema": {
                "type": "object",
                "properties": {"url": {"type": "string", "description": "The URL to open"}},
                "required": ["url"],
            },
        },
        {
            "name": "browser_take_screenshot",
            "description": "Take a screenshot of the current page.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "filename": {"type": "string", "description": "File to save the image to"},
                    "fullPage": {"type": "boolean"},
                },
            },
        },
        {
            "name": "send_email",
            "description": "Send an email message with optional attachments via SMTP.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "to": {"type": "string", "description": "Recipient address"},
                    "subject": {"type": "string"},
                    "body": {"type": "string"},
                },
                "required": ["to", "subject"],
            },
        },
        {
            "name": "run_sql_query",
            "description": "Run a read-only SQL query against the analytics database.",
            "inputSchema": {
                "type": "object",
                "properties": {"sql": {"type": "string", "description": "SQL statement"}},
                "required": ["sql"],
            },
        },
    ]
    return [ToolDefinition.model_validate(item) for item in raw]


async def _build_service(tools: list[ToolDefinition]) -> UnifiedSearchService:
    """Register the lexical engines and load *tools* into both."""
    service = UnifiedSearchService()
    service.register_engine(BM25SearchEngine())
    service.register_engine(RegexSearchEngine())
    service.set_default_method(SearchMethod.BM25)
    await service.initialize(tools)
    return service


def _print_response_results(results) -> None:
    for rank, result in enumerate(results, start=1):
        print(f"  Rank {rank}: [{result.score:8.4f}] {result.name}")


# ---------------------------------------------------------------------------
# Demo 1: BM25 keyword search
# ---------------------------------------------------------------------------


async def demo_bm25_search(service: UnifiedSearchService) -> None:
    """Rank tools by term relevance, including parameter descriptions."""
    print("\n--- Demo 1: BM25 Search ---")

    request = SearchRequest(query="save a screenshot of the page to a file", top_k=3)
    response = await service.search(request)

    print(f"Query : '{request.query}'  (method={response.method.value}, took={response.took:.2f}ms)")
    _print_response_results(response.results)


# ---------------------------------------------------------------------------
# Demo 2: Regex search for exact and partial tool names
# ---------------------------------------------------------------------------


async def demo_regex_search(service: UnifiedSearchService) -> None:
    """Exact names score highest; partial names still match their parts."""
    print("\n--- Demo 2: Regex Search ---")

    for query in ("send_email", "browser take screenshot", "sql"):
        results = await service.search_with(SearchMethod.REGEX, query, top_k=2)
        print(f"Query : '{query}'")
        _print_response_results(results)

    # Unregistered methods are reported, not silently rerouted.
    try:
        await service.search_with(SearchMethod.EMBEDDING, "read a file")
    except MethodNotRegisteredError as exc:
        print(f"\nEmbedding search unavailable: {exc}")


# ---------------------------------------------------------------------------
# Demo 3: Embedding format strategies
# ---------------------------------------------------------------------------


def demo_formats(tools: list[ToolDefinition]) -> None:
    """Show how each format renders a tool and what it costs in tokens."""
    print("\n--- Demo 3: Embedding Formats ---")

    tool = tools[1]
    for fmt in get_available_formats():
        total = sum(estimate_format_tokens(t, fmt) for t in tools)
        print(f"{fmt.value:<11} ~{total:>4} tokens for the corpus")
        print("  " + format_tool_for_embedding(tool, fmt).replace("\n", "\n  "))


# ---------------------------------------------------------------------------
# Demo 4: Hot reload
# ---------------------------------------------------------------------------


async def demo_reload(service: UnifiedSearchService, tools: list[ToolDefinition]) -> None:
    """Swap the corpus for every engine at once."""
    print("\n--- Demo 4: Reload ---")

    subset = [tool for tool in tools if tool.name.startswith("browser_")]
    await service.reload(subset)
    print(f"Reloaded with {service.get_tools_count()} tools: {service.get_tool_names()}")

    results = await service.search_with(SearchMethod.BM25, "read a file", top_k=5)
    _print_response_results(results)

    await service.reload(tools)
    print(f"Restored {service.get_tools_count()} tools.")


# ---------------------------------------------------------------------------
# Demo 5: Semantic search through Ollama (optional)
# ---------------------------------------------------------------------------


async def demo_semantic_search(tools: list[ToolDefinition]) -> None:
    """Rank tools by embedding similarity when Ollama is available."""
    print("\n--- Demo 5: Semantic Search (Ollama) ---")

    async with OllamaEmbeddingProvider() as provider:
        if not await provider.check_connection():
            print(f"Ollama not reachable at {provider.host}; skipping.")
            return

        service = UnifiedSearchService()
        service.register_engine(EmbeddingSearchEngine(provider))
        try:
            await service.initialize(tools)
        except FanOutError as exc:
            print(f"Could not embed tools: {exc}")
            return

        response = await service.search(SearchRequest(query="look at a web page", top_k=3))
        print(f"Model : {response.model}  (took={response.took:.2f}ms)")
        _print_response_results(response.results)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def _run() -> None:
    print("=== aumai-toolsearch Quickstart ===")

    tools = _sample_tools()
    service = await _build_service(tools)
    print(f"Indexed {service.get_tools_count()} tools with {service.get_available_methods()}.")

    await demo_bm25_search(service)
    await demo_regex_search(service)
    demo_formats(tools)
    await demo_reload(service, tools)
    await demo_semantic_search(tools)

    print("\nAll demos completed successfully.")


def main() -> None:
    """Run all aumai-toolsearch quickstart demos."""
    asyncio.run(_run())


if __name__ == "__main__":
    main()
