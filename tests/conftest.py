"""Shared test fixtures for aumai-toolsearch."""
from __future__ import annotations

import asyncio
import re
import zlib

import pytest

from aumai_toolsearch.bm25 import BM25SearchEngine
from aumai_toolsearch.embedding import EmbeddingSearchEngine
from aumai_toolsearch.models import ToolDefinition
from aumai_toolsearch.regex import RegexSearchEngine


# ---------------------------------------------------------------------------
# Fake embedding provider
# ---------------------------------------------------------------------------


class FakeEmbeddingProvider:
    """Deterministic bag-of-words hashing embedder.

    Each lowercase alphanumeric token adds 1.0 to the bucket picked by its
    CRC32, so texts sharing words have a high cosine similarity.
    """

    def __init__(self, dimensions: int = 1024) -> None:
        self.dimensions = dimensions
        self.batches: list[tuple[list[str], str]] = []
        self.queries: list[tuple[str, str]] = []
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.query_delay = 0.0

    def vector(self, text: str) -> list[float]:
        vec = [0.0] * self.dimensions
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            vec[zlib.crc32(token.encode("utf-8")) % self.dimensions] += 1.0
        return vec

    async def embed(self, texts: list[str], model: str) -> list[list[float]]:
        self.batches.append((list(texts), model))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return [self.vector(text) for text in texts]

    async def embed_one(self, text: str, model: str) -> list[float]:
        self.queries.append((text, model))
        if self.query_delay:
            await asyncio.sleep(self.query_delay)
        if self.error is not None:
            raise self.error
        return self.vector(text)


# ---------------------------------------------------------------------------
# Reusable tool definitions
# ---------------------------------------------------------------------------


@pytest.fixture()
def file_tools() -> list[ToolDefinition]:
    return [
        ToolDefinition(name="read_file", description="Read a file from disk"),
        ToolDefinition(name="write_file", description="Write content to a file"),
        ToolDefinition(name="list_directory", description="List directory contents"),
    ]


@pytest.fixture()
def browser_tools() -> list[ToolDefinition]:
    return [
        ToolDefinition(
            name="browser_navigate",
            description="Navigate to a URL in the browser",
            input_schema={
                "type": "object",
                "properties": {
                    "url": {"type": "string", "description": "The URL to navigate to"}
                },
                "required": ["url"],
            },
        ),
        ToolDefinition(
            name="browser_click",
            description="Click an element on the page",
            input_schema={
                "type": "object",
                "properties": {
                    "element": {
                        "type": "string",
                        "description": "Human-readable element description",
                    },
                    "ref": {"type": "string"},
                },
                "required": ["element", "ref"],
            },
        ),
        ToolDefinition(
            name="browser_take_screenshot",
            description="Take a screenshot of the current page",
            input_schema={
                "type": "object",
                "properties": {
                    "filename": {
                        "type": "string",
                        "description": "File name to save the screenshot to",
                    },
                    "fullPage": {"type": "boolean"},
                },
            },
        ),
        ToolDefinition(
            name="search_issues",
            description="Search issues in a project tracker",
            input_schema={
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search query"},
                    "limit": {"type": "integer"},
                },
                "required": ["query"],
            },
        ),
    ]


@pytest.fixture()
def issue_tool() -> ToolDefinition:
    return ToolDefinition(
        name="create_issue",
        description="Create a new issue in a repository",
        input_schema={
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Issue title"},
                "body": {"type": "string", "description": "Issue body in markdown"},
                "labels": {"type": "array"},
            },
            "required": ["title"],
        },
    )


# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture()
def bm25_engine() -> BM25SearchEngine:
    return BM25SearchEngine()


@pytest.fixture()
def regex_engine() -> RegexSearchEngine:
    return RegexSearchEngine()


@pytest.fixture()
def embedding_engine(fake_provider: FakeEmbeddingProvider) -> EmbeddingSearchEngine:
    return EmbeddingSearchEngine(fake_provider, model="test-embed")
