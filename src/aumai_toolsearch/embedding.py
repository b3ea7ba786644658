"""Embedding (semantic) search engine.

Tools are rendered with an embedding format strategy, embedded in one batch
through an :class:`~aumai_toolsearch.providers.EmbeddingProvider`, and ranked by
cosine similarity to the embedded query.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TypeVar

import numpy as np

from aumai_toolsearch.core import CosineSimilarity, SearchEngine, rank_results
from aumai_toolsearch.errors import (
    DimensionMismatchError,
    ProviderUnavailableError,
    ToolSearchError,
)
from aumai_toolsearch.formats import format_tool_for_embedding
from aumai_toolsearch.models import (
    EmbeddingFormat,
    SearchEngineConfig,
    SearchMethod,
    SearchResult,
    ToolDefinition,
)
from aumai_toolsearch.providers import EmbeddingProvider, default_embedding_model

__all__ = ["EmbeddingSearchEngine", "create_embedding_engine"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, eq=False)
class _EmbeddingSnapshot:
    tools: tuple[ToolDefinition, ...]
    formatted_texts: tuple[str, ...]
    embeddings: np.ndarray  # shape (len(tools), dimensions)
    model: str
    format: EmbeddingFormat

    @property
    def dimensions(self) -> int:
        return int(self.embeddings.shape[1])


class EmbeddingSearchEngine(SearchEngine[_EmbeddingSnapshot]):
    """Semantic search over tool embeddings.

    Args:
        provider: Embedding provider used for both tools and queries.
        model: Embedding model; defaults to ``$OLLAMA_MODEL`` or
            ``nomic-embed-text-v2-moe``.
        format: Text format strategy for tools (default ``rich``).
    """

    name = "Embedding"
    method = SearchMethod.EMBEDDING

    def __init__(
        self,
        provider: EmbeddingProvider,
        model: str | None = None,
        format: EmbeddingFormat | str | None = None,
    ) -> None:
        super().__init__()
        self._provider = provider
        self._model = model or default_embedding_model()
        self._format = EmbeddingFormat(format) if format else EmbeddingFormat.RICH
        self._similarity = CosineSimilarity()

    @property
    def model(self) -> str:
        return self._model

    @property
    def format(self) -> EmbeddingFormat:
        return self._format

    def get_tool_formatted_text(self, tool_name: str) -> str | None:
        """Return the text that was embedded for *tool_name*, if it is indexed."""
        snapshot = self._snapshot
        if snapshot is None:
            return None
        for tool, text in zip(snapshot.tools, snapshot.formatted_texts):
            if tool.name == tool_name:
                return text
        return None

    async def _build(
        self, tools: tuple[ToolDefinition, ...], config: SearchEngineConfig | None
    ) -> _EmbeddingSnapshot:
        model = self._model
        fmt = self._format
        if config is not None:
            model = config.model or model
            fmt = config.format or fmt

        texts = [format_tool_for_embedding(tool, fmt) for tool in tools]
        if not texts:
            logger.warning("Building embedding index with empty tool list")
            return _EmbeddingSnapshot(
                tools=tools,
                formatted_texts=(),
                embeddings=np.zeros((0, 0), dtype=np.float64),
                model=model,
                format=fmt,
            )

        logger.info(f"Generating embeddings for {len(tools)} tools using {model} ({fmt.value})")
        vectors = await self._call_provider(self._provider.embed(texts, model), model)
        if len(vectors) != len(texts):
            raise ProviderUnavailableError(
                f"Provider returned {len(vectors)} embeddings for {len(texts)} tools",
                context={"model": model},
            )
        dimensions = {len(vector) for vector in vectors}
        if len(dimensions) != 1:
            raise DimensionMismatchError(
                f"Provider returned embeddings of mixed dimensions: {sorted(dimensions)}",
                context={"model": model},
            )

        return _EmbeddingSnapshot(
            tools=tools,
            formatted_texts=tuple(texts),
            embeddings=np.asarray(vectors, dtype=np.float64),
            model=model,
            format=fmt,
        )

    def _publish(self, snapshot: _EmbeddingSnapshot) -> None:
        super()._publish(snapshot)
        self._model = snapshot.model
        self._format = snapshot.format

    async def _search(
        self, snapshot: _EmbeddingSnapshot, query: str, top_k: int
    ) -> list[SearchResult]:
        if not snapshot.tools:
            return []

        query_vector = await self._call_provider(
            self._provider.embed_one(query, snapshot.model), snapshot.model
        )
        if len(query_vector) != snapshot.dimensions:
            raise DimensionMismatchError(
                f"Query embedding has {len(query_vector)} dimensions but the index "
                f"was built with {snapshot.dimensions} ({snapshot.model})",
                context={
                    "expected": snapshot.dimensions,
                    "actual": len(query_vector),
                    "model": snapshot.model,
                },
            )

        scores = self._similarity.against_matrix(query_vector, snapshot.embeddings)
        return rank_results(snapshot.tools, scores.tolist(), top_k)

    @staticmethod
    async def _call_provider(call: Awaitable[T], model: str) -> T:
        """Await a provider call, reporting foreign failures as ProviderUnavailableError."""
        try:
            return await call
        except ToolSearchError:
            raise
        except Exception as exc:
            raise ProviderUnavailableError(
                f"Embedding provider failed: {type(exc).__name__}: {exc}",
                context={"model": model},
            ) from exc


def create_embedding_engine(
    provider: EmbeddingProvider,
    model: str | None = None,
    format: EmbeddingFormat | str | None = None,
) -> EmbeddingSearchEngine:
    """Create a new Embedding search engine instance."""
    return EmbeddingSearchEngine(provider, model=model, format=format)
