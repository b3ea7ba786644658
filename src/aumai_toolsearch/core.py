"""Core logic shared by the aumai-toolsearch engines."""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import ClassVar, Generic, Protocol, TypeVar

import numpy as np

from aumai_toolsearch.errors import DimensionMismatchError, NotInitializedError
from aumai_toolsearch.models import (
    SearchEngineConfig,
    SearchMethod,
    SearchResult,
    ToolDefinition,
)

__all__ = ["CosineSimilarity", "IndexSnapshot", "SearchEngine", "rank_results"]

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[_-]")
_PUNCTUATION = re.compile(r"[^\w\s]")


def _tokenize(text: str) -> list[str]:
    """Lower-case *text*, split snake/kebab case and punctuation, drop 1-char tokens."""
    text = _SEPARATORS.sub(" ", text.lower())
    text = _PUNCTUATION.sub(" ", text)
    return [token for token in text.split() if len(token) > 1]


class CosineSimilarity:
    """Cosine similarity of a query vector against an embedding matrix."""

    @staticmethod
    def against_matrix(query: list[float], matrix: np.ndarray) -> np.ndarray:
        """Return the cosine similarity of *query* with every row of *matrix*.

        Args:
            query: Query vector.
            matrix: One embedding per row, shape ``(n, len(query))``.

        Returns:
            ``n`` scores in ``[-1, 1]``.  Rows (or a query) with zero norm
            score 0.0 instead of NaN.

        Raises:
            DimensionMismatchError: When ``len(query)`` differs from the row width.
        """
        if matrix.shape[0] == 0:
            return np.zeros(0, dtype=np.float64)
        if len(query) != matrix.shape[1]:
            raise DimensionMismatchError(
                f"Query vector has {len(query)} dimensions, index has {matrix.shape[1]}",
                context={"expected": int(matrix.shape[1]), "actual": len(query)},
            )

        arr_q = np.asarray(query, dtype=np.float64)
        norm_q = float(np.linalg.norm(arr_q))
        row_norms = np.linalg.norm(matrix, axis=1)
        denominators = row_norms * norm_q

        scores = np.zeros(matrix.shape[0], dtype=np.float64)
        nonzero = denominators > 0
        scores[nonzero] = (matrix[nonzero] @ arr_q) / denominators[nonzero]
        return np.clip(scores, -1.0, 1.0)


def rank_results(
    tools: Iterable[ToolDefinition], scores: Iterable[float], top_k: int
) -> list[SearchResult]:
    """Pair tools with scores, sort by score descending and keep *top_k*.

    Python's sort is stable, so equal scores keep corpus order.
    """
    results = [
        SearchResult(name=tool.name, description=tool.description, score=float(score))
        for tool, score in zip(tools, scores)
    ]
    results.sort(key=lambda result: result.score, reverse=True)
    return results[: max(top_k, 0)]


class IndexSnapshot(Protocol):
    """Immutable per-engine index; ``tools`` keeps corpus order."""

    tools: tuple[ToolDefinition, ...]


SnapshotT = TypeVar("SnapshotT", bound=IndexSnapshot)


class SearchEngine(ABC, Generic[SnapshotT]):
    """Base class for interchangeable search backends.

    Subclasses build an immutable snapshot of their index in :meth:`_build`
    and rank against it in :meth:`_search`.  A snapshot is only published
    (a single attribute assignment) once it is complete, so a concurrent
    search sees either the old corpus or the new one, never a mix.  Writers
    to one engine are serialized with an :class:`asyncio.Lock`.
    """

    name: ClassVar[str]
    method: ClassVar[SearchMethod]

    def __init__(self) -> None:
        self._snapshot: SnapshotT | None = None
        self._write_lock = asyncio.Lock()
        self._reloading = False

    async def initialize(
        self, tools: Iterable[ToolDefinition], config: SearchEngineConfig | None = None
    ) -> None:
        """Index *tools*, replacing any corpus indexed before.

        Args:
            tools: Tool definitions in corpus order.
            config: Optional overrides; unset fields keep their current value.
        """
        async with self._write_lock:
            await self._rebuild(tuple(tools), config)

    async def reload(
        self, tools: Iterable[ToolDefinition], config: SearchEngineConfig | None = None
    ) -> None:
        """Replace the corpus with *tools*.

        The engine reports not ready until the new index is published; direct
        searches in the meantime still answer from the previous snapshot.
        """
        async with self._write_lock:
            self._reloading = True
            try:
                await self._rebuild(tuple(tools), config)
            finally:
                self._reloading = False

    async def search(self, query: str, top_k: int) -> list[SearchResult]:
        """Return up to *top_k* tools ranked by relevance to *query*.

        Raises:
            NotInitializedError: When no corpus has been indexed yet.
        """
        snapshot = self._snapshot
        if snapshot is None:
            raise NotInitializedError(
                f"{self.name} engine not initialized. Call initialize() first.",
                context={"method": self.method.value},
            )
        if top_k <= 0:
            return []
        return await self._search(snapshot, query, top_k)

    def is_ready(self) -> bool:
        return self._snapshot is not None and not self._reloading

    def get_all_tools(self) -> list[ToolDefinition]:
        snapshot = self._snapshot
        return list(snapshot.tools) if snapshot is not None else []

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    async def _rebuild(
        self, tools: tuple[ToolDefinition, ...], config: SearchEngineConfig | None
    ) -> None:
        snapshot = await self._build(tools, config)
        self._publish(snapshot)
        logger.info(f"{self.name} engine indexed {len(tools)} tool(s)")

    def _publish(self, snapshot: SnapshotT) -> None:
        """Make *snapshot* the active index."""
        self._snapshot = snapshot

    @abstractmethod
    async def _build(
        self, tools: tuple[ToolDefinition, ...], config: SearchEngineConfig | None
    ) -> SnapshotT:
        """Build a complete index for *tools* without touching the active one."""

    @abstractmethod
    async def _search(self, snapshot: SnapshotT, query: str, top_k: int) -> list[SearchResult]:
        """Rank *snapshot* against *query*."""
