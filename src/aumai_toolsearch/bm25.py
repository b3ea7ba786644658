"""BM25 lexical search engine.

Ranks tools with the Okapi BM25 bag-of-words function over their name,
description and parameter text.

    score(D, Q) = sum(IDF(q) * tf(q, D) * (k1 + 1) /
                      (tf(q, D) + k1 * (1 - b + b * |D| / avgdl)))

    IDF(q) = ln((N - df(q) + 0.5) / (df(q) + 0.5) + 1)

Reference: https://en.wikipedia.org/wiki/Okapi_BM25
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass

from aumai_toolsearch.core import SearchEngine, _tokenize, rank_results
from aumai_toolsearch.models import (
    SearchEngineConfig,
    SearchMethod,
    SearchResult,
    ToolDefinition,
)

__all__ = ["BM25Params", "BM25SearchEngine", "bm25_term_score", "create_bm25_engine"]

logger = logging.getLogger(__name__)

DEFAULT_K1 = 1.5
DEFAULT_B = 0.75


@dataclass(frozen=True)
class BM25Params:
    """BM25 parameters.

    - k1: term frequency saturation
    - b: document length normalization
    """

    k1: float = DEFAULT_K1
    b: float = DEFAULT_B

    def merged(self, config: SearchEngineConfig | None) -> BM25Params:
        """Return a copy with the fields set in ``config.bm25`` applied."""
        if config is None or config.bm25 is None:
            return self
        return BM25Params(
            k1=self.k1 if config.bm25.k1 is None else config.bm25.k1,
            b=self.b if config.bm25.b is None else config.bm25.b,
        )


@dataclass(frozen=True)
class _Document:
    tokens: tuple[str, ...]
    term_frequencies: dict[str, int]
    length: int


@dataclass(frozen=True)
class _BM25Snapshot:
    tools: tuple[ToolDefinition, ...]
    documents: tuple[_Document, ...]
    idf: dict[str, float]
    avg_doc_length: float
    params: BM25Params


def bm25_term_score(
    tf: int, idf: float, doc_length: int, avg_doc_length: float, k1: float, b: float
) -> float:
    """Contribution of a single query term to a document's BM25 score."""
    if tf == 0 or avg_doc_length == 0:
        return 0.0
    numerator = tf * (k1 + 1)
    denominator = tf + k1 * (1 - b + b * doc_length / avg_doc_length)
    return idf * (numerator / denominator)


def _document_text(tool: ToolDefinition) -> str:
    """Combine all searchable text fields of a tool into a single string."""
    parts = [tool.name.replace("_", " "), tool.name, tool.description]
    parts.extend(tool.parameter_names)
    for name in tool.parameter_names:
        description = tool.input_schema.parameter_description(name)
        if description:
            parts.append(description)
        parts.append(name)
    return " ".join(parts)


class BM25SearchEngine(SearchEngine[_BM25Snapshot]):
    """BM25 search engine over tool definitions."""

    name = "BM25"
    method = SearchMethod.BM25

    def __init__(self, params: BM25Params | None = None) -> None:
        super().__init__()
        self._params = params or BM25Params()

    @property
    def params(self) -> BM25Params:
        return self._params

    async def _build(
        self, tools: tuple[ToolDefinition, ...], config: SearchEngineConfig | None
    ) -> _BM25Snapshot:
        params = self._params.merged(config)

        documents: list[_Document] = []
        for tool in tools:
            tokens = tuple(_tokenize(_document_text(tool)))
            documents.append(
                _Document(tokens=tokens, term_frequencies=dict(Counter(tokens)), length=len(tokens))
            )

        doc_count = len(documents)
        if doc_count == 0:
            logger.warning("Building BM25 index with empty tool list")
        avg_doc_length = sum(doc.length for doc in documents) / max(doc_count, 1)

        doc_freqs: Counter[str] = Counter()
        for doc in documents:
            doc_freqs.update(doc.term_frequencies.keys())

        idf = {
            term: math.log((doc_count - df + 0.5) / (df + 0.5) + 1)
            for term, df in doc_freqs.items()
        }

        logger.info(
            f"BM25 index built: {doc_count} documents, {len(idf)} unique terms, "
            f"avg length {avg_doc_length:.1f} (k1={params.k1}, b={params.b})"
        )
        return _BM25Snapshot(
            tools=tools,
            documents=tuple(documents),
            idf=idf,
            avg_doc_length=avg_doc_length,
            params=params,
        )

    def _publish(self, snapshot: _BM25Snapshot) -> None:
        super()._publish(snapshot)
        self._params = snapshot.params

    async def _search(
        self, snapshot: _BM25Snapshot, query: str, top_k: int
    ) -> list[SearchResult]:
        query_tokens = _tokenize(query)
        logger.debug(f"BM25 search for {query_tokens!r} over {len(snapshot.tools)} tools")
        scores = [self._score(snapshot, doc, query_tokens) for doc in snapshot.documents]
        return rank_results(snapshot.tools, scores, top_k)

    @staticmethod
    def _score(snapshot: _BM25Snapshot, doc: _Document, query_tokens: list[str]) -> float:
        params = snapshot.params
        score = 0.0
        for term in query_tokens:
            score += bm25_term_score(
                tf=doc.term_frequencies.get(term, 0),
                idf=snapshot.idf.get(term, 0.0),
                doc_length=doc.length,
                avg_doc_length=snapshot.avg_doc_length,
                k1=params.k1,
                b=params.b,
            )
        return score


def create_bm25_engine(params: BM25Params | None = None) -> BM25SearchEngine:
    """Create a new BM25 search engine instance."""
    return BM25SearchEngine(params)
