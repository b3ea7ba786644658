"""Pattern-based (regex) search engine.

Fast, deterministic matching on tool names and descriptions with no ML
dependencies.  Scores combine several signals:

- exact name match (query with spaces as underscores): +100
- query word equals / is inside / contains a name part: +20 / +10 / +5
- word-boundary match in the search text: +3 per occurrence
- plain substring match in the search text: +1
- description starts with the word: +5

The total is divided by the number of query words to avoid favouring long
queries.  When nothing matches at all, the first ``top_k`` tools are returned
in corpus order instead of an empty list.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from aumai_toolsearch.core import SearchEngine, rank_results
from aumai_toolsearch.models import (
    SearchEngineConfig,
    SearchMethod,
    SearchResult,
    ToolDefinition,
)

__all__ = ["RegexSearchEngine", "create_regex_engine"]

logger = logging.getLogger(__name__)

EXACT_NAME_BONUS = 100
NAME_PART_EXACT = 20
NAME_PART_CONTAINS_WORD = 10
WORD_CONTAINS_NAME_PART = 5
WORD_BOUNDARY_MATCH = 3
SUBSTRING_MATCH = 1
DESCRIPTION_PREFIX = 5

_NAME_SEPARATORS = re.compile(r"[_-]")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class _Document:
    tool: ToolDefinition
    search_text: str
    name_parts: tuple[str, ...]


@dataclass(frozen=True)
class _RegexSnapshot:
    tools: tuple[ToolDefinition, ...]
    documents: tuple[_Document, ...]


def _search_text(tool: ToolDefinition) -> str:
    parts = [tool.name, tool.name.replace("_", " "), tool.description]
    parts.extend(tool.parameter_names)
    for name in tool.parameter_names:
        description = tool.input_schema.parameter_description(name)
        if description:
            parts.append(description)
    return " ".join(parts).lower()


def _name_parts(name: str) -> tuple[str, ...]:
    return tuple(part for part in _NAME_SEPARATORS.split(name.lower()) if part)


def _query_words(query: str) -> list[str]:
    return [word for word in query.lower().split() if len(word) > 1]


@dataclass(frozen=True)
class _Query:
    name: str
    words: tuple[str, ...]
    patterns: tuple[re.Pattern[str], ...]


def _compile_query(query: str) -> _Query:
    """Normalize *query* and compile one word-boundary pattern per word."""
    words = tuple(_query_words(query))
    return _Query(
        name=_WHITESPACE.sub("_", query.lower()),
        words=words,
        patterns=tuple(re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE) for word in words),
    )


def _score(doc: _Document, query: _Query) -> float:
    """Heuristic relevance of *doc* to *query*, normalized by query word count."""
    score = 0

    if doc.tool.name.lower() == query.name:
        score += EXACT_NAME_BONUS

    description = doc.tool.description.lower()
    for word, pattern in zip(query.words, query.patterns):
        for part in doc.name_parts:
            if part == word:
                score += NAME_PART_EXACT
            elif word in part:
                score += NAME_PART_CONTAINS_WORD
            elif part in word:
                score += WORD_CONTAINS_NAME_PART

        score += WORD_BOUNDARY_MATCH * len(pattern.findall(doc.search_text))

        if word in doc.search_text:
            score += SUBSTRING_MATCH
        if description.startswith(word):
            score += DESCRIPTION_PREFIX

    return score / max(len(query.words), 1)


class RegexSearchEngine(SearchEngine[_RegexSnapshot]):
    """Heuristic name/description matcher."""

    name = "Regex"
    method = SearchMethod.REGEX

    async def _build(
        self, tools: tuple[ToolDefinition, ...], config: SearchEngineConfig | None
    ) -> _RegexSnapshot:
        documents = tuple(
            _Document(tool=tool, search_text=_search_text(tool), name_parts=_name_parts(tool.name))
            for tool in tools
        )
        return _RegexSnapshot(tools=tools, documents=documents)

    async def _search(
        self, snapshot: _RegexSnapshot, query: str, top_k: int
    ) -> list[SearchResult]:
        compiled = _compile_query(query)
        scores = [_score(doc, compiled) for doc in snapshot.documents]

        matched = [(tool, score) for tool, score in zip(snapshot.tools, scores) if score > 0]
        if not matched:
            # No signal at all: fall back to the head of the corpus.
            logger.debug(f"Regex search for {query!r} matched nothing; returning corpus order")
            return rank_results(snapshot.tools, scores, top_k)

        tools, kept = zip(*matched)
        return rank_results(tools, kept, top_k)


def create_regex_engine() -> RegexSearchEngine:
    """Create a new Regex search engine instance."""
    return RegexSearchEngine()
