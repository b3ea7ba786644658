"""Unified search service.

Routes queries to one of several registered search engines (embedding, BM25,
regex) and keeps every engine loaded with the same tool corpus.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable

from pydantic import ValidationError

from aumai_toolsearch.bm25 import BM25SearchEngine
from aumai_toolsearch.core import SearchEngine
from aumai_toolsearch.embedding import EmbeddingSearchEngine
from aumai_toolsearch.errors import (
    FanOutError,
    InvalidRequestError,
    MethodNotRegisteredError,
    NotReadyError,
    SearchTimeoutError,
)
from aumai_toolsearch.models import (
    DEFAULT_TOP_K,
    EmbeddingFormat,
    SearchEngineConfig,
    SearchMethod,
    SearchRequest,
    SearchResponse,
    SearchResult,
    ToolDefinition,
)
from aumai_toolsearch.providers import EmbeddingProvider, OllamaEmbeddingProvider
from aumai_toolsearch.regex import RegexSearchEngine

__all__ = ["UnifiedSearchService", "create_default_service"]

logger = logging.getLogger(__name__)


class UnifiedSearchService:
    """Search service that supports multiple search backends.

    Engines are registered once during setup; :meth:`initialize` and
    :meth:`reload` then load every engine concurrently, and :meth:`search`
    dispatches each query to exactly one engine.
    """

    def __init__(self) -> None:
        self._engines: dict[SearchMethod, SearchEngine] = {}
        self._default_method: SearchMethod = SearchMethod.EMBEDDING
        self._tools: list[ToolDefinition] = []

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register_engine(self, engine: SearchEngine) -> None:
        """Register *engine* for its method, replacing any previous one."""
        self._engines[engine.method] = engine

    def set_default_method(self, method: SearchMethod | str) -> None:
        """Set the method used when a request does not name one.

        Raises:
            MethodNotRegisteredError: When no engine is registered for *method*.
        """
        self._default_method = self._get_registered(method).method

    @property
    def default_method(self) -> SearchMethod:
        return self._default_method

    def get_available_methods(self) -> list[SearchMethod]:
        return list(self._engines)

    def get_engine(self, method: SearchMethod | str) -> SearchEngine | None:
        try:
            return self._engines.get(SearchMethod(method))
        except ValueError:
            return None

    # ------------------------------------------------------------------
    # Corpus loading
    # ------------------------------------------------------------------

    async def initialize(
        self, tools: Iterable[ToolDefinition], config: SearchEngineConfig | None = None
    ) -> None:
        """Initialize all registered engines with *tools*.

        Raises:
            FanOutError: When one or more engines fail; every failure is reported.
        """
        tools = list(tools)
        await self._fan_out("initialize", lambda engine: engine.initialize(tools, config))
        self._tools = tools

    async def initialize_engine(
        self,
        method: SearchMethod | str,
        tools: Iterable[ToolDefinition],
        config: SearchEngineConfig | None = None,
    ) -> None:
        """Initialize a specific engine only."""
        engine = self._get_registered(method)
        tools = list(tools)
        await engine.initialize(tools, config)
        self._tools = tools

    async def reload(
        self, tools: Iterable[ToolDefinition], config: SearchEngineConfig | None = None
    ) -> None:
        """Replace the corpus of every registered engine with *tools*.

        A partial failure is not rolled back: engines listed in
        ``FanOutError.succeeded`` already serve *tools*, while the failed ones
        keep their previous corpus and :meth:`get_all_tools` still reports the
        previous list.

        Raises:
            FanOutError: When one or more engines fail; every failure is reported.
        """
        tools = list(tools)
        await self._fan_out("reload", lambda engine: engine.reload(tools, config))
        self._tools = tools

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(self, request: SearchRequest) -> SearchResponse:
        """Search for tools using the requested or default method.

        Raises:
            MethodNotRegisteredError: When the method has no engine.
            NotReadyError: When the engine is not initialized or is reloading.
            SearchTimeoutError: When ``request.timeout`` elapses first.
        """
        method = request.method or self._default_method
        engine = self._get_registered(method)

        if not engine.is_ready():
            raise NotReadyError(
                f'Search engine "{method.value}" is not initialized',
                context={"method": method.value},
            )

        start = time.perf_counter()
        try:
            results = await asyncio.wait_for(
                engine.search(request.query, request.top_k), timeout=request.timeout
            )
        except asyncio.TimeoutError as exc:
            raise SearchTimeoutError(
                f'Search engine "{method.value}" did not answer within {request.timeout}s',
                context={"method": method.value, "timeout": request.timeout},
            ) from exc
        took = (time.perf_counter() - start) * 1000

        logger.debug(
            f"{method.value} search for {request.query!r} returned {len(results)} "
            f"result(s) in {took:.1f}ms"
        )
        model = engine.model if isinstance(engine, EmbeddingSearchEngine) else None
        return SearchResponse(results=results, method=method, took=took, model=model)

    async def search_with(
        self,
        method: SearchMethod | str,
        query: str,
        top_k: int = DEFAULT_TOP_K,
        timeout: float | None = None,
    ) -> list[SearchResult]:
        """Search using a specific method (convenience wrapper).

        Unlike a direct ``engine.search`` call, ``top_k`` below 1 or a
        non-positive ``timeout`` is rejected rather than answered with ``[]``.

        Raises:
            InvalidRequestError: When the arguments fail :class:`SearchRequest`
                validation.
        """
        resolved = self._get_registered(method).method
        try:
            request = SearchRequest(query=query, top_k=top_k, method=resolved, timeout=timeout)
        except ValidationError as exc:
            raise InvalidRequestError(
                f"Invalid search request: {exc.error_count()} validation error(s)",
                context={"method": resolved.value, "errors": exc.errors(include_url=False)},
            ) from exc
        response = await self.search(request)
        return response.results

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_all_tools(self) -> list[ToolDefinition]:
        return list(self._tools)

    def get_tools_count(self) -> int:
        return len(self._tools)

    def get_tool_names(self) -> list[str]:
        return [tool.name for tool in self._tools]

    def is_ready(self) -> bool:
        """Return True if any engine is ready."""
        return any(engine.is_ready() for engine in self._engines.values())

    def is_engine_ready(self, method: SearchMethod | str) -> bool:
        engine = self.get_engine(method)
        return engine.is_ready() if engine is not None else False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_registered(self, method: SearchMethod | str) -> SearchEngine:
        engine = self.get_engine(method)
        if engine is None:
            name = method.value if isinstance(method, SearchMethod) else str(method)
            raise MethodNotRegisteredError(
                f'Search method "{name}" is not registered',
                context={"method": name, "available": [m.value for m in self._engines]},
            )
        return engine

    async def _fan_out(
        self, operation: str, call: Callable[[SearchEngine], Awaitable[None]]
    ) -> None:
        """Run *call* on every engine concurrently and wait for all of them."""
        engines = list(self._engines.values())
        outcomes = await asyncio.gather(
            *(call(engine) for engine in engines), return_exceptions=True
        )

        failures: dict[SearchMethod, BaseException] = {}
        succeeded: list[SearchMethod] = []
        for engine, outcome in zip(engines, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"{engine.name} engine failed to {operation}: {outcome}")
                failures[engine.method] = outcome
            else:
                succeeded.append(engine.method)
        if failures:
            raise FanOutError(operation, failures, succeeded) from next(iter(failures.values()))


def create_default_service(
    provider: EmbeddingProvider | None = None,
    model: str | None = None,
    format: EmbeddingFormat | str | None = None,
    default_method: SearchMethod | str = SearchMethod.EMBEDDING,
) -> UnifiedSearchService:
    """Create a service with the embedding, BM25 and regex engines registered.

    An :class:`~aumai_toolsearch.providers.OllamaEmbeddingProvider` is created
    for the embedding engine when *provider* is not given.
    """
    service = UnifiedSearchService()
    service.register_engine(
        EmbeddingSearchEngine(provider or OllamaEmbeddingProvider(), model=model, format=format)
    )
    service.register_engine(BM25SearchEngine())
    service.register_engine(RegexSearchEngine())
    service.set_default_method(default_method)
    return service
