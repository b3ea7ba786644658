"""AumAI Toolsearch: rank tool definitions so agents load only what they need."""

from aumai_toolsearch.bm25 import BM25Params, BM25SearchEngine, create_bm25_engine
from aumai_toolsearch.core import CosineSimilarity, SearchEngine
from aumai_toolsearch.embedding import EmbeddingSearchEngine, create_embedding_engine
from aumai_toolsearch.errors import (
    DimensionMismatchError,
    FanOutError,
    InvalidRequestError,
    MethodNotRegisteredError,
    NotInitializedError,
    NotReadyError,
    ProviderUnavailableError,
    SearchTimeoutError,
    ToolSearchError,
)
from aumai_toolsearch.formats import (
    estimate_format_tokens,
    format_tool_for_embedding,
    get_available_formats,
    get_format_description,
)
from aumai_toolsearch.models import (
    BM25Config,
    EmbeddingFormat,
    InputSchema,
    SearchEngineConfig,
    SearchMethod,
    SearchRequest,
    SearchResponse,
    SearchResult,
    ToolDefinition,
)
from aumai_toolsearch.providers import EmbeddingProvider, OllamaEmbeddingProvider
from aumai_toolsearch.regex import RegexSearchEngine, create_regex_engine
from aumai_toolsearch.service import UnifiedSearchService, create_default_service

__version__ = "0.1.0"

__all__ = [
    "BM25Config",
    "BM25Params",
    "BM25SearchEngine",
    "CosineSimilarity",
    "DimensionMismatchError",
    "EmbeddingFormat",
    "EmbeddingProvider",
    "EmbeddingSearchEngine",
    "FanOutError",
    "InvalidRequestError",
    "InputSchema",
    "MethodNotRegisteredError",
    "NotInitializedError",
    "NotReadyError",
    "OllamaEmbeddingProvider",
    "ProviderUnavailableError",
    "RegexSearchEngine",
    "SearchEngine",
    "SearchEngineConfig",
    "SearchMethod",
    "SearchRequest",
    "SearchResponse",
    "SearchResult",
    "SearchTimeoutError",
    "ToolDefinition",
    "ToolSearchError",
    "UnifiedSearchService",
    "create_bm25_engine",
    "create_default_service",
    "create_embedding_engine",
    "create_regex_engine",
    "estimate_format_tokens",
    "format_tool_for_embedding",
    "get_available_formats",
    "get_format_description",
]
