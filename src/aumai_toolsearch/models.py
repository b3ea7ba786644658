"""Pydantic models for aumai-toolsearch."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

__all__ = [
    "DEFAULT_TOP_K",
    "BM25Config",
    "EmbeddingFormat",
    "InputSchema",
    "SearchEngineConfig",
    "SearchMethod",
    "SearchRequest",
    "SearchResponse",
    "SearchResult",
    "ToolDefinition",
]

DEFAULT_TOP_K = 5


class SearchMethod(str, Enum):
    """Names of the interchangeable search backends."""

    EMBEDDING = "embedding"
    BM25 = "bm25"
    REGEX = "regex"


class EmbeddingFormat(str, Enum):
    """Text serialization strategies applied before embedding a tool."""

    MINIMAL = "minimal"
    STANDARD = "standard"
    RICH = "rich"
    VERBOSE = "verbose"
    STRUCTURED = "structured"


class InputSchema(BaseModel):
    """JSON-schema object describing a tool's parameters."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: Literal["object"] = "object"
    properties: dict[str, Any] = Field(
        default_factory=dict,
        description="Parameter name mapped to its (opaque) schema fragment",
    )
    required: list[str] = Field(
        default_factory=list, description="Names of required parameters"
    )

    def parameter_description(self, name: str) -> str | None:
        """Return the ``description`` of parameter *name*, if it declares one."""
        fragment = self.properties.get(name)
        if isinstance(fragment, dict):
            description = fragment.get("description")
            if description:
                return str(description)
        return None


class ToolDefinition(BaseModel):
    """A callable tool as advertised by a tool-providing server."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Unique tool identifier")
    description: str = Field(
        default="", description="Natural-language description of what the tool does"
    )
    input_schema: InputSchema = Field(
        default_factory=InputSchema,
        validation_alias=AliasChoices("input_schema", "inputSchema"),
        description="Parameter schema; MCP servers send it as ``inputSchema``",
    )

    @property
    def parameter_names(self) -> list[str]:
        return list(self.input_schema.properties)


class SearchResult(BaseModel):
    """A single ranked tool."""

    name: str = Field(..., description="Name of the matching tool")
    description: str = Field(..., description="Description copied from the tool")
    score: float = Field(
        ..., description="Backend-specific relevance score; not comparable across methods"
    )


class BM25Config(BaseModel):
    """Optional overrides for the BM25 parameters."""

    k1: float | None = Field(default=None, ge=0, description="Term frequency saturation")
    b: float | None = Field(default=None, ge=0, le=1, description="Length normalization")


class SearchEngineConfig(BaseModel):
    """Per-call engine configuration. Unset fields keep the engine's current value."""

    model: str | None = Field(default=None, description="Embedding model identifier")
    format: EmbeddingFormat | None = Field(
        default=None, description="Embedding text format strategy"
    )
    bm25: BM25Config | None = Field(default=None, description="BM25 parameters")


class SearchRequest(BaseModel):
    """Parameters for a routed search."""

    query: str = Field(..., description="Natural-language query")
    top_k: int = Field(default=DEFAULT_TOP_K, ge=1, description="Number of results to return")
    method: SearchMethod | None = Field(
        default=None, description="Backend to use; the service default when unset"
    )
    timeout: float | None = Field(
        default=None, gt=0, description="Deadline for the engine call, in seconds"
    )


class SearchResponse(BaseModel):
    """Routed search results with timing metadata."""

    results: list[SearchResult]
    method: SearchMethod
    took: float = Field(..., description="Wall-clock engine time in milliseconds")
    model: str | None = Field(
        default=None, description="Embedding model that produced the ranking, if any"
    )
