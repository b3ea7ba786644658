"""Tests for aumai_toolsearch.models."""
from __future__ import annotations

import pydantic
import pytest

from aumai_toolsearch.models import (
    BM25Config,
    EmbeddingFormat,
    InputSchema,
    SearchMethod,
    SearchRequest,
    SearchResponse,
    SearchResult,
    ToolDefinition,
)


class TestToolDefinition:
    def test_minimal_tool(self) -> None:
        tool = ToolDefinition(name="ping")
        assert tool.description == ""
        assert tool.input_schema.type == "object"
        assert tool.parameter_names == []

    def test_mcp_camel_case_alias(self) -> None:
        tool = ToolDefinition.model_validate(
            {
                "name": "read_file",
                "description": "Read a file",
                "inputSchema": {
                    "type": "object",
                    "properties": {"path": {"type": "string"}},
                    "required": ["path"],
                },
            }
        )
        assert tool.parameter_names == ["path"]
        assert tool.input_schema.required == ["path"]

    def test_parameter_names_keep_declaration_order(self, issue_tool: ToolDefinition) -> None:
        assert issue_tool.parameter_names == ["title", "body", "labels"]

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            ToolDefinition(name="")

    def test_frozen(self, issue_tool: ToolDefinition) -> None:
        with pytest.raises(pydantic.ValidationError):
            issue_tool.name = "other"  # type: ignore[misc]

    def test_extra_schema_keys_preserved(self) -> None:
        schema = InputSchema.model_validate(
            {"type": "object", "properties": {}, "additionalProperties": False}
        )
        assert schema.model_extra == {"additionalProperties": False}

    def test_non_object_schema_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            InputSchema.model_validate({"type": "array"})


class TestParameterDescription:
    def test_declared_description(self, issue_tool: ToolDefinition) -> None:
        assert issue_tool.input_schema.parameter_description("title") == "Issue title"

    def test_missing_description(self, issue_tool: ToolDefinition) -> None:
        assert issue_tool.input_schema.parameter_description("labels") is None

    def test_unknown_parameter(self, issue_tool: ToolDefinition) -> None:
        assert issue_tool.input_schema.parameter_description("assignee") is None

    def test_non_dict_fragment(self) -> None:
        schema = InputSchema(properties={"flag": True})
        assert schema.parameter_description("flag") is None


class TestRequestModels:
    def test_search_request_defaults(self) -> None:
        request = SearchRequest(query="hello")
        assert request.top_k == 5
        assert request.method is None
        assert request.timeout is None

    def test_search_request_top_k_min_one(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            SearchRequest(query="hello", top_k=0)

    def test_search_request_timeout_positive(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            SearchRequest(query="hello", timeout=0)

    def test_method_from_string(self) -> None:
        assert SearchRequest(query="q", method="bm25").method is SearchMethod.BM25

    def test_unknown_method_rejected(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            SearchRequest(query="q", method="fuzzy")

    def test_bm25_b_bounded(self) -> None:
        with pytest.raises(pydantic.ValidationError):
            BM25Config(b=1.5)

    def test_response_serialization(self) -> None:
        response = SearchResponse(
            results=[SearchResult(name="read_file", description="Read", score=0.5)],
            method=SearchMethod.EMBEDDING,
            took=1.25,
            model="nomic-embed-text-v2-moe",
        )
        assert response.model_dump(mode="json") == {
            "results": [{"name": "read_file", "description": "Read", "score": 0.5}],
            "method": "embedding",
            "took": 1.25,
            "model": "nomic-embed-text-v2-moe",
        }

    def test_format_values(self) -> None:
        assert [f.value for f in EmbeddingFormat] == [
            "minimal",
            "standard",
            "rich",
            "verbose",
            "structured",
        ]
