"""Tests for the exception hierarchy and error codes."""

import pytest

from archgraph.exceptions import (
    ArchGraphError,
    ArtifactError,
    ConfigurationError,
    ErrorCode,
    ExtractionError,
    InvalidConfigError,
    ParseError,
    PersistenceError,
    ToolInvocationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            ExtractionError("a.py", "bad syntax"),
            ToolInvocationError("pyreverse", "not found"),
            PersistenceError(".fingerprints.json", "denied"),
            ArtifactError("graph-data.json", "denied"),
            ConfigurationError("bad"),
            InvalidConfigError("workers", 0, "must be at least 1"),
        ],
    )
    def test_all_are_archgraph_errors(self, error):
        assert isinstance(error, ArchGraphError)

    def test_parse_error_alias(self):
        assert ParseError is ExtractionError

    def test_only_extraction_is_recoverable(self):
        assert ExtractionError("a.py", "x").recoverable
        assert not ToolInvocationError("t", "x").recoverable
        assert not PersistenceError("p", "x").recoverable


class TestCodes:
    def test_default_codes(self):
        assert ExtractionError("a.py", "x").code is ErrorCode.AG101
        assert ToolInvocationError("t", "x").code is ErrorCode.AG103
        assert ArtifactError("p", "x").code is ErrorCode.AG300
        assert InvalidConfigError("k", "v", "r").code is ErrorCode.AG501

    def test_code_override(self):
        error = PersistenceError("p", "x", code=ErrorCode.AG401)
        assert error.code is ErrorCode.AG401
        assert PersistenceError("p", "x").code is ErrorCode.AG400

    def test_categories(self):
        assert ErrorCode.AG102.category == "extraction"
        assert ErrorCode.AG201.category == "graph"
        assert ErrorCode.AG401.category == "gate"
        assert ErrorCode.AG500.category == "configuration"


class TestFormatting:
    def test_str_includes_details(self):
        error = ExtractionError("src/a.py", "unexpected indent")
        assert str(error) == (
            "Failed to extract facts from src/a.py: unexpected indent "
            "(path=src/a.py, reason=unexpected indent)"
        )

    def test_tool_command_in_details(self):
        error = ToolInvocationError("pyreverse", "exit 1", command=["pyreverse", "-o", "dot"])
        assert error.details["command"] == "pyreverse -o dot"

    def test_to_json(self):
        data = InvalidConfigError("workers", 0, "must be at least 1").to_json()
        assert data["error_code"] == "AG501"
        assert data["category"] == "configuration"
        assert data["details"]["reason"] == "must be at least 1"
        assert data["recoverable"] is False
