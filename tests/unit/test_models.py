"""Tests for result models and the error taxonomy."""

import pytest

from aicgen.errors import (
    AicgenError,
    InvalidCredentialsError,
    OperationTimeoutError,
    ProviderError,
    RateLimitError,
    ValidationError,
    ValidationErrors,
)
from aicgen.models.metadata import DatabaseHints, TestingHints
from aicgen.models.result import SCHEMA_VERSION, AnalysisResult, ArchitectureInfo


def make_result(**overrides: object) -> AnalysisResult:
    fields = {
        "architecture": ArchitectureInfo(pattern="layered", confidence=0.7),
        "project_type": "api",
        "language": "typescript",
        "datasource": "sql",
        "level": "standard",
        "testing_maturity": "medium",
    }
    fields.update(overrides)
    return AnalysisResult(**fields)


class TestAnalysisResult:
    """Tests for AnalysisResult serialization."""

    def test_to_dict_uses_camel_case(self) -> None:
        """Test the stored document shape."""
        data = make_result(timestamp=1700000000000).to_dict()

        assert data["projectType"] == "api"
        assert data["testingMaturity"] == "medium"
        assert data["architecture"] == {"pattern": "layered", "confidence": 0.7}
        assert data["schemaVersion"] == SCHEMA_VERSION
        assert data["source"] == "static"
        assert "backendStyle" not in data
        assert "fromCache" not in data

    def test_optional_styles_are_written_when_set(self) -> None:
        """Test that backend and frontend styles appear only when known."""
        data = make_result(backend_style="express-rest", frontend_style="react-spa").to_dict()

        assert data["backendStyle"] == "express-rest"
        assert data["frontendStyle"] == "react-spa"

    def test_from_dict_restores_result(self) -> None:
        """Test reading a stored document back."""
        original = make_result(source="claude", timestamp=42, backend_style="express-rest")

        assert AnalysisResult.from_dict(original.to_dict()) == original

    def test_from_dict_defaults(self) -> None:
        """Test defaults for optional fields."""
        data = make_result().to_dict()
        for key in ("reasoning", "schemaVersion", "timestamp", "source"):
            del data[key]

        result = AnalysisResult.from_dict(data)

        assert result.reasoning == ""
        assert result.schema_version == SCHEMA_VERSION
        assert result.timestamp == 0
        assert result.source == "static"

    def test_from_dict_missing_field(self) -> None:
        """Test that a missing required field raises KeyError."""
        data = make_result().to_dict()
        del data["language"]

        with pytest.raises(KeyError):
            AnalysisResult.from_dict(data)

    def test_from_cache_ignored_in_equality(self) -> None:
        """Test that the cache flag does not affect comparison."""
        assert make_result(from_cache=True) == make_result()


class TestHints:
    """Tests for hint serialization."""

    def test_database_hints_to_dict(self) -> None:
        """Test database hint keys."""
        hints = DatabaseHints(has_sql=True, detected=["PostgreSQL"])

        assert hints.to_dict() == {"hasSql": True, "hasNoSql": False, "detected": ["PostgreSQL"]}

    def test_testing_hints_to_dict(self) -> None:
        """Test testing hint keys."""
        hints = TestingHints(frameworks=["jest"], has_tests=True, test_file_count=3)

        assert hints.to_dict() == {"frameworks": ["jest"], "hasTests": True, "testFileCount": 3}


class TestErrors:
    """Tests for the error taxonomy."""

    def test_provider_error_str(self) -> None:
        """Test provider and status in the message."""
        assert str(ProviderError("boom", "openai", status=500)) == "[openai] boom (status 500)"
        assert str(ProviderError("boom", "openai")) == "[openai] boom"

    def test_subclass_kinds(self) -> None:
        """Test that each error carries a distinct kind."""
        errors = [
            InvalidCredentialsError("bad key", "claude", status=401),
            RateLimitError("slow down", "claude", retry_after=2.0),
            OperationTimeoutError(100),
            ValidationError("language", "is required"),
        ]

        assert [e.kind for e in errors] == [
            "invalid_credentials",
            "rate_limit",
            "timeout",
            "validation",
        ]
        assert all(isinstance(e, AicgenError) for e in errors)

    def test_rate_limit_defaults(self) -> None:
        """Test the default 429 status and retry_after."""
        error = RateLimitError("slow down", "gemini", retry_after=1.5)

        assert error.status == 429
        assert error.retry_after == 1.5

    def test_timeout_is_builtin_timeout(self) -> None:
        """Test that the timeout error is also a TimeoutError."""
        error = OperationTimeoutError(250)

        assert isinstance(error, TimeoutError)
        assert str(error) == "Operation timed out after 250ms"

    def test_validation_errors_aggregate(self) -> None:
        """Test that every field failure is reported."""
        error = ValidationErrors(
            [ValidationError("language", "is required"), ValidationError("level", "invalid")]
        )

        assert error.fields == ["language", "level"]
        assert str(error).startswith("2 validation error(s): language: is required")
