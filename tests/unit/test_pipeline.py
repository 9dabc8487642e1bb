"""Unit tests for pipeline helpers."""

import re
from pathlib import Path

import pytest

from aicgen.config import AicgenConfig, AIConfig, CacheConfig, SamplingConfig
from aicgen.models.result import AnalysisResult, ArchitectureInfo
from aicgen.pipeline import AnalysisOptions, combine_results, new_correlation_id


def make_result(pattern: str, confidence: float, **overrides: object) -> AnalysisResult:
    fields = {
        "architecture": ArchitectureInfo(pattern=pattern, confidence=confidence),
        "project_type": "api",
        "language": "typescript",
        "datasource": "sql",
        "level": "standard",
        "testing_maturity": "medium",
        "reasoning": "",
        "timestamp": 1,
        "source": "static",
    }
    fields.update(overrides)
    return AnalysisResult(**fields)


class TestCombineResults:
    """Tests for merging static and AI results."""

    def test_ai_fields_win_and_confidence_averages(self) -> None:
        """Test that the AI's values are kept and confidence is the mean."""
        static = make_result("other", 0.3, language="javascript")
        ai = make_result("layered", 0.8, reasoning="Express API with services")

        combined = combine_results(static, ai, "openai")

        assert combined.language == "typescript"
        assert combined.architecture.pattern == "layered"
        assert combined.architecture.confidence == pytest.approx(0.55)
        assert combined.reasoning == "Express API with services"
        assert combined.source == "openai"
        assert combined.timestamp > 1

    def test_confidence_is_rounded(self) -> None:
        """Test rounding to two decimals."""
        combined = combine_results(make_result("other", 0.333), make_result("ddd", 0.9), "claude")

        assert combined.architecture.confidence == 0.62


class TestCorrelationId:
    """Tests for correlation ids."""

    def test_format_and_uniqueness(self) -> None:
        """Test the ai-<millis>-<hex> shape."""
        first = new_correlation_id()
        second = new_correlation_id()

        assert re.fullmatch(r"ai-\d+-[0-9a-f]{8}", first)
        assert first != second


class TestAnalysisOptions:
    """Tests for AnalysisOptions."""

    def test_defaults_match_config_defaults(self) -> None:
        """Test that options built from default config equal the defaults."""
        assert AnalysisOptions.from_config(".", AicgenConfig()) == AnalysisOptions(project_path=Path("."))

    def test_from_config(self) -> None:
        """Test that every setting is carried over."""
        config = AicgenConfig(
            cache=CacheConfig(enabled=False),
            sampling=SamplingConfig(strategy="minimal", max_files=4, max_tokens=2000, include_tests=True),
            ai=AIConfig(timeout_ms=5000, max_retries=2, initial_retry_delay_ms=10, max_retry_delay_ms=50),
        )

        options = AnalysisOptions.from_config("/srv/app", config)

        assert options.project_path == Path("/srv/app")
        assert options.strategy == "minimal"
        assert options.max_files == 4
        assert options.max_tokens == 2000
        assert options.include_tests is True
        assert options.use_cache is False
        assert options.timeout_ms == 5000
        assert options.max_retries == 2
        assert options.initial_retry_delay_ms == 10
        assert options.max_retry_delay_ms == 50
