"""Unit tests for static-only characterization."""

import pytest

from aicgen.analyzers.inference import (
    infer_architecture,
    infer_level,
    infer_project_type,
    infer_static_result,
    infer_testing_maturity,
)
from aicgen.models.metadata import DatabaseHints, ProjectMetadata, TestingHints


def metadata_with_tests(source_files: int, test_files: int) -> ProjectMetadata:
    files = [f"src/m{i}.py" for i in range(source_files)]
    files += [f"tests/test_m{i}.py" for i in range(test_files)]
    return ProjectMetadata(
        files=files,
        testing_hints=TestingHints(
            frameworks=["pytest-style tests"],
            has_tests=test_files > 0,
            test_file_count=test_files,
        ),
    )


class TestInferArchitecture:
    """Tests for architecture inference."""

    def test_no_evidence(self) -> None:
        """Test the fallback pattern."""
        architecture = infer_architecture([])

        assert architecture.pattern == "other"
        assert architecture.confidence == 0.3

    def test_single_hint(self) -> None:
        """Test that one supporting hint gives 0.5."""
        architecture = infer_architecture(["layered-structure"])

        assert architecture.pattern == "layered"
        assert architecture.confidence == 0.5

    def test_more_hints_raise_confidence(self) -> None:
        """Test that each extra hint adds 0.1."""
        assert infer_architecture(["layered-structure", "mvc-structure"]).confidence == 0.6

    def test_confidence_is_capped(self) -> None:
        """Test the 0.9 cap."""
        architecture = infer_architecture([
            "nx-monorepo",
            "turborepo",
            "lerna-monorepo",
            "pnpm-workspace",
            "workspace-structure",
            "modular-structure",
        ])

        assert architecture.pattern == "modular-monolith"
        assert architecture.confidence == 0.9

    def test_weak_hints_alone_do_not_count(self) -> None:
        """Test that docker-compose alone does not mean microservices."""
        assert infer_architecture(["docker-compose"]).pattern == "other"
        assert infer_architecture(["docker-compose", "layered-structure"]).pattern == "layered"

    def test_weak_hints_support_strong_ones(self) -> None:
        """Test that weak hints add confidence once a strong hint is present."""
        architecture = infer_architecture(["docker-compose", "microservices-structure"])

        assert architecture.pattern == "microservices"
        assert architecture.confidence == 0.6

    def test_precedence(self) -> None:
        """Test that serverless wins over microservices."""
        assert infer_architecture(
            ["microservices-structure", "serverless-framework"]
        ).pattern == "serverless"


class TestInferProjectType:
    """Tests for project type inference."""

    @pytest.mark.parametrize(
        ("hints", "expected"),
        [
            (["mobile-platform", "spa-framework"], "mobile"),
            (["desktop-app", "web-app"], "desktop"),
            (["component-based-ui", "api-routes"], "web"),
            (["web-framework", "library-entry"], "api"),
            (["cli-framework", "library-entry"], "cli"),
            (["library-build"], "library"),
            ([], "other"),
        ],
    )
    def test_mapping(self, hints: list[str], expected: str) -> None:
        """Test precedence between project types."""
        assert infer_project_type(hints) == expected


class TestInferTestingMaturity:
    """Tests for testing maturity grading."""

    def test_no_tests_is_low(self) -> None:
        """Test a project without tests."""
        assert infer_testing_maturity(metadata_with_tests(5, 0)) == "low"

    def test_some_tests_is_medium(self) -> None:
        """Test a handful of tests."""
        assert infer_testing_maturity(metadata_with_tests(5, 2)) == "medium"

    def test_many_tests_is_high(self) -> None:
        """Test ten tests making up half the source files."""
        assert infer_testing_maturity(metadata_with_tests(10, 10)) == "high"

    def test_low_ratio_is_medium(self) -> None:
        """Test that many tests in a large project can still be medium."""
        assert infer_testing_maturity(metadata_with_tests(40, 10)) == "medium"


class TestInferLevel:
    """Tests for guideline level selection."""

    def test_small_project_is_basic(self) -> None:
        """Test the small project threshold."""
        metadata = ProjectMetadata(files=[f"f{i}.py" for i in range(20)], repo_type="monorepo")

        assert infer_level(metadata, "microservices") == "basic"

    def test_larger_project_is_standard(self) -> None:
        """Test a mid-sized layered project."""
        metadata = ProjectMetadata(files=[f"f{i}.py" for i in range(21)])

        assert infer_level(metadata, "layered") == "standard"

    def test_monorepo_or_advanced_pattern_is_expert(self) -> None:
        """Test monorepos and advanced patterns."""
        files = [f"f{i}.py" for i in range(30)]

        assert infer_level(ProjectMetadata(files=files, repo_type="monorepo"), "layered") == "expert"
        assert infer_level(ProjectMetadata(files=files), "hexagonal") == "expert"


class TestInferStaticResult:
    """Tests for the full static result."""

    def test_result_fields(self) -> None:
        """Test a layered SQL project."""
        metadata = ProjectMetadata(
            files=["package.json", "src/app.ts"],
            language="typescript",
            frameworks=["Express"],
            architecture_hints=["layered-structure"],
            database_hints=DatabaseHints(has_sql=True, detected=["PostgreSQL"]),
            project_type_hints=["web-framework"],
        )

        result = infer_static_result(metadata)

        assert result.language == "typescript"
        assert result.project_type == "api"
        assert result.architecture.pattern == "layered"
        assert result.datasource == "sql"
        assert result.level == "basic"
        assert result.testing_maturity == "low"
        assert result.source == "static"
        assert result.timestamp > 0
        assert "Express" in result.reasoning
        assert "PostgreSQL" in result.reasoning

    def test_sql_wins_over_nosql(self) -> None:
        """Test datasource precedence."""
        both = ProjectMetadata(database_hints=DatabaseHints(has_sql=True, has_nosql=True))
        nosql = ProjectMetadata(database_hints=DatabaseHints(has_nosql=True))

        assert infer_static_result(both).datasource == "sql"
        assert infer_static_result(nosql).datasource == "nosql"
        assert infer_static_result(ProjectMetadata()).datasource == "none"

    def test_language_outside_closed_set(self) -> None:
        """Test that an unrecognized language becomes unknown."""
        assert infer_static_result(ProjectMetadata(language="kotlin")).language == "unknown"
