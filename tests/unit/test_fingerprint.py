"""Unit tests for project fingerprinting."""

from pathlib import Path

from aicgen.analyzers.static_analyzer import StaticAnalyzer
from aicgen.cache.fingerprint import fingerprint, fingerprint_parts
from aicgen.models.metadata import ProjectMetadata


class TestFingerprintParts:
    """Tests for fingerprint_parts."""

    def test_is_sha256_hex(self) -> None:
        """Test that the digest is 64 lowercase hex characters."""
        digest = fingerprint_parts(["src"], ["src/main.go"], "go", [], [])

        assert len(digest) == 64
        assert all(c in "0123456789abcdef" for c in digest)

    def test_order_independent(self) -> None:
        """Test that the same sets in any order produce the same digest."""
        a = fingerprint_parts(
            ["src", "lib"], ["b.py", "a.py"], "python", ["Flask", "Celery"], ["pytest", "ruff"]
        )
        b = fingerprint_parts(
            ["lib", "src"], ["a.py", "b.py"], "python", ["Celery", "Flask"], ["ruff", "pytest"]
        )

        assert a == b

    def test_each_component_changes_digest(self) -> None:
        """Test that every component contributes to the digest."""
        base = fingerprint_parts(["src"], ["a.py"], "python", ["Flask"], ["pytest"])

        assert fingerprint_parts(["src", "docs"], ["a.py"], "python", ["Flask"], ["pytest"]) != base
        assert fingerprint_parts(["src"], ["a.py", "b.py"], "python", ["Flask"], ["pytest"]) != base
        assert fingerprint_parts(["src"], ["a.py"], "go", ["Flask"], ["pytest"]) != base
        assert fingerprint_parts(["src"], ["a.py"], "python", ["Django"], ["pytest"]) != base
        assert fingerprint_parts(["src"], ["a.py"], "python", ["Flask"], ["tox"]) != base

    def test_component_boundaries_are_kept(self) -> None:
        """Test that names moved between components produce different digests."""
        as_framework = fingerprint_parts([], [], "go", ["x"], [])
        as_build_tool = fingerprint_parts([], [], "go", [], ["x"])
        joined = fingerprint_parts([], [], "go", ["a,b"], [])
        split = fingerprint_parts([], [], "go", ["a", "b"], [])
        in_language = fingerprint_parts([], [], "gox", [], [])

        assert as_framework != as_build_tool
        assert joined != split
        assert in_language != as_framework

    def test_metadata_fingerprint_matches_parts(self) -> None:
        """Test that fingerprint(metadata) hashes the metadata's components."""
        metadata = ProjectMetadata(
            structure=["cmd"],
            files=["go.mod", "cmd/main.go"],
            language="go",
            frameworks=["Gin"],
            build_tools=["make"],
            package_manager="go",
        )

        assert fingerprint(metadata) == fingerprint_parts(
            ["cmd"], ["go.mod", "cmd/main.go"], "go", ["Gin"], ["make"]
        )

    def test_ignores_fields_outside_the_key(self) -> None:
        """Test that hints and dependencies do not affect the fingerprint."""
        a = ProjectMetadata(files=["main.go"], language="go")
        b = ProjectMetadata(
            files=["main.go"],
            language="go",
            architecture_hints=["layered-structure"],
            dependencies=["github.com/lib/pq"],
        )

        assert fingerprint(a) == fingerprint(b)


class TestProjectFingerprint:
    """Tests for fingerprints of real directories."""

    def test_stable_across_runs(self, go_project: Path) -> None:
        """Test that analyzing an unchanged project twice yields the same key."""
        analyzer = StaticAnalyzer()

        assert analyzer.analyze(go_project).fingerprint == analyzer.analyze(go_project).fingerprint

    def test_new_file_changes_fingerprint(self, go_project: Path) -> None:
        """Test that adding a file invalidates the key."""
        analyzer = StaticAnalyzer()
        before = analyzer.analyze(go_project).fingerprint

        (go_project / "README.md").write_text("# app\n")

        assert analyzer.analyze(go_project).fingerprint != before

    def test_content_edit_keeps_fingerprint(self, go_project: Path) -> None:
        """Test that editing file content without changing the layout keeps the key."""
        analyzer = StaticAnalyzer()
        before = analyzer.analyze(go_project).fingerprint

        (go_project / "main.go").write_text("package main\n\nfunc main() {}\n")

        assert analyzer.analyze(go_project).fingerprint == before
