"""Unit tests for source file enumeration and reads."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

from aicgen.sampling.files import (
    READ_BATCHES_PER_WORKER,
    find_test_files,
    iter_files,
    read_files,
    read_text,
    source_files,
)


class TestSourceFiles:
    """Tests for source_files."""

    def test_excludes_tests_and_non_source(self) -> None:
        """Test that tests, docs and configs are dropped."""
        files = ["README.md", "src/app.ts", "src/app.test.ts", "package.json", "src/util.js"]

        assert source_files(files) == ["src/app.ts", "src/util.js"]

    def test_language_family(self) -> None:
        """Test that TypeScript keeps JavaScript files but not Python ones."""
        files = ["src/app.ts", "src/legacy.js", "scripts/build.py"]

        assert source_files(files, "typescript") == ["src/app.ts", "src/legacy.js"]
        assert source_files(files, "python") == ["scripts/build.py"]

    def test_unknown_language_keeps_all(self) -> None:
        """Test that an unknown primary language does not filter."""
        assert source_files(["a.go", "b.rs"], "unknown") == ["a.go", "b.rs"]


class TestFindTestFiles:
    """Tests for find_test_files."""

    def test_primary_language_first(self) -> None:
        """Test that the primary language's tests sort first."""
        files = ["scripts/test_build.py", "src/app.test.ts", "src/app.ts"]

        assert find_test_files(files, "typescript") == ["src/app.test.ts", "scripts/test_build.py"]

    def test_no_tests(self) -> None:
        """Test a project without tests."""
        assert find_test_files(["main.go"], "go") == []


class TestReadFiles:
    """Tests for read_text and read_files."""

    def test_reads_and_omits_failures(self, make_project: Callable[..., Path]) -> None:
        """Test that unreadable and binary files are omitted."""
        root = make_project({"a.txt": "alpha", "b.txt": "beta"})
        (root / "bin.dat").write_bytes(b"\x00\xff\xfe\xfd")

        contents = read_files(root, ["a.txt", "b.txt", "bin.dat", "missing.txt"], max_workers=2)

        assert contents == {"a.txt": "alpha", "b.txt": "beta"}

    def test_empty_list(self, tmp_path: Path) -> None:
        """Test reading nothing."""
        assert read_files(tmp_path, []) == {}

    def test_limit_splitting_multibyte_character(self, tmp_path: Path) -> None:
        """Test that a read cut inside a UTF-8 sequence keeps the decodable prefix."""
        path = tmp_path / "utf8.txt"
        path.write_text("ab" + "é" * 10, encoding="utf-8")

        assert read_text(path, limit=5) == "abé"

    def test_paths_outside_root_are_skipped(self, tmp_path: Path) -> None:
        """Test parent, absolute and outward-symlinked paths."""
        root = tmp_path / "project"
        root.mkdir()
        secret = tmp_path / "secret.txt"
        secret.write_text("TOP-SECRET-KEY")
        (root / "inside.txt").write_text("ok")
        (root / "alias.txt").symlink_to(root / "inside.txt")
        (root / "leak.txt").symlink_to(secret)

        contents = read_files(root, ["inside.txt", "alias.txt", "leak.txt", "../secret.txt", str(secret)])

        assert contents == {"inside.txt": "ok", "alias.txt": "ok"}


class TestIterFiles:
    """Tests for streamed reads."""

    def test_input_order(self, make_project: Callable[..., Path]) -> None:
        """Test that readable files come back in input order."""
        root = make_project({f"f{i}.txt": str(i) for i in range(20)})
        paths = [f"f{i}.txt" for i in reversed(range(20))] + ["missing.txt"]

        assert [rel for rel, _ in iter_files(root, paths, max_workers=2)] == paths[:-1]

    def test_reads_ahead_by_batches_only(self, make_project: Callable[..., Path]) -> None:
        """Test that taking the first file does not read the whole list."""
        root = make_project({f"f{i}.txt": "x" for i in range(100)})
        paths = [f"f{i}.txt" for i in range(100)]

        with patch("aicgen.sampling.files.read_text", wraps=read_text) as mock_read:
            files = iter_files(root, paths, max_workers=1)
            assert next(files) == ("f0.txt", "x")
            files.close()

        assert 1 <= mock_read.call_count <= READ_BATCHES_PER_WORKER
