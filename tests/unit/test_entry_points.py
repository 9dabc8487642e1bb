"""Unit tests for entry point detection."""

import json
from collections.abc import Callable
from pathlib import Path

from aicgen.analyzers.static_analyzer import analyze_project
from aicgen.models.metadata import ProjectMetadata
from aicgen.sampling.entry_points import EntryPointDetector, detect_entry_points


class TestEntryPointDetector:
    """Tests for EntryPointDetector."""

    def test_go_main(self, go_project: Path) -> None:
        """Test the conventional Go main package."""
        metadata = analyze_project(go_project)

        assert detect_entry_points(go_project, metadata) == ["main.go"]

    def test_express_framework_and_language_paths(self, ts_project: Path) -> None:
        """Test framework markers ahead of language conventions."""
        metadata = analyze_project(ts_project)

        entry_points = detect_entry_points(ts_project, metadata)

        assert entry_points == ["src/app.ts", "src/index.ts"]

    def test_build_output_main_is_ignored(self, ts_project: Path) -> None:
        """Test that package.json main pointing into dist/ is skipped."""
        metadata = analyze_project(ts_project)

        assert not any(path.startswith("dist/") for path in detect_entry_points(ts_project, metadata))

    def test_pyproject_scripts(self, python_project: Path) -> None:
        """Test that console scripts resolve to their module under src/."""
        metadata = analyze_project(python_project)

        assert detect_entry_points(python_project, metadata) == ["src/tool/cli.py"]

    def test_package_json_exports_and_bin(self, make_project: Callable[..., Path]) -> None:
        """Test exports conditions and bin entries."""
        package_json = {
            "exports": {".": {"import": "./lib/index.mjs", "require": "./lib/index.cjs"}},
            "bin": {"tool": "./bin/tool.js"},
        }
        root = make_project({
            "package.json": json.dumps(package_json),
            "lib/index.mjs": "export default 1;\n",
            "lib/index.cjs": "module.exports = 1;\n",
            "bin/tool.js": "#!/usr/bin/env node\n",
        })

        entry_points = detect_entry_points(root, analyze_project(root))

        assert entry_points[:3] == ["lib/index.mjs", "lib/index.cjs", "bin/tool.js"]

    def test_cargo_targets(self, make_project: Callable[..., Path]) -> None:
        """Test Cargo bin targets ahead of src/main.rs."""
        root = make_project({
            "Cargo.toml": '[package]\nname = "x"\n\n[[bin]]\nname = "tool"\npath = "src/bin/tool.rs"\n',
            "src/bin/tool.rs": "fn main() {}\n",
            "src/main.rs": "fn main() {}\n",
        })

        entry_points = detect_entry_points(root, analyze_project(root))

        assert entry_points == ["src/bin/tool.rs", "src/main.rs"]

    def test_glob_patterns(self, make_project: Callable[..., Path]) -> None:
        """Test wildcard patterns such as cmd/*/main.go."""
        root = make_project({
            "go.mod": "module example.com/tools\n",
            "cmd/api/main.go": "package main\n",
            "cmd/worker/main.go": "package main\n",
        })

        entry_points = detect_entry_points(root, analyze_project(root))

        assert entry_points == ["cmd/api/main.go", "cmd/worker/main.go"]

    def test_content_fallback(self, make_project: Callable[..., Path]) -> None:
        """Test that a main routine is found by content when no path matches."""
        root = make_project({
            "go.mod": "module example.com/svc\n",
            "pkg/util/strings.go": "package util\n",
            "pkg/server/run.go": "package main\n\nfunc main() {\n}\n",
        })

        assert detect_entry_points(root, analyze_project(root)) == ["pkg/server/run.go"]

    def test_parent_paths_are_rejected(self, tmp_path: Path) -> None:
        """Test that declared entries cannot escape the project."""
        root = tmp_path / "inner"
        root.mkdir()
        (tmp_path / "outside.js").write_text("x")
        (root / "package.json").write_text('{"main": "../outside.js"}')
        metadata = ProjectMetadata(files=["package.json"], language="javascript")

        assert EntryPointDetector(root, metadata).detect() == []

    def test_absolute_paths_are_rejected(self, tmp_path: Path) -> None:
        """Test that absolute manifest entries are ignored even when the file exists."""
        root = tmp_path / "inner"
        root.mkdir()
        outside = tmp_path / "secret.js"
        outside.write_text("module.exports = 'key';\n")
        (root / "package.json").write_text(json.dumps({"main": str(outside), "bin": str(outside)}))
        (root / "Cargo.toml").write_text(f'[package]\nname = "x"\n\n[lib]\npath = "{outside}"\n')
        metadata = ProjectMetadata(files=["Cargo.toml", "package.json"], language="javascript")

        assert EntryPointDetector(root, metadata).detect() == []

    def test_only_walked_files_qualify(self, tmp_path: Path) -> None:
        """Test that a declared file missing from the walk is not an entry point."""
        (tmp_path / "package.json").write_text('{"main": "deep/a/b/c/d/index.js"}')
        deep = tmp_path / "deep" / "a" / "b" / "c" / "d"
        deep.mkdir(parents=True)
        (deep / "index.js").write_text("x\n")
        metadata = ProjectMetadata(files=["package.json"], language="javascript")

        assert EntryPointDetector(tmp_path, metadata).detect() == []

    def test_no_entry_points(self, make_project: Callable[..., Path]) -> None:
        """Test a project with nothing that looks like an entry point."""
        root = make_project({"README.md": "# docs"})

        assert detect_entry_points(root, analyze_project(root)) == []
