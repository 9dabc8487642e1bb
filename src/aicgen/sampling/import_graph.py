"""Import graph analysis for file sampling.

Parses import statements with regular expressions and keeps only edges that
resolve to files inside the project; third-party packages never appear in the
graph. Files imported by many others ("hub files") rank highest.

This is a heuristic: imports inside strings or comments are counted, and
dynamic or aliased imports that the patterns miss are not.
"""

import logging
import posixpath
import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from aicgen.analyzers.languages import language_for_path
from aicgen.sampling.files import iter_files, source_files

logger = logging.getLogger(__name__)

JS_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")

_JS_IMPORT = re.compile(r"""(?:^|[;\s])(?:import|export)\s+(?:[^'"();]*?\s+from\s+)?['"]([^'"]+)['"]""", re.MULTILINE)
_JS_REQUIRE = re.compile(r"""require\s*\(\s*['"]([^'"]+)['"]\s*\)""")
_JS_DYNAMIC = re.compile(r"""import\s*\(\s*['"]([^'"]+)['"]\s*\)""")

_PY_FROM = re.compile(r"^[ \t]*from[ \t]+(\.*)([\w.]*)[ \t]+import[ \t]+(\([^)]*\)|[^\n#]+)", re.MULTILINE)
_PY_IMPORT = re.compile(r"^[ \t]*import\s+([\w.]+(?:\s*,\s*[\w.]+)*)", re.MULTILINE)

_GO_SINGLE = re.compile(r"""^\s*import\s+(?:[\w.]+\s+)?"([^"]+)\"""", re.MULTILINE)
_GO_BLOCK = re.compile(r"^\s*import\s*\((.*?)\)", re.MULTILINE | re.DOTALL)
_GO_BLOCK_LINE = re.compile(r"""^\s*(?:[\w.]+\s+)?"([^"]+)\"""", re.MULTILINE)
_GO_MODULE = re.compile(r"^module\s+(\S+)", re.MULTILINE)

_RUST_MOD = re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?mod\s+(\w+)\s*;", re.MULTILINE)
_RUST_USE = re.compile(r"^\s*(?:pub\s+)?use\s+crate::([\w:]+)", re.MULTILINE)

_JAVA_IMPORT = re.compile(r"^\s*import\s+(?:static\s+)?([\w.]+)\s*;", re.MULTILINE)
_RUBY_REQUIRE = re.compile(r"""^\s*require_relative\s+['"]([^'"]+)['"]""", re.MULTILINE)
_DART_IMPORT = re.compile(r"""^\s*(?:import|export|part)\s+['"]([^'"]+)['"]""", re.MULTILINE)


@dataclass
class ImportGraph:
    """Directed graph of project-internal imports.

    Attributes:
        edges: (importer, imported) pairs of relative paths
        inbound: Inbound edge count per imported file
    """

    edges: list[tuple[str, str]] = field(default_factory=list)
    inbound: Counter[str] = field(default_factory=Counter)

    def hubs(self) -> list[str]:
        """Files with at least one importer, most imported first."""
        ranked = sorted(self.inbound.items(), key=lambda item: (-item[1], item[0]))
        return [path for path, count in ranked if count > 0]


class ImportGraphBuilder:
    """Builds an ImportGraph for one project."""

    def __init__(self, root: Path, files: list[str], language: str) -> None:
        """Initialize the import graph builder.

        Args:
            root: Project root
            files: Relative paths from static analysis
            language: Primary language; only that language's files are parsed
        """
        self.root = root
        self.language = language
        self.files = source_files(files, language)
        self._file_set = set(self.files)
        self._go_module = self._read_go_module()

    def build(self) -> ImportGraph:
        """Parse every source file and resolve its imports."""
        graph = ImportGraph()
        for path, content in iter_files(self.root, self.files):
            for target in self._imports_of(path, content):
                if target != path:
                    graph.edges.append((path, target))
                    graph.inbound[target] += 1
        logger.debug("Import graph: %d files, %d edges", len(self.files), len(graph.edges))
        return graph

    def _imports_of(self, path: str, content: str) -> set[str]:
        language = language_for_path(path)
        if language in ("typescript", "javascript"):
            return self._resolve_js(path, content)
        if language == "python":
            return self._resolve_python(path, content)
        if language == "go":
            return self._resolve_go(content)
        if language == "rust":
            return self._resolve_rust(path, content)
        if language == "java":
            return self._resolve_java(content)
        if language == "ruby":
            return self._resolve_relative(path, _RUBY_REQUIRE.findall(content), (".rb",))
        if language == "dart":
            specs = [s for s in _DART_IMPORT.findall(content) if not s.startswith(("package:", "dart:"))]
            return self._resolve_relative(path, specs, ())
        return set()

    def _existing(self, candidates: list[str]) -> str | None:
        for candidate in candidates:
            normalized = posixpath.normpath(candidate)
            if normalized in self._file_set:
                return normalized
        return None

    # =========================================================================
    # JavaScript / TypeScript
    # =========================================================================

    def _resolve_js(self, path: str, content: str) -> set[str]:
        specs = _JS_IMPORT.findall(content) + _JS_REQUIRE.findall(content) + _JS_DYNAMIC.findall(content)
        relative = [spec for spec in specs if spec.startswith(("./", "../"))]
        return self._resolve_relative(path, relative, JS_EXTENSIONS)

    def _resolve_relative(self, path: str, specs: list[str], extensions: tuple[str, ...]) -> set[str]:
        directory = posixpath.dirname(path)
        targets: set[str] = set()
        for spec in specs:
            base = posixpath.join(directory, spec)
            stem, ext = posixpath.splitext(base)
            candidates = [base]
            # TypeScript ESM imports name the emitted .js file
            if ext in (".js", ".jsx", ".mjs"):
                candidates.extend(stem + alt for alt in (".ts", ".tsx", ".mts"))
            candidates.extend(base + e for e in extensions)
            candidates.extend(posixpath.join(base, "index" + e) for e in extensions)
            target = self._existing(candidates)
            if target:
                targets.add(target)
        return targets

    # =========================================================================
    # Python
    # =========================================================================

    def _resolve_python(self, path: str, content: str) -> set[str]:
        targets: set[str] = set()
        package_dir = posixpath.dirname(path)

        for dots, module, names in _PY_FROM.findall(content):
            imported = [n.split()[0] for n in names.strip("()").replace("\n", " ").split(",") if n.strip()]
            if not dots:
                for candidate in [module] + [f"{module}.{name}" for name in imported]:
                    target = self._python_absolute(candidate)
                    if target:
                        targets.add(target)
                continue

            base = package_dir
            for _ in range(len(dots) - 1):
                base = posixpath.dirname(base)
            module_path = posixpath.join(base, module.replace(".", "/")) if module else base
            if module:
                target = self._python_module(module_path)
                if target:
                    targets.add(target)
            # from . import a, b  /  from .pkg import submodule
            for name in imported:
                if name != "*":
                    target = self._python_module(posixpath.join(module_path, name))
                    if target:
                        targets.add(target)

        for group in _PY_IMPORT.findall(content):
            for module in (m.strip() for m in group.split(",")):
                target = self._python_absolute(module)
                if target:
                    targets.add(target)
        return targets

    def _python_module(self, module_path: str) -> str | None:
        module_path = module_path.strip("/")
        if not module_path or module_path == ".":
            return None
        return self._existing([module_path + ".py", posixpath.join(module_path, "__init__.py")])

    def _python_absolute(self, module: str) -> str | None:
        """Resolve an absolute import that names a module inside the project."""
        if not module:
            return None
        module_path = module.replace(".", "/")
        return self._python_module(module_path) or self._python_module(posixpath.join("src", module_path))

    # =========================================================================
    # Go
    # =========================================================================

    def _read_go_module(self) -> str | None:
        go_mod = self.root / "go.mod"
        if self.language != "go" or not go_mod.is_file():
            return None
        try:
            match = _GO_MODULE.search(go_mod.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError):
            return None
        return match.group(1) if match else None

    def _resolve_go(self, content: str) -> set[str]:
        if not self._go_module:
            return set()
        specs = _GO_SINGLE.findall(content)
        for block in _GO_BLOCK.findall(content):
            specs.extend(_GO_BLOCK_LINE.findall(block))

        targets: set[str] = set()
        prefix = self._go_module + "/"
        for spec in specs:
            if not spec.startswith(prefix):
                continue
            package_dir = spec[len(prefix):]
            targets.update(
                f for f in self.files
                if posixpath.dirname(f) == package_dir and f.endswith(".go")
            )
        return targets

    # =========================================================================
    # Rust
    # =========================================================================

    def _resolve_rust(self, path: str, content: str) -> set[str]:
        targets: set[str] = set()
        pure = PurePosixPath(path)
        if pure.name in ("main.rs", "lib.rs", "mod.rs"):
            module_dir = str(pure.parent)
        else:
            module_dir = str(pure.parent / pure.stem)

        for name in _RUST_MOD.findall(content):
            base = posixpath.join(module_dir, name)
            target = self._existing([base + ".rs", posixpath.join(base, "mod.rs")])
            if target:
                targets.add(target)

        for use_path in _RUST_USE.findall(content):
            parts = [p for p in use_path.split("::") if p and p != "self"]
            # Longest prefix that names a module file wins
            for end in range(len(parts), 0, -1):
                base = posixpath.join("src", *parts[:end])
                target = self._existing([base + ".rs", posixpath.join(base, "mod.rs")])
                if target:
                    targets.add(target)
                    break
        return targets

    # =========================================================================
    # Java
    # =========================================================================

    def _resolve_java(self, content: str) -> set[str]:
        targets: set[str] = set()
        for qualified in _JAVA_IMPORT.findall(content):
            suffix = qualified.replace(".", "/") + ".java"
            for f in self.files:
                if f == suffix or f.endswith("/" + suffix):
                    targets.add(f)
                    break
        return targets


def build_import_graph(root: Path, files: list[str], language: str) -> ImportGraph:
    """Convenience function to build an import graph.

    Args:
        root: Project root
        files: Relative paths from static analysis
        language: Primary language

    Returns:
        ImportGraph of project-internal imports
    """
    return ImportGraphBuilder(root, files, language).build()
