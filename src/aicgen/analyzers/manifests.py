"""Manifest parsing.

Reads package manifests at the project root to collect dependency names,
frameworks, build tools and the package manager:
- package.json (JavaScript/TypeScript)
- requirements.txt, pyproject.toml, Pipfile (Python)
- go.mod (Go)
- Cargo.toml (Rust)
- Gemfile (Ruby)
- pom.xml, build.gradle (Java)
- pubspec.yaml (Dart)

Parsing is best-effort: a malformed manifest contributes nothing and is logged.
"""

import json
import logging
import re
import tomllib
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Known frameworks by ecosystem, keyed by dependency name
KNOWN_FRAMEWORKS: dict[str, dict[str, str]] = {
    "npm": {
        "react": "React",
        "vue": "Vue",
        "@angular/core": "Angular",
        "svelte": "Svelte",
        "next": "Next.js",
        "nuxt": "Nuxt",
        "gatsby": "Gatsby",
        "express": "Express",
        "@nestjs/core": "NestJS",
        "fastify": "Fastify",
        "koa": "Koa",
        "electron": "Electron",
        "react-native": "React Native",
    },
    "pypi": {
        "django": "Django",
        "flask": "Flask",
        "fastapi": "FastAPI",
        "starlette": "Starlette",
        "tornado": "Tornado",
        "aiohttp": "aiohttp",
        "pyramid": "Pyramid",
    },
    "go": {
        "github.com/gin-gonic/gin": "Gin",
        "github.com/labstack/echo": "Echo",
        "github.com/gofiber/fiber": "Fiber",
        "github.com/gorilla/mux": "Gorilla Mux",
        "github.com/go-chi/chi": "Chi",
    },
    "cargo": {
        "actix-web": "Actix Web",
        "rocket": "Rocket",
        "axum": "Axum",
        "warp": "Warp",
        "tauri": "Tauri",
    },
    "rubygems": {
        "rails": "Rails",
        "sinatra": "Sinatra",
        "hanami": "Hanami",
    },
    "maven": {
        "org.springframework.boot": "Spring Boot",
        "io.quarkus": "Quarkus",
        "io.micronaut": "Micronaut",
    },
    "pub": {
        "flutter": "Flutter",
    },
}

# Dependencies reported as build tools rather than frameworks
KNOWN_BUILD_TOOLS: dict[str, set[str]] = {
    "npm": {"typescript", "vite", "webpack", "rollup", "esbuild", "jest", "mocha", "vitest"},
    "pypi": {"pytest", "tox", "nox", "mypy", "ruff", "black"},
    "cargo": {"criterion"},
    "rubygems": {"rake", "rspec"},
}

# Build tools implied by a file at the project root
MARKER_BUILD_TOOLS: dict[str, str] = {
    "Makefile": "make",
    "Dockerfile": "docker",
    "pom.xml": "maven",
    "build.gradle": "gradle",
    "build.gradle.kts": "gradle",
    "Cargo.toml": "cargo",
    "CMakeLists.txt": "cmake",
}

_REQUIREMENT_PATTERN = re.compile(r"^([a-zA-Z0-9_.\-]+)(\[[^\]]*\])?\s*(==|>=|<=|>|<|~=|!=)?(.*)$")
_GO_REQUIRE_BLOCK = re.compile(r"require\s*\(\s*(.*?)\s*\)", re.DOTALL)
_GO_REQUIRE_LINE = re.compile(r"^require[ \t]+([^\s(]+)[ \t]+\S+", re.MULTILINE)
_GEM_PATTERN = re.compile(r"""^\s*gem\s+['"]([^'"]+)['"]""", re.MULTILINE)
_GRADLE_PATTERN = re.compile(
    r"""(?:implementation|api|compile|testImplementation)\s*\(?\s*['"]([^'":]+):([^'":]+)"""
)


@dataclass
class ManifestInfo:
    """Aggregated manifest data for one project.

    Attributes:
        dependencies: Dependency names, insertion ordered and unique
        frameworks: Framework display names
        build_tools: Build tool names
        package_manager: Detected package manager, or "unknown"
        workspaces: package.json declares workspaces
        package_json: Parsed root package.json, if any
        has_typescript_dependency: typescript appears in package.json dependencies
    """

    dependencies: list[str] = field(default_factory=list)
    frameworks: list[str] = field(default_factory=list)
    build_tools: list[str] = field(default_factory=list)
    package_manager: str = "unknown"
    workspaces: bool = False
    package_json: dict[str, Any] | None = None
    has_typescript_dependency: bool = False

    def add_dependency(self, name: str, ecosystem: str) -> None:
        """Record a dependency and any framework or build tool it implies."""
        if name not in self.dependencies:
            self.dependencies.append(name)

        key = name.lower() if ecosystem in ("pypi", "rubygems", "cargo") else name
        for framework_pkg, framework_name in KNOWN_FRAMEWORKS.get(ecosystem, {}).items():
            if key == framework_pkg or (ecosystem in ("go", "maven") and key.startswith(framework_pkg)):
                self.add_framework(framework_name)
                break

        if key in KNOWN_BUILD_TOOLS.get(ecosystem, set()):
            self.add_build_tool(key)

    def add_framework(self, name: str) -> None:
        """Record a framework once."""
        if name not in self.frameworks:
            self.frameworks.append(name)

    def add_build_tool(self, name: str) -> None:
        """Record a build tool once."""
        if name not in self.build_tools:
            self.build_tools.append(name)


class ManifestParser:
    """Parses the manifests found at a project root."""

    def __init__(self, root: Path) -> None:
        """Initialize the manifest parser.

        Args:
            root: Project root directory
        """
        self.root = root

    def parse(self) -> ManifestInfo:
        """Parse every known manifest present at the root.

        Returns:
            ManifestInfo with everything that could be parsed
        """
        info = ManifestInfo()

        parsers: list[tuple[str, Callable[[Path, ManifestInfo], None]]] = [
            ("package.json", self._parse_package_json),
            ("requirements.txt", self._parse_requirements_txt),
            ("pyproject.toml", self._parse_pyproject_toml),
            ("Pipfile", self._parse_pipfile),
            ("go.mod", self._parse_go_mod),
            ("Cargo.toml", self._parse_cargo_toml),
            ("Gemfile", self._parse_gemfile),
            ("pom.xml", self._parse_pom_xml),
            ("build.gradle", self._parse_build_gradle),
            ("build.gradle.kts", self._parse_build_gradle),
            ("pubspec.yaml", self._parse_pubspec_yaml),
        ]

        for filename, parser in parsers:
            file_path = self.root / filename
            if not file_path.is_file():
                continue
            try:
                parser(file_path, info)
                logger.debug("Parsed %s", filename)
            except Exception as e:
                logger.warning("Failed to parse %s: %s", file_path, e)

        for marker, tool in MARKER_BUILD_TOOLS.items():
            if (self.root / marker).is_file():
                info.add_build_tool(tool)

        info.package_manager = self._detect_package_manager(info)
        return info

    # =========================================================================
    # package.json (JavaScript/TypeScript)
    # =========================================================================

    def _parse_package_json(self, file_path: Path, info: ManifestInfo) -> None:
        data = json.loads(file_path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            return
        info.package_json = data
        info.workspaces = bool(data.get("workspaces"))

        for section in ("dependencies", "devDependencies", "peerDependencies"):
            deps = data.get(section) or {}
            if not isinstance(deps, dict):
                continue
            for name in deps:
                info.add_dependency(name, "npm")
                if name == "typescript":
                    info.has_typescript_dependency = True

    # =========================================================================
    # Python manifests
    # =========================================================================

    def _parse_requirements_txt(self, file_path: Path, info: ManifestInfo) -> None:
        for line in file_path.read_text(encoding="utf-8").splitlines():
            line = line.split("#", 1)[0].strip()
            if not line or line.startswith("-"):
                continue
            match = _REQUIREMENT_PATTERN.match(line)
            if match:
                info.add_dependency(match.group(1).lower(), "pypi")

    def _parse_pyproject_toml(self, file_path: Path, info: ManifestInfo) -> None:
        data = tomllib.loads(file_path.read_text(encoding="utf-8"))

        project = data.get("project", {})
        requirements: list[str] = list(project.get("dependencies", []))
        for extra in (project.get("optional-dependencies") or {}).values():
            requirements.extend(extra)
        for requirement in requirements:
            match = _REQUIREMENT_PATTERN.match(requirement.strip())
            if match:
                info.add_dependency(match.group(1).lower(), "pypi")

        poetry = data.get("tool", {}).get("poetry", {})
        if poetry:
            info.add_build_tool("poetry")
            for section in ("dependencies", "dev-dependencies"):
                for name in poetry.get(section, {}):
                    if name.lower() != "python":
                        info.add_dependency(name.lower(), "pypi")
            for group in (poetry.get("group") or {}).values():
                for name in (group or {}).get("dependencies", {}):
                    info.add_dependency(name.lower(), "pypi")

        backend = data.get("build-system", {}).get("build-backend", "")
        for tool in ("hatchling", "setuptools", "flit_core", "pdm", "maturin"):
            if backend.startswith(tool):
                info.add_build_tool(tool)
                break

    def _parse_pipfile(self, file_path: Path, info: ManifestInfo) -> None:
        data = tomllib.loads(file_path.read_text(encoding="utf-8"))
        for section in ("packages", "dev-packages"):
            for name in data.get(section, {}):
                info.add_dependency(name.lower(), "pypi")

    # =========================================================================
    # go.mod (Go)
    # =========================================================================

    def _parse_go_mod(self, file_path: Path, info: ManifestInfo) -> None:
        content = file_path.read_text(encoding="utf-8")
        modules: list[str] = []
        for block in _GO_REQUIRE_BLOCK.findall(content):
            for line in block.splitlines():
                line = line.split("//", 1)[0].strip()
                if line:
                    modules.append(line.split()[0])
        modules.extend(_GO_REQUIRE_LINE.findall(content))
        for module in modules:
            info.add_dependency(module, "go")

    # =========================================================================
    # Cargo.toml (Rust)
    # =========================================================================

    def _parse_cargo_toml(self, file_path: Path, info: ManifestInfo) -> None:
        data = tomllib.loads(file_path.read_text(encoding="utf-8"))
        for section in ("dependencies", "dev-dependencies", "build-dependencies"):
            for name in data.get(section, {}):
                info.add_dependency(name, "cargo")
        if "workspace" in data:
            info.workspaces = True

    # =========================================================================
    # Gemfile (Ruby)
    # =========================================================================

    def _parse_gemfile(self, file_path: Path, info: ManifestInfo) -> None:
        for name in _GEM_PATTERN.findall(file_path.read_text(encoding="utf-8")):
            info.add_dependency(name, "rubygems")

    # =========================================================================
    # pom.xml / build.gradle (Java)
    # =========================================================================

    def _parse_pom_xml(self, file_path: Path, info: ManifestInfo) -> None:
        content = file_path.read_text(encoding="utf-8")
        for group_id, artifact_id in re.findall(
            r"<dependency>\s*<groupId>([^<]+)</groupId>\s*<artifactId>([^<]+)</artifactId>",
            content,
        ):
            info.add_dependency(f"{group_id.strip()}:{artifact_id.strip()}", "maven")
        # Spring Boot projects usually inherit it as the parent POM
        parent = re.search(r"<parent>\s*<groupId>([^<]+)</groupId>", content)
        if parent:
            info.add_dependency(f"{parent.group(1).strip()}:parent", "maven")

    def _parse_build_gradle(self, file_path: Path, info: ManifestInfo) -> None:
        content = file_path.read_text(encoding="utf-8")
        for group_id, artifact_id in _GRADLE_PATTERN.findall(content):
            info.add_dependency(f"{group_id}:{artifact_id}", "maven")
        if "org.springframework.boot" in content:
            info.add_framework("Spring Boot")

    # =========================================================================
    # pubspec.yaml (Dart)
    # =========================================================================

    def _parse_pubspec_yaml(self, file_path: Path, info: ManifestInfo) -> None:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            return
        for section in ("dependencies", "dev_dependencies"):
            for name in data.get(section) or {}:
                info.add_dependency(name, "pub")

    # =========================================================================
    # Package manager
    # =========================================================================

    def _detect_package_manager(self, info: ManifestInfo) -> str:
        """Pick the package manager from lockfiles and manifests."""

        def exists(name: str) -> bool:
            return (self.root / name).is_file()

        if info.package_json is not None or exists("package.json"):
            if exists("bun.lockb") or exists("bun.lock"):
                return "bun"
            if exists("pnpm-lock.yaml"):
                return "pnpm"
            if exists("yarn.lock"):
                return "yarn"
            return "npm"
        if exists("poetry.lock") or "poetry" in info.build_tools:
            return "poetry"
        if exists("Pipfile"):
            return "pipenv"
        if exists("uv.lock"):
            return "uv"
        if exists("requirements.txt") or exists("pyproject.toml") or exists("setup.py"):
            return "pip"
        if exists("Cargo.toml"):
            return "cargo"
        if exists("go.mod"):
            return "go"
        if exists("Gemfile"):
            return "bundler"
        if exists("pom.xml"):
            return "maven"
        if exists("build.gradle") or exists("build.gradle.kts"):
            return "gradle"
        if exists("pubspec.yaml"):
            return "pub"
        return "unknown"
