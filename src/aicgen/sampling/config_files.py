"""Configuration file ranking.

Config files tell the AI which frameworks and tools are really in use. They are
ranked by a fixed priority table: framework config, then type-system config,
monorepo tooling, package manifests, test config, container files, lint and
format config, and CI definitions. An exact filename match scores higher than a
name that only contains a known config name.
"""

from pathlib import PurePosixPath

# (filename, priority) in descending priority
CONFIG_PRIORITIES: list[tuple[str, int]] = [
    # Framework config
    ("next.config.js", 100),
    ("next.config.mjs", 100),
    ("next.config.ts", 100),
    ("nuxt.config.ts", 100),
    ("nuxt.config.js", 100),
    ("angular.json", 95),
    ("vite.config.ts", 90),
    ("vite.config.js", 90),
    ("webpack.config.js", 90),
    ("gatsby-config.js", 90),
    ("svelte.config.js", 90),
    ("nest-cli.json", 90),
    ("settings.py", 90),
    ("application.yml", 90),
    ("application.properties", 90),
    # Type-system config
    ("tsconfig.json", 85),
    ("jsconfig.json", 85),
    ("mypy.ini", 85),
    # Monorepo tooling
    ("nx.json", 80),
    ("turbo.json", 80),
    ("lerna.json", 80),
    ("rush.json", 80),
    ("pnpm-workspace.yaml", 80),
    # Package manifests
    ("package.json", 75),
    ("pyproject.toml", 75),
    ("cargo.toml", 75),
    ("go.mod", 75),
    ("gemfile", 75),
    ("pom.xml", 75),
    ("build.gradle", 75),
    ("build.gradle.kts", 75),
    ("pubspec.yaml", 75),
    ("package.swift", 75),
    ("requirements.txt", 72),
    ("setup.py", 72),
    ("setup.cfg", 70),
    # Test config
    ("jest.config.js", 70),
    ("jest.config.ts", 70),
    ("vitest.config.ts", 70),
    ("playwright.config.ts", 70),
    ("cypress.config.ts", 70),
    ("pytest.ini", 70),
    ("conftest.py", 68),
    ("tox.ini", 65),
    # Containers
    ("dockerfile", 65),
    ("docker-compose.yml", 65),
    ("docker-compose.yaml", 65),
    ("serverless.yml", 65),
    # Lint and format config
    (".eslintrc.json", 60),
    (".eslintrc.js", 60),
    ("eslint.config.js", 60),
    (".golangci.yml", 60),
    ("ruff.toml", 60),
    (".rubocop.yml", 60),
    (".prettierrc", 55),
    ("prettier.config.js", 55),
    (".editorconfig", 50),
    # CI definitions
    (".gitlab-ci.yml", 50),
    ("jenkinsfile", 50),
]

_PRIORITY_BY_NAME = dict(CONFIG_PRIORITIES)
CI_DIRECTORY_PRIORITY = 50
SUBSTRING_PENALTY = 5
# Base names matched as substrings (e.g. "jest.config" in "jest.config.mjs")
_SUBSTRING_KEYS = [(name.rsplit(".", 1)[0], score) for name, score in CONFIG_PRIORITIES if "." in name.strip(".")]
_SUBSTRING_EXTENSIONS = (".json", ".yml", ".yaml", ".toml", ".ini", ".cfg", ".txt", ".properties", ".mjs", ".cjs", ".mts", ".cts")


def config_priority(path: str) -> int | None:
    """Return the priority of a config file, or None if it is not one.

    Args:
        path: Relative file path

    Returns:
        Priority, higher is more important
    """
    name = PurePosixPath(path).name.lower()
    if name in _PRIORITY_BY_NAME:
        return _PRIORITY_BY_NAME[name]
    if path.startswith(".github/workflows/") and name.endswith((".yml", ".yaml")):
        return CI_DIRECTORY_PRIORITY
    if "lock" in name or not name.endswith(_SUBSTRING_EXTENSIONS):
        return None
    best: int | None = None
    for key, score in _SUBSTRING_KEYS:
        if len(key) > 3 and key in name:
            candidate = score - SUBSTRING_PENALTY
            best = candidate if best is None else max(best, candidate)
    return best


def rank_config_files(files: list[str]) -> list[str]:
    """Return config files by descending priority, shallow paths first on ties."""
    scored = []
    for path in files:
        priority = config_priority(path)
        if priority is not None:
            scored.append((priority, path))
    scored.sort(key=lambda item: (-item[0], item[1].count("/"), item[1]))
    return [path for _, path in scored]
