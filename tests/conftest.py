"""Shared pytest fixtures for aicgen tests.

Fixtures are organized by category:
- Project fixtures: small sample projects written under tmp_path
- Response fixtures: provider replies and mocked LiteLLM responses
- Cache fixtures: a fingerprint cache in a temporary directory
- Logging fixtures: restore the aicgen logger between tests
"""

import json
import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from aicgen.cache.store import FingerprintCache
from aicgen.utils.logging import ROOT_LOGGER_NAME


def write_files(root: Path, files: dict[str, str]) -> Path:
    """Write ``{relative path: content}`` under root and return root."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


# =============================================================================
# Project Fixtures
# =============================================================================


GO_MAIN = '''package main

import (
	"fmt"

	"example.com/app/internal/service"
)

func main() {
	svc := service.New()
	fmt.Println(svc.Greet("world"))
}
'''

GO_SERVICE = '''package service

type Service struct{}

func New() *Service {
	return &Service{}
}

func (s *Service) Greet(name string) string {
	if name == "" {
		return "hello"
	}
	for i := 0; i < 3; i++ {
		if i == 2 && name != "x" {
			return "hello " + name
		}
	}
	return name
}
'''


@pytest.fixture
def go_project(tmp_path: Path) -> Path:
    """A small Go module with a main package and one internal package."""
    return write_files(
        tmp_path / "go-app",
        {
            "go.mod": "module example.com/app\n\ngo 1.21\n\nrequire github.com/spf13/cobra v1.8.0\n",
            "main.go": GO_MAIN,
            "internal/service/service.go": GO_SERVICE,
            "internal/service/service_test.go": "package service\n\nimport \"testing\"\n\nfunc TestGreet(t *testing.T) {}\n",
        },
    )


@pytest.fixture
def ts_project(tmp_path: Path) -> Path:
    """A TypeScript Express API with layered directories and PostgreSQL."""
    package_json = {
        "name": "ts-api",
        "main": "dist/index.js",
        "dependencies": {"express": "^4.18.0", "pg": "^8.11.0"},
        "devDependencies": {"typescript": "^5.0.0", "jest": "^29.0.0"},
    }
    return write_files(
        tmp_path / "ts-api",
        {
            "package.json": json.dumps(package_json, indent=2),
            "tsconfig.json": '{"compilerOptions": {"strict": true}}',
            "src/index.ts": "import { app } from './app';\n\napp.listen(3000);\n",
            "src/app.ts": (
                "import express from 'express';\n"
                "import { router } from './routes/users';\n\n"
                "export const app = express();\n"
                "app.use(router);\n"
            ),
            "src/routes/users.ts": (
                "import { Router } from 'express';\n"
                "import { listUsers } from '../services/users';\n\n"
                "export const router = Router();\n"
                "router.get('/users', listUsers);\n"
            ),
            "src/controllers/users.ts": "import { listUsers } from '../services/users';\n\nexport { listUsers };\n",
            "src/services/users.ts": (
                "import { findAll } from '../repositories/users';\n\n"
                "export function listUsers(req: any, res: any) {\n"
                "  if (req.query.limit && req.query.limit > 10) {\n"
                "    return res.status(400).end();\n"
                "  }\n"
                "  res.json(findAll());\n"
                "}\n"
            ),
            "src/repositories/users.ts": "export function findAll() {\n  return [];\n}\n",
            "src/services/users.test.ts": "import { listUsers } from './users';\n\ntest('lists', () => {});\n",
        },
    )


@pytest.fixture
def python_project(tmp_path: Path) -> Path:
    """A Python CLI package using click, with a src layout and tests."""
    return write_files(
        tmp_path / "py-cli",
        {
            "pyproject.toml": (
                '[project]\nname = "tool"\nversion = "0.1.0"\n'
                'dependencies = ["click>=8.0", "sqlalchemy>=2.0"]\n\n'
                '[project.scripts]\ntool = "tool.cli:main"\n\n'
                '[build-system]\nrequires = ["hatchling"]\nbuild-backend = "hatchling.build"\n'
            ),
            "src/tool/__init__.py": "",
            "src/tool/cli.py": (
                "import click\n\n"
                "from tool import core\n\n\n"
                "@click.command()\n"
                "def main():\n"
                "    core.run()\n\n\n"
                "if __name__ == '__main__':\n"
                "    main()\n"
            ),
            "src/tool/core.py": (
                "from .util import helper\n\n\n"
                "def run():\n"
                "    for i in range(3):\n"
                "        if i and helper(i):\n"
                "            print(i)\n"
            ),
            "src/tool/util.py": "def helper(value):\n    return value > 1\n",
            "tests/test_core.py": "from tool.core import run\n\n\ndef test_run():\n    run()\n",
        },
    )


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a project from {relative path: content} under tmp_path."""

    def factory(files: dict[str, str], name: str = "project") -> Path:
        return write_files(tmp_path / name, files)

    return factory


# =============================================================================
# Response Fixtures
# =============================================================================


@pytest.fixture
def valid_response_data() -> dict[str, Any]:
    """A provider response that passes validation."""
    return {
        "language": "go",
        "projectType": "cli",
        "architecture": {"pattern": "layered", "confidence": 0.8},
        "datasource": "none",
        "level": "standard",
        "testingMaturity": "medium",
        "backendStyle": "cobra-commands",
        "reasoning": "Go module with a main package and internal services.",
    }


@pytest.fixture
def valid_response_text(valid_response_data: dict[str, Any]) -> str:
    """The valid response serialized as a provider would send it."""
    return json.dumps(valid_response_data)


def _completion(content: Any) -> MagicMock:
    return MagicMock(
        choices=[MagicMock(message=MagicMock(content=content), finish_reason="stop")],
        model="test-model",
    )


@pytest.fixture
def make_completion() -> Callable[[Any], MagicMock]:
    """Factory for LiteLLM-style completion responses carrying some content."""
    return _completion


# =============================================================================
# Cache Fixtures
# =============================================================================


@pytest.fixture
def cache(tmp_path: Path) -> FingerprintCache:
    """A fingerprint cache rooted in a temporary directory."""
    return FingerprintCache(tmp_path / "cache")


# =============================================================================
# Logging Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def restore_aicgen_logger() -> Iterator[None]:
    """Undo handler and level changes made by CLI runs and logging setup."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(logger.handlers)
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
