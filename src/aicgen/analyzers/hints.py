"""Heuristic hints derived from file layout and dependencies.

Each hint is an independent predicate over the walked paths and dependency
names; several hints may fire for the same project. The predicates are
deliberately shallow (names and paths only, no file contents beyond manifests)
and will produce false positives on unusual layouts.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from aicgen.models.metadata import DatabaseHints, TestingHints


@dataclass
class HintInputs:
    """Everything a hint predicate may look at.

    Attributes:
        structure: Relative directory paths
        files: Relative file paths
        dependencies: Dependency names from manifests
        root_dirs: Directory names directly under the root (including ignored build dirs)
    """

    structure: list[str]
    files: list[str]
    dependencies: list[str]
    root_dirs: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.dir_names = {PurePosixPath(d).name.lower() for d in self.structure}
        self.dir_names |= {d.lower() for d in self.root_dirs}
        self.file_names = {PurePosixPath(f).name.lower() for f in self.files}
        self.root_files = {f.lower() for f in self.files if "/" not in f}
        self.deps = {d.lower() for d in self.dependencies}

    def has_dir(self, *names: str) -> bool:
        """True if any directory (at any walked depth) has one of ``names``."""
        return any(name in self.dir_names for name in names)

    def has_root_file(self, *names: str) -> bool:
        """True if one of ``names`` exists at the project root."""
        return any(name.lower() in self.root_files for name in names)

    def has_file(self, *names: str) -> bool:
        """True if a file with one of ``names`` exists at any walked depth."""
        return any(name.lower() in self.file_names for name in names)

    def has_dep(self, *names: str) -> bool:
        """True if a dependency equals or is namespaced under one of ``names``."""
        for name in names:
            if name in self.deps:
                return True
            if any(dep.startswith(name + "/") for dep in self.deps):
                return True
        return False

    def path_matches(self, pattern: re.Pattern[str]) -> bool:
        """True if any file path matches ``pattern``."""
        return any(pattern.search(f) for f in self.files)


HintRule = tuple[str, Callable[[HintInputs], bool]]


def _services_structure(h: HintInputs) -> bool:
    service_dirs = [
        d for d in h.structure
        if PurePosixPath(d).parent.name.lower() in ("services", "microservices")
    ]
    return len(service_dirs) >= 2 or h.has_dir("microservices")


ARCHITECTURE_RULES: list[HintRule] = [
    ("nx-monorepo", lambda h: h.has_root_file("nx.json")),
    ("turborepo", lambda h: h.has_root_file("turbo.json")),
    ("lerna-monorepo", lambda h: h.has_root_file("lerna.json")),
    ("pnpm-workspace", lambda h: h.has_root_file("pnpm-workspace.yaml")),
    ("workspace-structure", lambda h: "packages" in h.root_dirs or "apps" in h.root_dirs),
    ("microservices-structure", _services_structure),
    ("docker-compose", lambda h: h.has_root_file("docker-compose.yml", "docker-compose.yaml", "compose.yaml")),
    ("kubernetes", lambda h: h.has_dir("k8s", "kubernetes", "helm")),
    ("serverless-framework", lambda h: h.has_root_file("serverless.yml", "serverless.yaml")),
    ("netlify", lambda h: h.has_root_file("netlify.toml")),
    ("vercel", lambda h: h.has_root_file("vercel.json")),
    ("aws-sam", lambda h: h.has_root_file("samconfig.toml")),
    ("serverless-functions", lambda h: h.has_dir("functions", "lambdas", "lambda")),
    ("ddd-structure", lambda h: h.has_dir("domain") and h.has_dir("aggregates", "aggregate", "entities", "entity", "value-objects", "valueobjects")),
    ("bounded-contexts", lambda h: h.has_dir("bounded-contexts", "contexts")),
    ("hexagonal-layers", lambda h: h.has_dir("domain") and h.has_dir("infrastructure")),
    ("ports-and-adapters", lambda h: h.has_dir("adapters", "ports")),
    ("use-cases", lambda h: h.has_dir("use-cases", "usecases", "use_cases", "application")),
    ("event-driven", lambda h: h.has_dir("events", "handlers", "consumers", "subscribers") and h.has_dep("kafkajs", "amqplib", "kafka-python", "pika", "celery", "nats", "github.com/segmentio/kafka-go", "@aws-sdk/client-sqs")),
    ("message-queue", lambda h: h.has_dep("kafkajs", "amqplib", "bullmq", "bull", "kafka-python", "pika", "celery", "github.com/segmentio/kafka-go", "github.com/rabbitmq/amqp091-go")),
    ("mvc-structure", lambda h: h.has_dir("controllers") and h.has_dir("models") and h.has_dir("views")),
    ("layered-structure", lambda h: h.has_dir("controllers", "handlers") and h.has_dir("services") and h.has_dir("repositories", "repository", "models")),
    ("modular-structure", lambda h: h.has_dir("modules")),
]

# (dependency names, display name, is_sql)
DATABASE_DEPENDENCIES: list[tuple[tuple[str, ...], str, bool]] = [
    (("pg", "pg-promise", "postgres", "psycopg2", "psycopg2-binary", "psycopg", "asyncpg", "github.com/lib/pq", "github.com/jackc/pgx", "tokio-postgres", "org.postgresql:postgresql"), "PostgreSQL", True),
    (("mysql", "mysql2", "pymysql", "mysqlclient", "github.com/go-sql-driver/mysql", "mysql:mysql-connector-java"), "MySQL", True),
    (("sqlite3", "better-sqlite3", "aiosqlite", "github.com/mattn/go-sqlite3", "rusqlite"), "SQLite", True),
    (("prisma", "@prisma/client", "typeorm", "sequelize", "knex", "drizzle-orm", "mikro-orm", "@mikro-orm/core"), "SQL ORM", True),
    (("sqlalchemy", "flask-sqlalchemy"), "SQLAlchemy", True),
    (("django",), "Django ORM", True),
    (("gorm.io/gorm", "github.com/jinzhu/gorm"), "GORM", True),
    (("diesel", "sqlx"), "Rust SQL", True),
    (("activerecord",), "ActiveRecord", True),
    (("org.springframework.boot:spring-boot-starter-data-jpa", "org.hibernate:hibernate-core"), "JPA", True),
    (("mongodb", "mongoose", "pymongo", "motor", "mongoengine", "go.mongodb.org/mongo-driver", "mongodb-driver"), "MongoDB", False),
    (("redis", "ioredis", "github.com/go-redis/redis", "github.com/redis/go-redis"), "Redis", False),
    (("@aws-sdk/client-dynamodb", "dynamoose", "pynamodb"), "DynamoDB", False),
    (("cassandra-driver",), "Cassandra", False),
    (("firebase", "firebase-admin", "@google-cloud/firestore"), "Firestore", False),
    (("@elastic/elasticsearch", "elasticsearch"), "Elasticsearch", False),
]

_SQL_FILE = re.compile(r"\.sql$", re.IGNORECASE)


def detect_architecture_hints(h: HintInputs) -> list[str]:
    """Return every architecture hint whose predicate holds."""
    return [name for name, predicate in ARCHITECTURE_RULES if predicate(h)]


def detect_database_hints(h: HintInputs) -> DatabaseHints:
    """Collect datastore signals from dependencies and files."""
    hints = DatabaseHints()

    def add(name: str, is_sql: bool) -> None:
        if name not in hints.detected:
            hints.detected.append(name)
        if is_sql:
            hints.has_sql = True
        else:
            hints.has_nosql = True

    for dependency_names, display_name, is_sql in DATABASE_DEPENDENCIES:
        if h.has_dep(*dependency_names):
            add(display_name, is_sql)

    if h.has_file("schema.prisma"):
        add("Prisma", True)
    if h.has_dir("migrations", "migrate"):
        add("SQL migrations", True)
    if h.path_matches(_SQL_FILE):
        add("SQL files", True)

    return hints


# (pattern, framework label) for recognising test files by path
TEST_FILE_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\.test\.[a-z]+$"), "Test-style tests"),
    (re.compile(r"\.spec\.[a-z]+$"), "Spec-style tests"),
    (re.compile(r"_test\.go$"), "Go testing"),
    (re.compile(r"(^|/)test_[^/]*\.py$|_test\.py$"), "pytest-style tests"),
    (re.compile(r"_spec\.rb$"), "RSpec"),
    (re.compile(r"(Test|Tests)\.java$"), "JUnit"),
    (re.compile(r"(Test|Tests)\.cs$"), "xUnit-style tests"),
    (re.compile(r"_test\.dart$"), "Dart testing"),
    (re.compile(r"(^|/)tests/[^/]+\.rs$"), "Rust integration tests"),
]

TEST_FRAMEWORK_DEPENDENCIES: dict[str, str] = {
    "jest": "Jest",
    "vitest": "Vitest",
    "mocha": "Mocha",
    "@playwright/test": "Playwright",
    "cypress": "Cypress",
    "pytest": "pytest",
    "rspec": "RSpec",
    "github.com/stretchr/testify": "Testify",
    "junit:junit": "JUnit",
    "org.junit.jupiter:junit-jupiter": "JUnit",
    "flutter_test": "Flutter test",
}


def is_test_file(path: str) -> bool:
    """Return True if a relative path looks like a test file."""
    if "__tests__/" in path:
        return True
    return any(pattern.search(path) for pattern, _ in TEST_FILE_PATTERNS)


def detect_testing_hints(h: HintInputs) -> TestingHints:
    """Count test files and name the test styles and frameworks in use."""
    hints = TestingHints()
    for path in h.files:
        matched = False
        for pattern, label in TEST_FILE_PATTERNS:
            if pattern.search(path):
                matched = True
                if label not in hints.frameworks:
                    hints.frameworks.append(label)
        if matched or "__tests__/" in path:
            hints.test_file_count += 1

    for dependency, label in TEST_FRAMEWORK_DEPENDENCIES.items():
        if h.has_dep(dependency) and label not in hints.frameworks:
            hints.frameworks.append(label)

    hints.has_tests = hints.test_file_count > 0
    return hints


_UI_FILE = re.compile(r"\.(tsx|jsx|vue|svelte)$")
_MOBILE_FILE = re.compile(r"\.(ios|android)\.[a-z]+$")

PROJECT_TYPE_RULES: list[HintRule] = [
    ("component-based-ui", lambda h: h.has_dir("components") or h.path_matches(_UI_FILE)),
    ("static-assets", lambda h: h.has_dir("public", "assets", "static")),
    ("spa-framework", lambda h: h.has_dep("react", "vue", "@angular/core", "svelte")),
    ("web-app", lambda h: h.has_dep("react", "vue", "@angular/core", "svelte", "next", "nuxt", "gatsby") or h.has_root_file("index.html")),
    ("api-routes", lambda h: h.has_dir("routes", "routers")),
    ("api-handlers", lambda h: h.has_dir("handlers", "controllers", "endpoints")),
    ("web-framework", lambda h: h.has_dep("express", "fastify", "koa", "@nestjs/core", "flask", "fastapi", "django", "github.com/gin-gonic/gin", "github.com/labstack/echo", "github.com/gofiber/fiber", "actix-web", "axum", "rocket", "rails", "sinatra")),
    ("api-structure", lambda h: h.has_dir("api")),
    ("cli-commands", lambda h: h.has_dir("commands", "cli", "cmd")),
    ("cli-structure", lambda h: "bin" in h.root_dirs),
    ("cli-framework", lambda h: h.has_dep("commander", "yargs", "oclif", "click", "typer", "github.com/spf13/cobra", "github.com/urfave/cli", "clap")),
    ("library-entry", lambda h: h.has_file("index.ts", "index.js", "lib.rs", "__init__.py") and h.has_dir("src", "lib")),
    ("library-build", lambda h: "dist" in h.root_dirs or "lib" in h.root_dirs),
    ("mobile-platform", lambda h: h.path_matches(_MOBILE_FILE) or h.has_dep("react-native", "expo", "flutter")),
    ("native-mobile", lambda h: "ios" in h.root_dirs and "android" in h.root_dirs),
    ("desktop-app", lambda h: h.has_dep("electron", "tauri", "@tauri-apps/api", "pyqt5", "pyside6")),
]


def detect_project_type_hints(h: HintInputs) -> list[str]:
    """Return every project-type hint whose predicate holds."""
    return [name for name, predicate in PROJECT_TYPE_RULES if predicate(h)]
