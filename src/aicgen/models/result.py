"""Analysis result entities and the closed value sets they draw from.

The same closed sets are embedded in the provider prompt and enforced by the
response validator, so the AI can only answer with values that downstream
guideline selection understands.
"""

from dataclasses import dataclass, field
from typing import Any

SCHEMA_VERSION = "1.0.0"

LANGUAGES = (
    "typescript",
    "javascript",
    "python",
    "go",
    "rust",
    "java",
    "csharp",
    "ruby",
    "dart",
    "swift",
    "unknown",
)

PROJECT_TYPES = ("web", "api", "cli", "library", "desktop", "mobile", "other")

ARCHITECTURE_PATTERNS = (
    "layered",
    "modular-monolith",
    "microservices",
    "event-driven",
    "hexagonal",
    "clean-architecture",
    "ddd",
    "serverless",
    "other",
)

DATASOURCES = ("sql", "nosql", "none")

LEVELS = ("basic", "standard", "expert", "full")

TESTING_MATURITIES = ("low", "medium", "high")

STATIC_SOURCE = "static"


@dataclass
class ArchitectureInfo:
    """Detected architecture pattern.

    Attributes:
        pattern: One of ARCHITECTURE_PATTERNS
        confidence: Confidence in [0, 1]
    """

    pattern: str
    confidence: float


@dataclass
class AnalysisResult:
    """Structured characterization of a project.

    Attributes:
        architecture: Pattern and confidence
        project_type: One of PROJECT_TYPES
        language: One of LANGUAGES
        datasource: One of DATASOURCES
        level: One of LEVELS
        testing_maturity: One of TESTING_MATURITIES
        reasoning: Short explanation for display
        backend_style: Free-form backend style, if known
        frontend_style: Free-form frontend style, if known
        schema_version: Result-shape contract version
        timestamp: Creation time in epoch milliseconds
        source: Provider name that produced the result, or "static"
        from_cache: True when served from the fingerprint cache (not persisted)
    """

    architecture: ArchitectureInfo
    project_type: str
    language: str
    datasource: str
    level: str
    testing_maturity: str
    reasoning: str = ""
    backend_style: str | None = None
    frontend_style: str | None = None
    schema_version: str = SCHEMA_VERSION
    timestamp: int = 0
    source: str = STATIC_SOURCE
    from_cache: bool = field(default=False, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase document stored in cache entries."""
        data: dict[str, Any] = {
            "architecture": {
                "pattern": self.architecture.pattern,
                "confidence": self.architecture.confidence,
            },
            "projectType": self.project_type,
            "language": self.language,
            "datasource": self.datasource,
            "level": self.level,
            "testingMaturity": self.testing_maturity,
            "reasoning": self.reasoning,
            "schemaVersion": self.schema_version,
            "timestamp": self.timestamp,
            "source": self.source,
        }
        if self.backend_style is not None:
            data["backendStyle"] = self.backend_style
        if self.frontend_style is not None:
            data["frontendStyle"] = self.frontend_style
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisResult":
        """Create from a cache entry document.

        Raises:
            KeyError: If a required field is missing
            TypeError: If the architecture block is not a mapping
        """
        architecture = data["architecture"]
        return cls(
            architecture=ArchitectureInfo(
                pattern=architecture["pattern"],
                confidence=float(architecture["confidence"]),
            ),
            project_type=data["projectType"],
            language=data["language"],
            datasource=data["datasource"],
            level=data["level"],
            testing_maturity=data["testingMaturity"],
            reasoning=data.get("reasoning", ""),
            backend_style=data.get("backendStyle"),
            frontend_style=data.get("frontendStyle"),
            schema_version=data.get("schemaVersion", SCHEMA_VERSION),
            timestamp=int(data.get("timestamp", 0)),
            source=data.get("source", STATIC_SOURCE),
        )
