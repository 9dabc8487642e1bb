"""File sampling entities."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from aicgen.models.metadata import ProjectMetadata


class SamplingReason(Enum):
    """Why a file was chosen for the analysis prompt."""

    ENTRY_POINT = "entry-point"
    HUB_FILE = "hub-file"
    HIGH_COMPLEXITY = "high-complexity"
    TEST_FILE = "test-file"
    CONFIG_FILE = "config-file"


@dataclass
class FileSample:
    """A file selected for inclusion in the prompt.

    Attributes:
        path: Path relative to the project root
        content: File content, possibly truncated
        size: Size of the file on disk in bytes
        estimated_tokens: Token estimate for content
        reason: Category that selected the file
        language: Language of the file, or "unknown"
        importance: Ranking weight in [0, 1]
    """

    path: str
    content: str
    size: int
    estimated_tokens: int
    reason: SamplingReason
    language: str
    importance: float


@dataclass
class SamplingContext:
    """Inputs for a sampling strategy.

    Attributes:
        project_path: Project root directory
        metadata: Static analysis result for the project
        language: Primary language used for language-specific rules
        max_files: Upper bound on returned samples
        max_tokens: Upper bound on summed estimated tokens
        include_tests: Whether a representative test file may be included
    """

    project_path: Path
    metadata: ProjectMetadata
    language: str
    max_files: int = 12
    max_tokens: int = 8000
    include_tests: bool = False
