"""aicgen data models.

This module exports the entities passed between pipeline stages:
- ProjectMetadata, DatabaseHints, TestingHints: static analysis output
- FileSample, SamplingContext, SamplingReason: file sampling
- AnalysisResult, ArchitectureInfo: the final characterization
"""

from aicgen.models.metadata import DatabaseHints, ProjectMetadata, TestingHints
from aicgen.models.result import (
    ARCHITECTURE_PATTERNS,
    DATASOURCES,
    LANGUAGES,
    LEVELS,
    PROJECT_TYPES,
    SCHEMA_VERSION,
    TESTING_MATURITIES,
    AnalysisResult,
    ArchitectureInfo,
)
from aicgen.models.sampling import FileSample, SamplingContext, SamplingReason

__all__ = [
    "ARCHITECTURE_PATTERNS",
    "DATASOURCES",
    "LANGUAGES",
    "LEVELS",
    "PROJECT_TYPES",
    "SCHEMA_VERSION",
    "TESTING_MATURITIES",
    "AnalysisResult",
    "ArchitectureInfo",
    "DatabaseHints",
    "FileSample",
    "ProjectMetadata",
    "SamplingContext",
    "SamplingReason",
    "TestingHints",
]
