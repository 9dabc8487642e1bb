"""Static analysis of project directories."""

from aicgen.analyzers.inference import infer_static_result
from aicgen.analyzers.static_analyzer import StaticAnalyzer, analyze_project

__all__ = ["StaticAnalyzer", "analyze_project", "infer_static_result"]
