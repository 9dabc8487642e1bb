"""Prompt templates for project characterization.

The prompt embeds the static analysis summary, the sampled files and the
closed sets of allowed values, and asks for a single JSON object.
"""

import json
import math
from dataclasses import dataclass, field
from typing import Any

from aicgen.models.metadata import ProjectMetadata
from aicgen.models.result import (
    ARCHITECTURE_PATTERNS,
    DATASOURCES,
    LANGUAGES,
    LEVELS,
    PROJECT_TYPES,
    TESTING_MATURITIES,
)
from aicgen.models.sampling import FileSample

PROMPT_CHARS_PER_TOKEN = 3.5
MAX_LISTED_PATHS = 200

SYSTEM_PROMPT = """You are a codebase architecture analyzer.
Use the provided static analysis and file samples.
Return ONLY valid JSON matching the schema.
Do not explain your reasoning outside the JSON.
Choose every enumerated value from AVAILABLE OPTIONS; never invent new values."""

RESPONSE_SCHEMA = """{
  "language": "value",
  "projectType": "value",
  "architecture": {
    "pattern": "value (from options)",
    "confidence": 0.0-1.0
  },
  "datasource": "value",
  "level": "value",
  "backendStyle": "short string (e.g. modular-monolith)",
  "frontendStyle": "short string (e.g. app-router)",
  "testingMaturity": "low|medium|high",
  "reasoning": "short explanation"
}"""


@dataclass
class PromptContext:
    """Everything a provider needs to build its prompt.

    Attributes:
        metadata: Static analysis output
        samples: Selected file samples
    """

    metadata: ProjectMetadata
    samples: list[FileSample] = field(default_factory=list)


def available_options() -> dict[str, list[str]]:
    """Closed sets the response must draw from."""
    return {
        "languages": list(LANGUAGES),
        "projectTypes": list(PROJECT_TYPES),
        "architectures": list(ARCHITECTURE_PATTERNS),
        "datasources": list(DATASOURCES),
        "levels": list(LEVELS),
        "testingMaturity": list(TESTING_MATURITIES),
    }


def summarize_metadata(metadata: ProjectMetadata) -> dict[str, Any]:
    """Static analysis summary with long path lists trimmed."""
    summary = metadata.to_dict()
    summary.pop("fingerprint", None)
    for key in ("structure", "files"):
        paths = summary[key]
        if len(paths) > MAX_LISTED_PATHS:
            summary[key] = paths[:MAX_LISTED_PATHS] + [f"... ({len(paths) - MAX_LISTED_PATHS} more)"]
    return summary


def format_samples(samples: list[FileSample]) -> str:
    """Render file samples as delimited blocks."""
    return "\n".join(
        f"--- {sample.path} ({sample.reason.value}) ---\n{sample.content}\n---"
        for sample in samples
    )


def build_analysis_prompt(context: PromptContext) -> str:
    """Build the user prompt for a characterization request.

    Args:
        context: Metadata and samples

    Returns:
        Prompt text
    """
    return (
        "METADATA:\n"
        f"{json.dumps(summarize_metadata(context.metadata), indent=2)}\n\n"
        "FILE SAMPLES:\n"
        f"{format_samples(context.samples) or '(none)'}\n\n"
        "AVAILABLE OPTIONS:\n"
        f"{json.dumps(available_options(), indent=2)}\n\n"
        "SCHEMA:\n"
        f"{RESPONSE_SCHEMA}\n"
    )


def estimate_prompt_tokens(prompt: str) -> int:
    """Estimate the token count of a prompt."""
    return math.ceil(len(prompt) / PROMPT_CHARS_PER_TOKEN)
