"""Parse and validate provider responses into AnalysisResult.

Unparsable text fails with a single ValidationError. A parsed object is
checked field by field and every violation is reported together in one
ValidationErrors.
"""

import json
import re
from typing import Any

from aicgen.errors import ValidationError, ValidationErrors
from aicgen.models.result import (
    ARCHITECTURE_PATTERNS,
    DATASOURCES,
    LANGUAGES,
    LEVELS,
    PROJECT_TYPES,
    TESTING_MATURITIES,
    AnalysisResult,
    ArchitectureInfo,
)

RAW_EXCERPT_CHARS = 200

_FENCE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

# (field, allowed values)
ENUM_FIELDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("language", LANGUAGES),
    ("projectType", PROJECT_TYPES),
    ("datasource", DATASOURCES),
    ("level", LEVELS),
    ("testingMaturity", TESTING_MATURITIES),
)

OPTIONAL_STRING_FIELDS = ("reasoning", "backendStyle", "frontendStyle")


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers around a JSON payload."""
    return _FENCE.sub("", text).strip()


def _check_enum(
    data: dict[str, Any], name: str, allowed: tuple[str, ...], label: str | None = None
) -> ValidationError | None:
    label = label or name
    value = data.get(name)
    if not isinstance(value, str) or not value:
        return ValidationError(label, "is required and must be a string")
    if value not in allowed:
        return ValidationError(label, f"invalid value {value!r}; must be one of: {', '.join(allowed)}")
    return None


class AnalysisValidator:
    """Validates AI responses against the result schema."""

    def validate(self, data: Any) -> None:
        """Check a parsed response.

        Args:
            data: Parsed JSON value

        Raises:
            ValidationError: If the value is not a JSON object
            ValidationErrors: With every field violation found
        """
        if not isinstance(data, dict):
            raise ValidationError("response", "must be a JSON object")

        errors: list[ValidationError] = []

        for name, allowed in ENUM_FIELDS[:2]:
            if error := _check_enum(data, name, allowed):
                errors.append(error)

        architecture = data.get("architecture")
        if not isinstance(architecture, dict):
            errors.append(ValidationError("architecture", "is required and must be an object"))
        else:
            if error := _check_enum(
                architecture, "pattern", ARCHITECTURE_PATTERNS, label="architecture.pattern"
            ):
                errors.append(error)

            confidence = architecture.get("confidence")
            if isinstance(confidence, bool) or not isinstance(confidence, int | float):
                errors.append(ValidationError("architecture.confidence", "must be a number"))
            elif not 0 <= confidence <= 1:
                errors.append(
                    ValidationError("architecture.confidence", "must be between 0 and 1")
                )

        for name, allowed in ENUM_FIELDS[2:]:
            if error := _check_enum(data, name, allowed):
                errors.append(error)

        for name in OPTIONAL_STRING_FIELDS:
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                errors.append(ValidationError(name, "must be a string if provided"))

        if errors:
            raise ValidationErrors(errors)

    def parse_and_validate(self, text: str) -> AnalysisResult:
        """Parse a raw response into an AnalysisResult.

        Args:
            text: Raw provider text, optionally wrapped in code fences

        Returns:
            Validated result; ``source`` and ``timestamp`` are left for the caller

        Raises:
            ValidationError: If the text is not JSON or not an object
            ValidationErrors: If the object violates the schema
        """
        cleaned = strip_code_fences(text)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as e:
            raise ValidationError(
                "json", f"Failed to parse response: {e.msg}", raw=text[:RAW_EXCERPT_CHARS]
            ) from e

        self.validate(data)

        architecture = data["architecture"]
        return AnalysisResult(
            architecture=ArchitectureInfo(
                pattern=architecture["pattern"],
                confidence=float(architecture["confidence"]),
            ),
            project_type=data["projectType"],
            language=data["language"],
            datasource=data["datasource"],
            level=data["level"],
            testing_maturity=data["testingMaturity"],
            reasoning=data.get("reasoning") or "",
            backend_style=data.get("backendStyle"),
            frontend_style=data.get("frontendStyle"),
        )
