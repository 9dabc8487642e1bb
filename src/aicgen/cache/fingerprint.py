"""Deterministic project fingerprints.

The fingerprint is a SHA-256 digest over the sorted directory list, the sorted
file list, the language, and the sorted framework and build tool names. The
components are encoded together as one JSON array, so each keeps its own
boundaries. Any ordering of the same sets yields the same digest.
"""

import hashlib
import json

from aicgen.models.metadata import ProjectMetadata


def fingerprint_parts(
    structure: list[str],
    files: list[str],
    language: str,
    frameworks: list[str],
    build_tools: list[str],
) -> str:
    """Compute the fingerprint from its component sets.

    Returns:
        Hex-encoded SHA-256 digest
    """
    key = [
        sorted(structure),
        sorted(files),
        language,
        sorted(frameworks),
        sorted(build_tools),
    ]
    hasher = hashlib.sha256()
    hasher.update(json.dumps(key, separators=(",", ":")).encode("utf-8"))
    return hasher.hexdigest()


def fingerprint(metadata: ProjectMetadata) -> str:
    """Compute the fingerprint of project metadata."""
    return fingerprint_parts(
        metadata.structure,
        metadata.files,
        metadata.language,
        metadata.frameworks,
        metadata.build_tools,
    )
