"""Source file enumeration and bounded-concurrency reads for sampling.

Reads are confined to the project root and streamed in batches, so callers
scanning the whole tree hold at most one batch of content at once.
"""

import logging
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from aicgen.analyzers.hints import is_test_file
from aicgen.analyzers.languages import language_for_path

logger = logging.getLogger(__name__)

READ_WORKERS = 8
MAX_SCAN_FILES = 2000
MAX_READ_BYTES = 512 * 1024
READ_BATCHES_PER_WORKER = 4


def source_files(files: list[str], language: str | None = None) -> list[str]:
    """Return non-test source files, optionally limited to one language.

    TypeScript and JavaScript count as one family since they import each other.

    Args:
        files: Relative paths from static analysis
        language: Primary language to keep, or None for all languages

    Returns:
        Matching paths, at most MAX_SCAN_FILES, in input order
    """
    family = _language_family(language) if language and language != "unknown" else None
    selected: list[str] = []
    for path in files:
        file_language = language_for_path(path)
        if file_language == "unknown" or is_test_file(path):
            continue
        if family is not None and file_language not in family:
            continue
        selected.append(path)
        if len(selected) >= MAX_SCAN_FILES:
            break
    return selected


def find_test_files(files: list[str], language: str | None = None) -> list[str]:
    """Return test files, preferring the primary language's tests first."""
    tests = [path for path in files if is_test_file(path) and language_for_path(path) != "unknown"]
    if language and language != "unknown":
        family = _language_family(language)
        tests.sort(key=lambda path: language_for_path(path) not in family)
    return tests


def _language_family(language: str) -> set[str]:
    if language in ("typescript", "javascript"):
        return {"typescript", "javascript"}
    return {language}


def read_text(path: Path, limit: int = MAX_READ_BYTES) -> str | None:
    """Read a text file, returning None if it cannot be read or decoded."""
    try:
        with open(path, "rb") as f:
            data = f.read(limit)
    except OSError as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        # A read cut at the limit may split a multi-byte character
        if len(data) == limit and e.start >= limit - 3:
            return data[: e.start].decode("utf-8", errors="replace")
        logger.debug("Skipping non-text file %s", path)
        return None


def read_project_file(root: Path, rel: str) -> str | None:
    """Read a file that must lie inside the project root.

    The path is resolved first, so absolute paths, ``..`` segments and
    symlinks pointing out of the tree are all refused.

    Args:
        root: Resolved project root
        rel: Path relative to the root

    Returns:
        File content, or None if it is outside the root or unreadable
    """
    try:
        path = (root / rel).resolve()
    except (OSError, RuntimeError) as e:
        logger.debug("Skipping unresolvable path %s: %s", rel, e)
        return None
    if not path.is_relative_to(root):
        logger.warning("Skipping %s: resolves outside the project", rel)
        return None
    return read_text(path)


def iter_files(
    root: Path, paths: list[str], max_workers: int = READ_WORKERS
) -> Iterator[tuple[str, str]]:
    """Read files in input order, at most one batch ahead of the consumer.

    Args:
        root: Project root
        paths: Relative paths to read
        max_workers: Upper bound on concurrent reads

    Yields:
        (relative path, content) for each readable file inside the root
    """
    if not paths:
        return
    base = root.resolve()
    batch_size = max_workers * READ_BATCHES_PER_WORKER
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for start in range(0, len(paths), batch_size):
            batch = paths[start : start + batch_size]
            contents = executor.map(lambda rel: read_project_file(base, rel), batch)
            for rel, content in zip(batch, contents):
                if content is not None:
                    yield rel, content


def read_files(root: Path, paths: list[str], max_workers: int = READ_WORKERS) -> dict[str, str]:
    """Read many files with a fixed number of worker threads.

    Args:
        root: Project root
        paths: Relative paths to read
        max_workers: Upper bound on concurrent reads

    Returns:
        Mapping of relative path to content; unreadable files and files
        outside the root are omitted
    """
    return dict(iter_files(root, paths, max_workers))
