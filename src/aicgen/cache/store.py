"""Persistent analysis cache keyed by project fingerprint.

One JSON file per fingerprint under the cache root. Each file holds the
AnalysisResult document plus ``timestamp`` (epoch ms) and ``schemaVersion``.

Reads never raise: a missing, unparsable, expired or newer-schema entry is a
miss. clear_expired() removes only entries past their TTL; entries written by a
newer schema stay on disk and are skipped at read time.
"""

import json
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from aicgen.models.result import SCHEMA_VERSION, AnalysisResult
from aicgen.utils.logging import get_logger

_logger = get_logger(__name__)

MS_PER_DAY = 86_400_000
DEFAULT_TTL_DAYS = 30
ENTRY_SUFFIX = ".json"

_FINGERPRINT_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _parse_version(version: str) -> tuple[int, ...] | None:
    parts = version.split(".")
    if not parts or not all(part.isdigit() for part in parts):
        return None
    return tuple(int(part) for part in parts)


def is_schema_compatible(entry_version: Any, current_version: str = SCHEMA_VERSION) -> bool:
    """Return True if an entry's schema version is not newer than ours.

    Unparseable versions are treated as incompatible.
    """
    if not isinstance(entry_version, str):
        return False
    entry = _parse_version(entry_version)
    current = _parse_version(current_version)
    if entry is None or current is None:
        return False
    return entry <= current


@dataclass
class CacheStats:
    """Summary of the cache directory.

    Attributes:
        total_entries: Number of entry files
        total_size_bytes: Summed size of entry files
        oldest_entry: Smallest entry timestamp (epoch ms), None when empty
        newest_entry: Largest entry timestamp (epoch ms), None when empty
    """

    total_entries: int = 0
    total_size_bytes: int = 0
    oldest_entry: int | None = None
    newest_entry: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "totalEntries": self.total_entries,
            "totalSizeBytes": self.total_size_bytes,
            "oldestEntry": self.oldest_entry,
            "newestEntry": self.newest_entry,
        }


class FingerprintCache:
    """File-per-fingerprint cache of analysis results."""

    def __init__(
        self,
        directory: Path,
        ttl_days: int = DEFAULT_TTL_DAYS,
        schema_version: str = SCHEMA_VERSION,
    ) -> None:
        """Initialize the cache.

        Args:
            directory: Cache root (created on first write)
            ttl_days: Maximum entry age in days
            schema_version: Result schema version this reader understands
        """
        self.directory = Path(directory).expanduser()
        self.ttl_days = ttl_days
        self.schema_version = schema_version

    @property
    def ttl_ms(self) -> int:
        """Maximum entry age in milliseconds."""
        return self.ttl_days * MS_PER_DAY

    def _entry_path(self, fingerprint: str) -> Path:
        if not _FINGERPRINT_PATTERN.match(fingerprint):
            raise ValueError(f"Invalid fingerprint: {fingerprint!r}")
        return self.directory / f"{fingerprint}{ENTRY_SUFFIX}"

    def _read_entry(self, path: Path) -> dict[str, Any] | None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            _logger.debug("Unreadable cache entry %s: %s", path.name, e)
            return None
        if not isinstance(data, dict):
            return None
        return data

    def _is_expired(self, entry: dict[str, Any], now_ms: int) -> bool:
        timestamp = entry.get("timestamp")
        if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool):
            return True
        return now_ms - timestamp > self.ttl_ms

    def _entry_files(self) -> list[Path]:
        if not self.directory.is_dir():
            return []
        return sorted(self.directory.glob(f"*{ENTRY_SUFFIX}"))

    def get(self, fingerprint: str) -> AnalysisResult | None:
        """Return the cached result for a fingerprint, or None on any miss."""
        try:
            path = self._entry_path(fingerprint)
        except ValueError:
            return None
        entry = self._read_entry(path)
        if entry is None:
            return None
        if not is_schema_compatible(entry.get("schemaVersion"), self.schema_version):
            _logger.debug("Skipping cache entry %s with schema %s", path.name, entry.get("schemaVersion"))
            return None
        if self._is_expired(entry, _now_ms()):
            _logger.debug("Skipping expired cache entry %s", path.name)
            return None
        try:
            return AnalysisResult.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            _logger.debug("Malformed cache entry %s: %s", path.name, e)
            return None

    def set(self, fingerprint: str, result: AnalysisResult) -> None:
        """Store a result, stamping it with the current time and schema version.

        Raises:
            ValueError: If the fingerprint contains path characters
            OSError: If the entry cannot be written
        """
        path = self._entry_path(fingerprint)
        entry = result.to_dict()
        entry["timestamp"] = _now_ms()
        entry["schemaVersion"] = self.schema_version

        self.directory.mkdir(parents=True, exist_ok=True)
        # Readers racing this write see either the old or the new file.
        tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
        tmp_path.write_text(json.dumps(entry, indent=2), encoding="utf-8")
        os.replace(tmp_path, path)

    def has(self, fingerprint: str) -> bool:
        """Return True if get() would return a result."""
        return self.get(fingerprint) is not None

    def clear(self) -> int:
        """Delete every entry; return the number deleted."""
        removed = 0
        for path in self._entry_files():
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
        return removed

    def clear_expired(self) -> int:
        """Delete entries past their TTL; return the number deleted.

        Only the TTL is checked. Unparsable entries stay on disk, and so do
        unexpired entries that get() skips for their schema version.
        """
        now_ms = _now_ms()
        removed = 0
        for path in self._entry_files():
            entry = self._read_entry(path)
            if entry is None or not self._is_expired(entry, now_ms):
                continue
            try:
                path.unlink()
                removed += 1
            except FileNotFoundError:
                continue
        if removed:
            _logger.info("Removed %d expired cache entries", removed)
        return removed

    def get_stats(self) -> CacheStats:
        """Summarize entry count, size and age range."""
        stats = CacheStats()
        for path in self._entry_files():
            try:
                size = path.stat().st_size
            except OSError:
                continue
            stats.total_entries += 1
            stats.total_size_bytes += size
            entry = self._read_entry(path)
            timestamp = entry.get("timestamp") if entry else None
            if not isinstance(timestamp, (int, float)) or isinstance(timestamp, bool):
                continue
            timestamp = int(timestamp)
            if stats.oldest_entry is None or timestamp < stats.oldest_entry:
                stats.oldest_entry = timestamp
            if stats.newest_entry is None or timestamp > stats.newest_entry:
                stats.newest_entry = timestamp
        return stats
