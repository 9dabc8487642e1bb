"""Project fingerprinting and the analysis result cache."""

from aicgen.cache.fingerprint import fingerprint
from aicgen.cache.store import CacheStats, FingerprintCache

__all__ = ["CacheStats", "FingerprintCache", "fingerprint"]
