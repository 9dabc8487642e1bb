"""File sampling strategies.

All strategies run the same pipeline and differ only in how many files each
category contributes and how important those files are:

1. Entry points
2. Import-graph hubs
3. High-complexity files
4. Config files
5. One test file, when tests are requested
6. Deduplicate by path; the first category to claim a file keeps it
7. Sort by importance, cap at max_files, read in order while the estimated
   token total stays within max_tokens

Sampling never raises. A failing category contributes nothing and an
unreadable file is skipped.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from aicgen.analyzers.languages import language_for_path
from aicgen.models.sampling import FileSample, SamplingContext, SamplingReason
from aicgen.sampling.complexity import rank_by_complexity
from aicgen.sampling.config_files import rank_config_files
from aicgen.sampling.entry_points import detect_entry_points
from aicgen.sampling.files import find_test_files, read_files
from aicgen.sampling.import_graph import build_import_graph

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
MAX_SAMPLE_CHARS = 10_000
TRUNCATION_MARKER = "\n... (truncated)"


def estimate_tokens(content: str) -> int:
    """Estimate the token count of sampled content."""
    return math.ceil(len(content) / CHARS_PER_TOKEN)


def sample_language(path: str) -> str:
    """Language of a sampled file; config files report their format."""
    language = language_for_path(path)
    if language != "unknown":
        return language
    suffix = PurePosixPath(path).suffix.lower().lstrip(".")
    return suffix or "text"


@dataclass(frozen=True)
class CategoryQuota:
    """How many files one category contributes and at what importance.

    Attributes:
        count: Files taken from the category
        base: Importance of the first file
        step: Importance lost per subsequent file
    """

    count: int = 0
    base: float = 0.0
    step: float = 0.0

    def importance(self, index: int) -> float:
        """Importance of the index-th file taken from the category."""
        return round(max(self.base - self.step * index, 0.0), 4)


@dataclass(frozen=True)
class SamplingStrategy:
    """A named set of category quotas.

    Attributes:
        name: Strategy name
        entry_points: Quota for entry point files
        hubs: Quota for import-graph hubs
        complex_files: Quota for high-complexity files
        configs: Quota for config files
        tests: Quota for test files (only used when tests are requested)
        max_files_cap: Hard cap applied on top of the caller's max_files
    """

    name: str
    entry_points: CategoryQuota
    hubs: CategoryQuota
    complex_files: CategoryQuota
    configs: CategoryQuota
    tests: CategoryQuota
    max_files_cap: int | None = None

    def select(self, ctx: SamplingContext) -> list[FileSample]:
        """Select representative files within the context's budgets.

        Args:
            ctx: Sampling inputs and budgets

        Returns:
            Samples ordered by importance; at most ctx.max_files of them and
            no more than ctx.max_tokens estimated tokens in total
        """
        root = Path(ctx.project_path)
        metadata = ctx.metadata
        language = ctx.language
        max_files = ctx.max_files
        if self.max_files_cap is not None:
            max_files = min(max_files, self.max_files_cap)
        if max_files <= 0 or ctx.max_tokens <= 0:
            return []

        claimed: dict[str, tuple[SamplingReason, float]] = {}

        def claim(
            reason: SamplingReason,
            quota: CategoryQuota,
            rank: Callable[[], list[str]],
        ) -> None:
            if quota.count <= 0:
                return
            try:
                ranked = rank()
            except Exception as e:
                logger.warning("Skipping %s sampling: %s", reason.value, e)
                return
            taken = 0
            for path in ranked:
                if taken >= quota.count:
                    break
                if path in claimed:
                    continue
                claimed[path] = (reason, quota.importance(taken))
                taken += 1

        claim(SamplingReason.ENTRY_POINT, self.entry_points, lambda: detect_entry_points(root, metadata))
        claim(SamplingReason.HUB_FILE, self.hubs, lambda: build_import_graph(root, metadata.files, language).hubs())
        claim(
            SamplingReason.HIGH_COMPLEXITY,
            self.complex_files,
            lambda: [s.path for s in rank_by_complexity(root, metadata.files, language) if s.score > 0],
        )
        claim(SamplingReason.CONFIG_FILE, self.configs, lambda: rank_config_files(metadata.files))
        if ctx.include_tests:
            claim(SamplingReason.TEST_FILE, self.tests, lambda: find_test_files(metadata.files, language))

        # sorted() is stable, so equal importance keeps category order
        ordered = sorted(claimed.items(), key=lambda item: -item[1][1])[:max_files]
        contents = read_files(root, [path for path, _ in ordered])

        samples: list[FileSample] = []
        total_tokens = 0
        for path, (reason, importance) in ordered:
            content = contents.get(path)
            if content is None:
                continue
            try:
                size = (root / path).stat().st_size
            except OSError:
                size = len(content.encode("utf-8"))
            if len(content) > MAX_SAMPLE_CHARS:
                content = content[:MAX_SAMPLE_CHARS] + TRUNCATION_MARKER
            tokens = estimate_tokens(content)
            if total_tokens + tokens > ctx.max_tokens:
                break
            total_tokens += tokens
            samples.append(
                FileSample(
                    path=path,
                    content=content,
                    size=size,
                    estimated_tokens=tokens,
                    reason=reason,
                    language=sample_language(path),
                    importance=importance,
                )
            )

        logger.info(
            "Sampled %d files (%d tokens) with %s strategy",
            len(samples), total_tokens, self.name,
        )
        return samples


MINIMAL = SamplingStrategy(
    name="minimal",
    entry_points=CategoryQuota(1, 1.0),
    hubs=CategoryQuota(1, 0.9),
    complex_files=CategoryQuota(0),
    configs=CategoryQuota(1, 0.8),
    tests=CategoryQuota(1, 0.5),
    max_files_cap=5,
)

BALANCED = SamplingStrategy(
    name="balanced",
    entry_points=CategoryQuota(2, 1.0, 0.1),
    hubs=CategoryQuota(3, 0.9, 0.05),
    complex_files=CategoryQuota(2, 0.7, 0.05),
    configs=CategoryQuota(3, 0.8, 0.1),
    tests=CategoryQuota(1, 0.6),
)

COMPREHENSIVE = SamplingStrategy(
    name="comprehensive",
    entry_points=CategoryQuota(2, 1.0, 0.05),
    hubs=CategoryQuota(4, 0.95, 0.05),
    complex_files=CategoryQuota(3, 0.75, 0.05),
    configs=CategoryQuota(4, 0.85, 0.05),
    tests=CategoryQuota(1, 0.65),
)

STRATEGIES: dict[str, SamplingStrategy] = {
    strategy.name: strategy for strategy in (MINIMAL, BALANCED, COMPREHENSIVE)
}

STRATEGY_NAMES = frozenset(STRATEGIES)


def get_strategy(name: str) -> SamplingStrategy:
    """Look up a sampling strategy by name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown sampling strategy: {name}. Valid: {sorted(STRATEGIES)}") from None


def select_files(ctx: SamplingContext, strategy: str = "balanced") -> list[FileSample]:
    """Convenience function to sample files with a named strategy."""
    return get_strategy(strategy).select(ctx)
