"""Representative file sampling under file and token budgets."""

from aicgen.sampling.strategies import (
    STRATEGIES,
    SamplingStrategy,
    get_strategy,
    select_files,
)

__all__ = ["STRATEGIES", "SamplingStrategy", "get_strategy", "select_files"]
