"""AI provider integration.

Prompts, provider variants reached through LiteLLM, and the response
validator. Temperature is fixed at 0 for repeatable characterizations.
"""

from aicgen.llm.prompts import (
    SYSTEM_PROMPT,
    PromptContext,
    build_analysis_prompt,
    estimate_prompt_tokens,
)
from aicgen.llm.providers import (
    PROVIDER_VARIANTS,
    AIProvider,
    ProviderCapabilities,
    ProviderName,
    create_provider,
    select_cheapest,
    select_provider,
)
from aicgen.llm.validator import AnalysisValidator

__all__ = [
    "AIProvider",
    "AnalysisValidator",
    "PROVIDER_VARIANTS",
    "PromptContext",
    "ProviderCapabilities",
    "ProviderName",
    "SYSTEM_PROMPT",
    "build_analysis_prompt",
    "create_provider",
    "estimate_prompt_tokens",
    "select_cheapest",
    "select_provider",
]
