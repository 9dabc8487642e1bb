"""AI provider variants behind one interface.

Every vendor is reached through LiteLLM. The variants differ only in data
(default model, LiteLLM prefix, extra request parameters and capabilities),
so a single AIProvider class is parameterized by a ProviderVariant looked up
by ProviderName. Temperature is fixed at 0 so repeated analyses of the same
project agree. Retries are the resilience layer's job, so LiteLLM's own
retrying is switched off.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import litellm

from aicgen.errors import (
    AbortError,
    InvalidCredentialsError,
    OperationTimeoutError,
    ProviderError,
    RateLimitError,
    ResponseShapeError,
)
from aicgen.llm.prompts import SYSTEM_PROMPT, PromptContext, build_analysis_prompt
from aicgen.resilience.timeout import AbortSignal

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT_MS = 30_000
ESTIMATED_OUTPUT_TOKENS = 4_000
LARGE_PROMPT_TOKENS = 200_000
MEDIUM_PROMPT_TOKENS = 128_000


class ProviderName(str, Enum):
    """Supported AI backends."""

    CLAUDE = "claude"
    OPENAI = "openai"
    GEMINI = "gemini"


PREFERENCE_ORDER = (ProviderName.CLAUDE, ProviderName.OPENAI, ProviderName.GEMINI)


@dataclass(frozen=True)
class ProviderCapabilities:
    """What a provider can take and what it costs.

    Attributes:
        name: Provider name
        default_model: Model used when none is configured
        context_window: Maximum prompt tokens
        max_output_tokens: Maximum completion tokens
        supports_json_mode: Whether the API can force a JSON response
        cost_per_million_input: USD per million prompt tokens
        cost_per_million_output: USD per million completion tokens
    """

    name: ProviderName
    default_model: str
    context_window: int
    max_output_tokens: int
    supports_json_mode: bool
    cost_per_million_input: float
    cost_per_million_output: float

    def estimate_cost(self, prompt_tokens: int) -> float:
        """Estimated USD for one request, assuming a typical response length."""
        input_cost = prompt_tokens / 1_000_000 * self.cost_per_million_input
        output_cost = ESTIMATED_OUTPUT_TOKENS / 1_000_000 * self.cost_per_million_output
        return input_cost + output_cost

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name.value,
            "defaultModel": self.default_model,
            "contextWindow": self.context_window,
            "maxOutputTokens": self.max_output_tokens,
            "supportsJsonMode": self.supports_json_mode,
            "costPerMillionInput": self.cost_per_million_input,
            "costPerMillionOutput": self.cost_per_million_output,
        }


@dataclass(frozen=True)
class ProviderVariant:
    """Per-vendor request details.

    Attributes:
        capabilities: Static capability table
        litellm_prefix: Provider prefix LiteLLM routes on
        max_tokens: Completion budget requested per analysis
        extra_params: Additional completion kwargs
    """

    capabilities: ProviderCapabilities
    litellm_prefix: str
    max_tokens: int
    extra_params: dict[str, Any] = field(default_factory=dict)


PROVIDER_VARIANTS: dict[ProviderName, ProviderVariant] = {
    ProviderName.CLAUDE: ProviderVariant(
        capabilities=ProviderCapabilities(
            name=ProviderName.CLAUDE,
            default_model="claude-3-5-sonnet-20241022",
            context_window=200_000,
            max_output_tokens=8192,
            supports_json_mode=False,
            cost_per_million_input=3.0,
            cost_per_million_output=15.0,
        ),
        litellm_prefix="anthropic",
        max_tokens=4096,
    ),
    ProviderName.OPENAI: ProviderVariant(
        capabilities=ProviderCapabilities(
            name=ProviderName.OPENAI,
            default_model="gpt-4o",
            context_window=128_000,
            max_output_tokens=16384,
            supports_json_mode=True,
            cost_per_million_input=2.5,
            cost_per_million_output=10.0,
        ),
        litellm_prefix="openai",
        max_tokens=4096,
        extra_params={"response_format": {"type": "json_object"}},
    ),
    ProviderName.GEMINI: ProviderVariant(
        capabilities=ProviderCapabilities(
            name=ProviderName.GEMINI,
            default_model="gemini-1.5-pro",
            context_window=1_000_000,
            max_output_tokens=8192,
            supports_json_mode=True,
            cost_per_million_input=1.25,
            cost_per_million_output=5.0,
        ),
        litellm_prefix="gemini",
        max_tokens=4096,
        extra_params={"response_format": {"type": "json_object"}},
    ),
}


def _status_of(exc: Exception) -> int | None:
    status = getattr(exc, "status_code", None)
    return status if isinstance(status, int) else None


def _retry_after(exc: Exception) -> float | None:
    """Seconds from a ``retry-after`` response header, if present."""
    headers = getattr(getattr(exc, "response", None), "headers", None)
    if headers is None:
        return None
    try:
        return float(headers.get("retry-after"))
    except (TypeError, ValueError):
        return None


def map_provider_error(exc: Exception, provider: str, timeout_ms: int) -> Exception:
    """Translate a LiteLLM or transport exception into the error taxonomy.

    Args:
        exc: Exception raised by the completion call
        provider: Provider name for the error
        timeout_ms: Request deadline, reported on timeouts

    Returns:
        The typed error to raise in its place
    """
    status = _status_of(exc)

    if isinstance(
        exc,
        (litellm.exceptions.AuthenticationError, litellm.exceptions.PermissionDeniedError),
    ) or status in (401, 403):
        return InvalidCredentialsError(f"Authentication failed: {exc}", provider, status)

    if isinstance(exc, litellm.exceptions.RateLimitError) or status == 429:
        return RateLimitError(
            f"Rate limit exceeded: {exc}",
            provider,
            status or 429,
            retry_after=_retry_after(exc),
        )

    if isinstance(exc, litellm.exceptions.Timeout):
        return OperationTimeoutError(timeout_ms, f"[{provider}] Request timed out: {exc}")

    if isinstance(exc, litellm.exceptions.APIConnectionError):
        return ProviderError(f"Connection failed: {exc}", provider, status)

    return ProviderError(f"Request failed: {exc}", provider, status)


class AIProvider:
    """One configured AI backend.

    Exposes ``analyze``, ``capabilities``, ``build_prompt`` and
    ``parse_response``; vendor differences live in the ProviderVariant.
    """

    def __init__(
        self,
        name: ProviderName | str,
        api_key: str,
        model: str | None = None,
        request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS,
    ) -> None:
        """Initialize a provider.

        Args:
            name: Provider name
            api_key: API key for the vendor
            model: Model override; the variant default is used when None
            request_timeout_ms: Per-request HTTP timeout

        Raises:
            ValueError: If the provider name is unknown
            InvalidCredentialsError: If the API key is empty
        """
        self.name = ProviderName(name)
        self.variant = PROVIDER_VARIANTS[self.name]
        if not api_key:
            raise InvalidCredentialsError("No API key configured", self.name.value)
        self.api_key = api_key
        self.model = model or self.variant.capabilities.default_model
        self.request_timeout_ms = request_timeout_ms

    @property
    def capabilities(self) -> ProviderCapabilities:
        return self.variant.capabilities

    @property
    def litellm_model(self) -> str:
        """Model name with the LiteLLM routing prefix."""
        if self.model.startswith(f"{self.variant.litellm_prefix}/"):
            return self.model
        return f"{self.variant.litellm_prefix}/{self.model}"

    def build_prompt(self, context: PromptContext) -> str:
        return build_analysis_prompt(context)

    def _completion_kwargs(self, prompt: str, max_tokens: int) -> dict[str, Any]:
        return {
            "model": self.litellm_model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": 0,
            "max_tokens": max_tokens,
            "api_key": self.api_key,
            "timeout": self.request_timeout_ms / 1000,
            "num_retries": 0,
            **self.variant.extra_params,
        }

    def analyze(self, context: PromptContext, signal: AbortSignal | None = None) -> str:
        """Send one characterization request.

        Args:
            context: Metadata and samples to analyze
            signal: Abort signal from the timeout wrapper

        Returns:
            Raw response text

        Raises:
            AbortError: If the signal was aborted before or during the call
            InvalidCredentialsError: On 401/403
            RateLimitError: On 429
            OperationTimeoutError: If the HTTP request timed out
            ResponseShapeError: If the response has no text payload
            ProviderError: On any other failure
        """
        if signal is not None:
            signal.raise_if_aborted()

        kwargs = self._completion_kwargs(self.build_prompt(context), self.variant.max_tokens)
        logger.debug("Calling %s (%s)", self.name.value, self.litellm_model)

        try:
            response = litellm.completion(**kwargs)
        except Exception as e:
            raise map_provider_error(e, self.name.value, self.request_timeout_ms) from e

        if signal is not None and signal.aborted:
            raise AbortError(f"[{self.name.value}] Request aborted")

        return self.parse_response(response)

    def parse_response(self, response: Any) -> str:
        """Extract the text payload from a completion response.

        Raises:
            ResponseShapeError: If ``choices[0].message.content`` is missing or empty
        """
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            raise ResponseShapeError(
                "Response has no choices[0].message.content", self.name.value
            ) from e

        if not isinstance(content, str) or not content.strip():
            raise ResponseShapeError("Response contained no text", self.name.value)
        return content


def create_provider(
    name: ProviderName | str,
    api_key: str,
    model: str | None = None,
    request_timeout_ms: int = DEFAULT_REQUEST_TIMEOUT_MS,
) -> AIProvider:
    """Create a provider by name.

    Raises:
        ValueError: If the provider name is unknown
        InvalidCredentialsError: If the API key is empty
    """
    return AIProvider(name, api_key, model=model, request_timeout_ms=request_timeout_ms)


def _available(credentials: Mapping[ProviderName | str, str]) -> set[ProviderName]:
    return {ProviderName(name) for name, key in credentials.items() if key}


def select_provider(
    credentials: Mapping[ProviderName | str, str],
    preferred: ProviderName | str | None = None,
    estimated_tokens: int = 0,
) -> ProviderName | None:
    """Pick the provider for a request.

    An explicit preference wins. Otherwise prompts above 200k tokens go to
    gemini and above 128k to claude when configured, then the fixed order
    claude, openai, gemini applies.

    Args:
        credentials: API keys by provider name
        preferred: Caller's explicit choice
        estimated_tokens: Estimated prompt size

    Returns:
        The chosen provider, or None when no credentials are configured

    Raises:
        InvalidCredentialsError: If the preferred provider has no key
    """
    available = _available(credentials)

    if preferred is not None:
        name = ProviderName(preferred)
        if name not in available:
            raise InvalidCredentialsError("No API key configured", name.value)
        return name

    if not available:
        return None

    if estimated_tokens > LARGE_PROMPT_TOKENS and ProviderName.GEMINI in available:
        return ProviderName.GEMINI
    if estimated_tokens > MEDIUM_PROMPT_TOKENS and ProviderName.CLAUDE in available:
        return ProviderName.CLAUDE

    for name in PREFERENCE_ORDER:
        if name in available:
            return name
    return None


def select_cheapest(
    credentials: Mapping[ProviderName | str, str],
    estimated_tokens: int = 0,
) -> ProviderName | None:
    """Cheapest configured provider whose context window fits the prompt.

    Returns:
        The chosen provider, or None if nothing configured fits
    """
    candidates = [
        PROVIDER_VARIANTS[name].capabilities
        for name in PREFERENCE_ORDER
        if name in _available(credentials)
        and PROVIDER_VARIANTS[name].capabilities.context_window >= estimated_tokens
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda caps: caps.estimate_cost(estimated_tokens)).name
