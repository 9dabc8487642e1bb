"""Project analysis orchestrator.

Runs static analysis first, answers from the fingerprint cache when it can,
and only then samples files and asks an AI provider. Every call logs a
correlation id, the provider that answered, the duration and, on failure,
the error kind.
"""

import time
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from aicgen.analyzers.inference import infer_static_result
from aicgen.analyzers.static_analyzer import StaticAnalyzer
from aicgen.cache.store import FingerprintCache
from aicgen.config import AicgenConfig
from aicgen.errors import AicgenError, ProviderError
from aicgen.llm.prompts import PromptContext, build_analysis_prompt, estimate_prompt_tokens
from aicgen.llm.providers import AIProvider, ProviderName, create_provider, select_provider
from aicgen.llm.validator import AnalysisValidator
from aicgen.models.result import AnalysisResult, ArchitectureInfo
from aicgen.models.sampling import SamplingContext
from aicgen.resilience.retry import Backoff, RetryConfig, retry
from aicgen.resilience.timeout import with_abort_timeout
from aicgen.sampling.strategies import get_strategy
from aicgen.utils.logging import ContextLogger, bind_logger, get_logger

logger = get_logger(__name__)

CACHE_SOURCE = "cache"
NO_PROVIDER = "none"


@dataclass
class AnalysisOptions:
    """Options for one project analysis.

    Attributes:
        project_path: Project root directory
        strategy: Sampling strategy name
        max_files: Maximum sampled files
        max_tokens: Token budget for sampled content
        include_tests: Include one representative test file
        use_cache: Read from and write to the fingerprint cache
        timeout_ms: Deadline for each provider attempt
        max_retries: Total provider attempts
        initial_retry_delay_ms: Base backoff delay
        max_retry_delay_ms: Cap on a single backoff delay
    """

    project_path: Path
    strategy: str = "balanced"
    max_files: int = 12
    max_tokens: int = 8000
    include_tests: bool = False
    use_cache: bool = True
    timeout_ms: int = 30000
    max_retries: int = 3
    initial_retry_delay_ms: int = 1000
    max_retry_delay_ms: int = 10000

    @classmethod
    def from_config(cls, project_path: Path | str, config: AicgenConfig) -> "AnalysisOptions":
        """Build options from loaded configuration."""
        return cls(
            project_path=Path(project_path),
            strategy=config.sampling.strategy,
            max_files=config.sampling.max_files,
            max_tokens=config.sampling.max_tokens,
            include_tests=config.sampling.include_tests,
            use_cache=config.cache.enabled,
            timeout_ms=config.ai.timeout_ms,
            max_retries=config.ai.max_retries,
            initial_retry_delay_ms=config.ai.initial_retry_delay_ms,
            max_retry_delay_ms=config.ai.max_retry_delay_ms,
        )


def new_correlation_id() -> str:
    """Return an id tying together the log records of one analysis."""
    return f"ai-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"


def combine_results(static: AnalysisResult, ai: AnalysisResult, provider: str) -> AnalysisResult:
    """Merge an AI result with the static one.

    The AI's fields win; architecture confidence is the mean of both.

    Args:
        static: Result inferred from static hints
        ai: Validated provider result
        provider: Name of the provider that answered

    Returns:
        Combined result stamped with the provider and current time
    """
    confidence = round((static.architecture.confidence + ai.architecture.confidence) / 2, 2)
    return replace(
        ai,
        architecture=ArchitectureInfo(pattern=ai.architecture.pattern, confidence=confidence),
        source=provider,
        timestamp=int(time.time() * 1000),
    )


class AnalysisPipeline:
    """Orchestrates static analysis, caching, sampling and the AI call.

    Example:
        pipeline = AnalysisPipeline(cache=FingerprintCache(Path("~/.aicgen/cache/analysis")))
        result = pipeline.analyze_project(
            AnalysisOptions(project_path=Path(".")),
            credentials={ProviderName.CLAUDE: "sk-..."},
        )
    """

    def __init__(
        self,
        cache: FingerprintCache | None = None,
        static_analyzer: StaticAnalyzer | None = None,
        validator: AnalysisValidator | None = None,
        provider_factory: Callable[..., AIProvider] = create_provider,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the pipeline.

        Args:
            cache: Fingerprint cache; None disables caching
            static_analyzer: Static analyzer (default StaticAnalyzer())
            validator: Response validator (default AnalysisValidator())
            provider_factory: Builds a provider from (name, api_key, model, request_timeout_ms)
            sleep: Sleep used between retries
        """
        self.cache = cache
        self.static_analyzer = static_analyzer or StaticAnalyzer()
        self.validator = validator or AnalysisValidator()
        self.provider_factory = provider_factory
        self._sleep = sleep

    def analyze_project(
        self,
        options: AnalysisOptions,
        preferred_provider: ProviderName | str | None = None,
        credentials: Mapping[ProviderName | str, str] | None = None,
        models: Mapping[ProviderName | str, str] | None = None,
    ) -> AnalysisResult:
        """Characterize a project.

        Args:
            options: Analysis options
            preferred_provider: Explicit provider choice
            credentials: API keys by provider; without any, the static result is returned
            models: Model overrides by provider

        Returns:
            AnalysisResult; ``from_cache`` is True when served from the cache

        Raises:
            ProjectAccessError: If the project root cannot be read
            InvalidCredentialsError: If the preferred provider has no key or the key is rejected
            AicgenError: Any other typed failure, unchanged
            ProviderError: Wrapping any unexpected failure
        """
        started = time.monotonic()
        log = bind_logger(
            logger,
            correlation_id=new_correlation_id(),
            project=str(options.project_path),
        )
        provider_name = NO_PROVIDER

        def elapsed_ms() -> int:
            return int((time.monotonic() - started) * 1000)

        log.info("Starting project analysis")

        try:
            metadata = self.static_analyzer.analyze(options.project_path)
            log.debug(
                "Static analysis found %d files, language %s",
                len(metadata.files),
                metadata.language,
            )

            if options.use_cache and self.cache is not None:
                cached = self.cache.get(metadata.fingerprint)
                if cached is not None:
                    log.info(
                        "Analysis served from cache",
                        extra={"extra_data": {"provider": CACHE_SOURCE, "duration_ms": elapsed_ms()}},
                    )
                    return replace(cached, from_cache=True)

            static_result = infer_static_result(metadata)
            keys = {ProviderName(name): key for name, key in (credentials or {}).items() if key}

            if not keys and preferred_provider is None:
                result = replace(static_result, timestamp=int(time.time() * 1000))
                self._store(metadata.fingerprint, result, options, log)
                log.info(
                    "No AI credentials configured, returning static analysis",
                    extra={"extra_data": {"provider": NO_PROVIDER, "duration_ms": elapsed_ms()}},
                )
                return result

            samples = get_strategy(options.strategy).select(
                SamplingContext(
                    project_path=Path(options.project_path),
                    metadata=metadata,
                    language=metadata.language,
                    max_files=options.max_files,
                    max_tokens=options.max_tokens,
                    include_tests=options.include_tests,
                )
            )
            context = PromptContext(metadata=metadata, samples=samples)
            estimated_tokens = estimate_prompt_tokens(build_analysis_prompt(context))

            name = select_provider(keys, preferred_provider, estimated_tokens)
            if name is None:
                raise ProviderError("No AI provider available", NO_PROVIDER)
            provider_name = name.value
            log = log.bind(provider=provider_name)
            log.info(
                "Sampled %d files (~%d prompt tokens)",
                len(samples),
                estimated_tokens,
            )

            model = None
            if models:
                model = {ProviderName(key): value for key, value in models.items()}.get(name)
            provider = self.provider_factory(
                name, keys[name], model=model, request_timeout_ms=options.timeout_ms
            )

            def on_retry(attempt: int, error: Exception, delay_ms: int) -> None:
                log.warning(
                    "Attempt %d failed (%s), retrying in %dms",
                    attempt,
                    error,
                    delay_ms,
                    extra={"extra_data": {"error_kind": getattr(error, "kind", type(error).__name__)}},
                )

            raw = retry(
                lambda: with_abort_timeout(
                    lambda signal: provider.analyze(context, signal), options.timeout_ms
                ),
                RetryConfig(
                    max_attempts=options.max_retries,
                    initial_delay_ms=options.initial_retry_delay_ms,
                    max_delay_ms=options.max_retry_delay_ms,
                    backoff=Backoff.EXPONENTIAL,
                    on_retry=on_retry,
                ),
                sleep=self._sleep,
            )

            result = combine_results(
                static_result, self.validator.parse_and_validate(raw), provider_name
            )
            self._store(metadata.fingerprint, result, options, log)

            log.info(
                "Analysis complete: %s / %s",
                result.language,
                result.architecture.pattern,
                extra={"extra_data": {"provider": provider_name, "duration_ms": elapsed_ms()}},
            )
            return result

        except AicgenError as e:
            log.error(
                "Analysis failed: %s",
                e,
                extra={
                    "extra_data": {
                        "provider": provider_name,
                        "error_kind": e.kind,
                        "duration_ms": elapsed_ms(),
                    }
                },
            )
            raise
        except Exception as e:
            log.error(
                "Analysis failed unexpectedly: %s",
                e,
                extra={
                    "extra_data": {
                        "provider": provider_name,
                        "error_kind": type(e).__name__,
                        "duration_ms": elapsed_ms(),
                    }
                },
            )
            raise ProviderError(str(e), provider_name) from e

    def _store(
        self,
        fingerprint: str,
        result: AnalysisResult,
        options: AnalysisOptions,
        log: ContextLogger,
    ) -> None:
        """Write a cache entry; a failed write is logged, not raised."""
        if not options.use_cache or self.cache is None:
            return
        try:
            self.cache.set(fingerprint, result)
        except (OSError, ValueError) as e:
            log.warning("Failed to write cache entry: %s", e)


def analyze(
    project_path: Path | str,
    config: AicgenConfig | None = None,
    preferred_provider: ProviderName | str | None = None,
) -> AnalysisResult:
    """Analyze a project with configuration-derived settings.

    Args:
        project_path: Project root
        config: Loaded configuration (defaults apply when None)
        preferred_provider: Overrides the configured provider

    Returns:
        AnalysisResult
    """
    config = config or AicgenConfig()
    cache = FingerprintCache(config.cache.path, ttl_days=config.cache.ttl_days)
    pipeline = AnalysisPipeline(cache=cache if config.cache.enabled else None)
    return pipeline.analyze_project(
        AnalysisOptions.from_config(project_path, config),
        preferred_provider=preferred_provider or config.ai.provider,
        credentials=config.credentials(),
        models=config.models(),
    )
