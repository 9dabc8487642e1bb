"""aicgen configuration system.

Configuration is YAML-based with a few CLI overrides (--provider, --strategy,
--no-cache). Supports environment variable substitution (${VAR}) so API keys
never have to be written into the file.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.aicgen/config.yaml
3. ./aicgen.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from aicgen.llm.providers import ProviderName
from aicgen.sampling.strategies import STRATEGY_NAMES

DEFAULT_CACHE_DIR = "~/.aicgen/cache/analysis"

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class CacheConfig:
    """Fingerprint cache configuration.

    Attributes:
        enabled: Whether results are read from and written to the cache
        directory: Cache root; "~" is expanded
        ttl_days: Entries older than this are ignored and pruned
    """

    enabled: bool = True
    directory: str = DEFAULT_CACHE_DIR
    ttl_days: int = 30

    def __post_init__(self) -> None:
        """Validate cache configuration."""
        if self.ttl_days <= 0:
            raise ValueError(f"Cache ttl_days must be positive (got {self.ttl_days})")

    @property
    def path(self) -> Path:
        """Expanded cache root."""
        return Path(self.directory).expanduser()


@dataclass
class SamplingConfig:
    """File sampling configuration.

    Attributes:
        strategy: Sampling strategy (minimal, balanced, comprehensive)
        max_files: Maximum number of sampled files
        max_tokens: Token budget for all sampled content
        include_tests: Include one representative test file
    """

    strategy: str = "balanced"
    max_files: int = 12
    max_tokens: int = 8000
    include_tests: bool = False

    def __post_init__(self) -> None:
        """Validate sampling configuration."""
        if self.strategy not in STRATEGY_NAMES:
            raise ValueError(
                f"Invalid sampling strategy: {self.strategy}. Valid: {sorted(STRATEGY_NAMES)}"
            )
        if self.max_files <= 0:
            raise ValueError(f"max_files must be positive (got {self.max_files})")
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive (got {self.max_tokens})")


@dataclass
class ProviderConfig:
    """Credentials and model override for one AI provider.

    Attributes:
        api_key: Resolved API key (usually from ${ENV_VAR})
        model: Model identifier; None uses the provider default
    """

    api_key: str | None = None
    model: str | None = None


@dataclass
class AIConfig:
    """AI invocation configuration.

    Attributes:
        provider: Preferred provider; None selects automatically
        timeout_ms: Deadline for a single provider call
        max_retries: Maximum attempts per analysis
        initial_retry_delay_ms: Base delay for exponential backoff
        max_retry_delay_ms: Upper bound for a single backoff delay
        providers: Per-provider credentials and models
    """

    provider: str | None = None
    timeout_ms: int = 30000
    max_retries: int = 3
    initial_retry_delay_ms: int = 1000
    max_retry_delay_ms: int = 10000
    providers: dict[str, ProviderConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate AI configuration."""
        valid_providers = {name.value for name in ProviderName}
        if self.provider is not None and self.provider not in valid_providers:
            raise ValueError(f"Invalid AI provider: {self.provider}. Valid: {sorted(valid_providers)}")
        for name in self.providers:
            if name not in valid_providers:
                raise ValueError(f"Invalid AI provider: {name}. Valid: {sorted(valid_providers)}")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive (got {self.timeout_ms})")
        if self.max_retries < 1:
            raise ValueError(f"max_retries must be at least 1 (got {self.max_retries})")


@dataclass
class AicgenConfig:
    """Top-level aicgen configuration.

    Attributes:
        cache: Fingerprint cache settings
        sampling: File sampling settings
        ai: Provider and resilience settings
    """

    cache: CacheConfig = field(default_factory=CacheConfig)
    sampling: SamplingConfig = field(default_factory=SamplingConfig)
    ai: AIConfig = field(default_factory=AIConfig)

    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path

    def credentials(self) -> dict[ProviderName, str]:
        """Return API keys for every provider that has one configured."""
        return {
            ProviderName(name): provider.api_key
            for name, provider in self.ai.providers.items()
            if provider.api_key
        }

    def models(self) -> dict[ProviderName, str]:
        """Return model overrides keyed by provider."""
        return {
            ProviderName(name): provider.model
            for name, provider in self.ai.providers.items()
            if provider.model
        }


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${ANTHROPIC_API_KEY} -> value of ANTHROPIC_API_KEY

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".aicgen" / "config.yaml",
        start_path / "aicgen.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> AicgenConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        AicgenConfig instance

    Raises:
        ValueError: If a value is invalid or a referenced variable is unset
    """
    data = substitute_env_vars(data)

    config = AicgenConfig()

    if "cache" in data:
        cache_data = data["cache"] or {}
        config.cache = CacheConfig(
            enabled=cache_data.get("enabled", config.cache.enabled),
            directory=cache_data.get("directory", config.cache.directory),
            ttl_days=cache_data.get("ttl_days", config.cache.ttl_days),
        )

    if "sampling" in data:
        sampling_data = data["sampling"] or {}
        config.sampling = SamplingConfig(
            strategy=sampling_data.get("strategy", config.sampling.strategy),
            max_files=sampling_data.get("max_files", config.sampling.max_files),
            max_tokens=sampling_data.get("max_tokens", config.sampling.max_tokens),
            include_tests=sampling_data.get("include_tests", config.sampling.include_tests),
        )

    if "ai" in data:
        ai_data = data["ai"] or {}
        providers = {
            name: ProviderConfig(
                api_key=(provider_data or {}).get("api_key"),
                model=(provider_data or {}).get("model"),
            )
            for name, provider_data in (ai_data.get("providers") or {}).items()
        }
        config.ai = AIConfig(
            provider=ai_data.get("provider"),
            timeout_ms=ai_data.get("timeout_ms", config.ai.timeout_ms),
            max_retries=ai_data.get("max_retries", config.ai.max_retries),
            initial_retry_delay_ms=ai_data.get(
                "initial_retry_delay_ms", config.ai.initial_retry_delay_ms
            ),
            max_retry_delay_ms=ai_data.get("max_retry_delay_ms", config.ai.max_retry_delay_ms),
            providers=providers,
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> AicgenConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        AicgenConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = AicgenConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# aicgen configuration

# Analysis result cache, keyed by project fingerprint
cache:
  enabled: true
  directory: "~/.aicgen/cache/analysis"
  ttl_days: 30

# Which files are shown to the AI provider
sampling:
  strategy: "balanced"   # minimal, balanced, comprehensive
  max_files: 12
  max_tokens: 8000
  include_tests: false

# AI providers; without any api_key the analysis is static only
ai:
  # provider: "claude"   # claude, openai, gemini (omit to select automatically)
  timeout_ms: 30000
  max_retries: 3
  initial_retry_delay_ms: 1000
  max_retry_delay_ms: 10000
  providers: {}
  #   claude:
  #     api_key: "${ANTHROPIC_API_KEY}"
  #   openai:
  #     api_key: "${OPENAI_API_KEY}"
  #     model: "gpt-4o"
  #   gemini:
  #     api_key: "${GEMINI_API_KEY}"
'''
