"""aicgen CLI interface.

Commands:
- analyze: Characterize a project directory
- init: Write a default configuration file
- cache stats / cache clear / cache prune: Maintain the analysis cache

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log lines
- --version: Show version and exit

Exit codes: 0 success, 1 analysis failure, 2 configuration error.
"""

import json as json_module
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated

import typer
import yaml

from aicgen import __version__
from aicgen.cache.store import FingerprintCache
from aicgen.config import AicgenConfig, create_default_config, load_config
from aicgen.errors import AicgenError
from aicgen.llm.providers import ProviderName
from aicgen.models.result import AnalysisResult
from aicgen.pipeline import AnalysisOptions, AnalysisPipeline
from aicgen.sampling.strategies import STRATEGY_NAMES
from aicgen.utils.logging import configure_from_cli, get_logger

EXIT_ANALYSIS_ERROR = 1
EXIT_CONFIG_ERROR = 2

app = typer.Typer(
    name="aicgen",
    help="Project analysis for AI coding assistant configuration",
    add_completion=False,
    no_args_is_help=True,
)
cache_app = typer.Typer(help="Inspect and maintain the analysis cache", no_args_is_help=True)
app.add_typer(cache_app, name="cache")

# Global state
_config: AicgenConfig | None = None
_logger = get_logger()


def _get_config() -> AicgenConfig:
    return _config or AicgenConfig()


def _get_cache(config: AicgenConfig) -> FingerprintCache:
    return FingerprintCache(config.cache.path, ttl_days=config.cache.ttl_days)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"aicgen {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """aicgen - characterize a codebase for coding-assistant guidelines.

    Detects language, architecture, datasource and testing maturity using
    static analysis, optionally refined by an AI provider.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(EXIT_CONFIG_ERROR)
    except (ValueError, yaml.YAMLError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(EXIT_CONFIG_ERROR)


# =============================================================================
# analyze command
# =============================================================================


def _format_result(result: AnalysisResult) -> str:
    source = f"{result.source} (cached)" if result.from_cache else result.source
    lines = [
        f"  Language:       {result.language}",
        f"  Project type:   {result.project_type}",
        f"  Architecture:   {result.architecture.pattern} "
        f"(confidence {result.architecture.confidence:.2f})",
        f"  Datasource:     {result.datasource}",
        f"  Level:          {result.level}",
        f"  Testing:        {result.testing_maturity}",
    ]
    if result.backend_style:
        lines.append(f"  Backend style:  {result.backend_style}")
    if result.frontend_style:
        lines.append(f"  Frontend style: {result.frontend_style}")
    lines.append(f"  Source:         {source}")
    if result.reasoning:
        lines.append(f"\n  {result.reasoning}")
    return "\n".join(lines)


@app.command()
def analyze(
    path: Annotated[
        Path,
        typer.Argument(
            help="Project directory to analyze",
            file_okay=False,
        ),
    ] = Path("."),
    provider: Annotated[
        str | None,
        typer.Option(
            "--provider",
            "-p",
            help="AI provider (claude, openai, gemini); overrides config",
        ),
    ] = None,
    strategy: Annotated[
        str | None,
        typer.Option(
            "--strategy",
            "-s",
            help="Sampling strategy (minimal, balanced, comprehensive); overrides config",
        ),
    ] = None,
    no_cache: Annotated[
        bool,
        typer.Option(
            "--no-cache",
            help="Neither read nor write the analysis cache",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output the result as JSON",
        ),
    ] = False,
) -> None:
    """Analyze a project and print its characterization."""
    config = _get_config()

    valid_providers = {name.value for name in ProviderName}
    if provider is not None and provider not in valid_providers:
        _logger.error(f"Invalid provider: {provider}. Valid: {sorted(valid_providers)}")
        raise typer.Exit(EXIT_CONFIG_ERROR)
    if strategy is not None and strategy not in STRATEGY_NAMES:
        _logger.error(f"Invalid strategy: {strategy}. Valid: {sorted(STRATEGY_NAMES)}")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    options = AnalysisOptions.from_config(path, config)
    if strategy is not None:
        options.strategy = strategy
    if no_cache:
        options.use_cache = False

    pipeline = AnalysisPipeline(cache=_get_cache(config) if options.use_cache else None)

    try:
        result = pipeline.analyze_project(
            options,
            preferred_provider=provider or config.ai.provider,
            credentials=config.credentials(),
            models=config.models(),
        )
    except AicgenError as e:
        _logger.error(f"Analysis failed: {e}")
        raise typer.Exit(EXIT_ANALYSIS_ERROR)

    if json_output:
        data = result.to_dict()
        data["fromCache"] = result.from_cache
        typer.echo(json_module.dumps(data, indent=2))
    else:
        typer.echo(f"\n📊 Analysis of {path}\n")
        typer.echo(_format_result(result))
        typer.echo()


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing configuration file",
        ),
    ] = False,
) -> None:
    """Write a default .aicgen/config.yaml in the current directory."""
    config_file = Path.cwd() / ".aicgen" / "config.yaml"
    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file} (use --force to overwrite)")
        raise typer.Exit(1)

    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(create_default_config())
    typer.echo(f"✅ Configuration written to {config_file}")


# =============================================================================
# cache commands
# =============================================================================


def _format_timestamp(timestamp_ms: int | None) -> str:
    if timestamp_ms is None:
        return "-"
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


@cache_app.command("stats")
def cache_stats(
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output statistics as JSON",
        ),
    ] = False,
) -> None:
    """Show cache entry count, size and age range."""
    cache = _get_cache(_get_config())
    stats = cache.get_stats()

    if json_output:
        data = stats.to_dict()
        data["directory"] = str(cache.directory)
        typer.echo(json_module.dumps(data, indent=2))
        return

    typer.echo(f"Cache directory: {cache.directory}")
    typer.echo(f"  Entries:  {stats.total_entries}")
    typer.echo(f"  Size:     {stats.total_size_bytes} bytes")
    typer.echo(f"  Oldest:   {_format_timestamp(stats.oldest_entry)}")
    typer.echo(f"  Newest:   {_format_timestamp(stats.newest_entry)}")


@cache_app.command("clear")
def cache_clear() -> None:
    """Delete every cache entry."""
    removed = _get_cache(_get_config()).clear()
    typer.echo(f"Removed {removed} cache entries")


@cache_app.command("prune")
def cache_prune() -> None:
    """Delete cache entries older than the configured TTL."""
    removed = _get_cache(_get_config()).clear_expired()
    typer.echo(f"Removed {removed} expired cache entries")
