"""
CLI entrypoint for Brand Visibility.

Provides a dual-mode command-line interface with:
- Human-friendly output: Rich spinners, tables, colored text
- Agent-friendly output: Structured JSON for automation
- Quiet mode: Tab-separated minimal output for shell scripts

Commands:
    analyze: Compute brand visibility metrics over a batch of LLM answers
    dedupe: Remove duplicate and repetitive prompts from a candidate list
    validate: Validate configuration without analyzing anything

Exit codes:
    0: Success
    1: Configuration error (missing file, invalid YAML, failed validation)
    2: Input error (missing or malformed responses/prompts file)

Examples:
    # Human-friendly output
    brand-visibility analyze --config brands.config.yaml --responses responses.json

    # Agent-friendly JSON output (no spinners, no colors)
    brand-visibility analyze -c brands.config.yaml -r answers/ --format json

    # Deduplicate generated prompts against ones already in use
    brand-visibility dedupe -c brands.config.yaml -p prompts.txt --existing saved.txt
"""

import logging
from importlib import metadata
from pathlib import Path
from typing import NoReturn

import typer
from rich.traceback import install as install_rich_traceback

from brand_visibility.config.loader import load_config
from brand_visibility.config.schema import AnalysisConfig, DedupSettings
from brand_visibility.exceptions import (
    ConfigFileNotFoundError,
    ConfigValidationError,
    InputFileError,
)
from brand_visibility.extractor.parser import analyze_responses
from brand_visibility.inputs import load_prompts, load_responses
from brand_visibility.prompts.deduplicator import dedupe_with_report
from brand_visibility.utils.console import (
    error,
    info,
    output_mode,
    print_analysis_summary,
    print_banner,
    print_citation_summary,
    print_metrics_table,
    print_prompt_table,
    spinner,
    success,
    warning,
)
from brand_visibility.utils.logging import get_logger, log_with_context, setup_logging

# Install Rich tracebacks for better error messages
install_rich_traceback(show_locals=False)

logger = get_logger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1  # Config missing or invalid
EXIT_INPUT_ERROR = 2  # Responses/prompts file missing or malformed

# Create Typer app
app = typer.Typer(
    name="brand-visibility",
    help="Measure how visible your brand is in LLM answers vs competitors",
    add_completion=False,
)


def _set_output(format: str, quiet: bool) -> None:
    """Apply --format/--quiet to the global output mode."""
    if format not in ("text", "json"):
        raise typer.BadParameter(
            f"Invalid format: {format}. Must be 'text' or 'json'", param_hint="--format"
        )
    output_mode.format = format
    output_mode.quiet = quiet


def _load_config_or_exit(config: Path, verbose: bool) -> AnalysisConfig:
    """Load configuration, printing the error and exiting with code 1 on failure."""
    try:
        with spinner("Loading configuration..."):
            return load_config(config)
    except ConfigFileNotFoundError as e:
        error(str(e))
    except ConfigValidationError as e:
        error(str(e))
        if verbose:
            import traceback

            traceback.print_exc()

    if output_mode.is_agent():
        output_mode.add_json("error_type", "config_error")
        output_mode.flush_json()
    raise typer.Exit(EXIT_CONFIG_ERROR)


def _input_error_exit(e: InputFileError) -> NoReturn:
    """Report an input file error and exit with code 2."""
    error(f"Input error: {e}")
    if output_mode.is_agent():
        output_mode.add_json("error_type", "input_error")
        output_mode.flush_json()
    raise typer.Exit(EXIT_INPUT_ERROR)


@app.command()
def analyze(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to YAML configuration file (brands and settings)",
    ),
    responses: Path = typer.Option(
        ...,
        "--responses",
        "-r",
        help="JSON list of answers, or a directory of .txt/.md answer files",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' (human-friendly) or 'json' (machine-readable)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output (tab-separated values)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Compute brand visibility metrics over a batch of LLM answers.

    This command will:
    1. Load your configuration (brands, matching and rounding settings)
    2. Read the answers (null entries count as failed responses)
    3. Extract and classify citations, match brand mentions
    4. Aggregate per-brand visibility, position, depth and citation share

    Exit codes:
      0: Analysis completed
      1: Configuration error
      2: Responses file missing or malformed

    Examples:
      brand-visibility analyze --config brands.config.yaml --responses responses.json
      brand-visibility analyze -c brands.config.yaml -r answers/ --format json
    """
    _set_output(format, quiet)
    setup_logging(verbose=verbose)

    print_banner(_read_version())

    analysis_config = _load_config_or_exit(config, verbose)
    success(f"Loaded {len(analysis_config.brands)} brands")

    try:
        with spinner("Reading responses..."):
            answers = load_responses(responses)
    except InputFileError as e:
        _input_error_exit(e)

    if not answers:
        warning(f"No responses found in {responses}")

    with spinner("Analyzing responses..."):
        batch = analyze_responses(answers, analysis_config.brands, analysis_config)

    success(f"Analyzed {batch.total_responses} responses")
    if batch.failed_responses:
        warning(f"{batch.failed_responses} responses were missing and skipped")

    social_count = sum(a.social_citation_count for a in batch.analyses if a is not None)

    print_metrics_table(batch.records)
    print_citation_summary(batch.citations, social_count)

    log_with_context(
        logger,
        logging.INFO,
        "Analysis finished",
        context={
            "total_responses": batch.total_responses,
            "failed_responses": batch.failed_responses,
            "citations": len(batch.citations),
        },
    )

    owner = analysis_config.owner
    print_analysis_summary(
        batch.total_responses,
        batch.failed_responses,
        owner.name if owner is not None else None,
    )


@app.command()
def dedupe(
    prompts: Path = typer.Option(
        ...,
        "--prompts",
        "-p",
        help="Candidate prompts: one per line, or a JSON list of strings",
    ),
    config: Path = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML configuration file (dedup thresholds); defaults apply if omitted",
    ),
    existing: Path = typer.Option(
        None,
        "--existing",
        "-e",
        help="Prompts already in use; they block duplicates but are not printed",
    ),
    show_rejected: bool = typer.Option(
        False,
        "--show-rejected",
        help="Also list removed prompts with the reason",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' or 'json'",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Print surviving prompts only, one per line",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging (shows every dedup decision)",
    ),
):
    """
    Remove exact, near-duplicate and repetitive prompts.

    Earlier prompts always win. Running dedupe on its own output changes
    nothing.

    Exit codes:
      0: Deduplication completed
      1: Configuration error
      2: Prompts file missing or malformed

    Examples:
      brand-visibility dedupe --prompts prompts.txt
      brand-visibility dedupe -c brands.config.yaml -p prompts.json --existing saved.txt --format json
    """
    _set_output(format, quiet)
    setup_logging(verbose=verbose)

    settings = DedupSettings()
    if config is not None:
        settings = _load_config_or_exit(config, verbose).dedup

    try:
        candidates = load_prompts(prompts)
        existing_prompts = load_prompts(existing) if existing is not None else None
    except InputFileError as e:
        _input_error_exit(e)

    with spinner("Deduplicating prompts..."):
        report = dedupe_with_report(candidates, settings, existing_prompts)

    success(f"Kept {len(report.accepted)} of {len(candidates)} prompts")
    for reason, count in sorted(report.reason_counts().items()):
        info(f"Removed {count} ({reason})")

    print_prompt_table(report, show_rejected=show_rejected)
    output_mode.flush_json()


@app.command()
def validate(
    config: Path = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to YAML configuration file",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' or 'json'",
    ),
):
    """
    Validate configuration file without analyzing anything.

    Checks:
    - YAML syntax is valid
    - At least one brand, unique names, at most one owner
    - Brand domains are valid hosts
    - Matching, aggregation and dedup settings are in range

    Exit codes:
      0: Configuration is valid
      1: Configuration is invalid

    Examples:
      brand-visibility validate --config brands.config.yaml
      brand-visibility validate --config brands.config.yaml --format json
    """
    _set_output(format, False)

    try:
        with spinner("Validating configuration..."):
            analysis_config = load_config(config)
    except (ConfigFileNotFoundError, ConfigValidationError) as e:
        error(str(e))

        if output_mode.is_agent():
            output_mode.add_json("valid", False)
            output_mode.add_json(
                "error_type",
                "file_not_found" if isinstance(e, ConfigFileNotFoundError) else "validation_error",
            )
            output_mode.flush_json()

        raise typer.Exit(EXIT_CONFIG_ERROR)

    owner = analysis_config.owner
    competitors = [b for b in analysis_config.brands if not b.is_owner]

    success("Configuration is valid")
    info(f"Owner brand: {owner.name if owner else '(none)'}")
    info(f"Competitors: {len(competitors)}")
    info(f"Fuzzy threshold: {analysis_config.matching.fuzzy_threshold:g}")

    if output_mode.is_agent():
        output_mode.add_json("valid", True)
        output_mode.add_json("brands_count", len(analysis_config.brands))
        output_mode.add_json("owner", owner.name if owner else None)
        output_mode.add_json("competitors_count", len(competitors))
        output_mode.flush_json()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
):
    """
    Brand Visibility - Measure your brand's presence in LLM answers.

    Analyze batches of LLM answers for brand mentions, positions and cited
    sources, and keep generated prompt sets free of duplicates.

    Use 'brand-visibility COMMAND --help' for detailed command documentation.
    """
    if version:
        from rich.console import Console

        console = Console()
        console.print(f"[bold cyan]brand-visibility[/bold cyan] version {_read_version()}")
        raise typer.Exit(EXIT_SUCCESS)

    if ctx.invoked_subcommand is None:
        from rich.console import Console

        console = Console()
        console.print("[yellow]Use --help to see available commands[/yellow]")
        console.print()
        console.print("Commands:")
        console.print("  analyze   Compute visibility metrics for a batch of answers")
        console.print("  dedupe    Remove duplicate and repetitive prompts")
        console.print("  validate  Validate configuration")


def _read_version() -> str:
    """Read version from package metadata."""
    try:
        return metadata.version("brand-visibility")
    except metadata.PackageNotFoundError:
        return "0.1.0"


if __name__ == "__main__":
    app()
