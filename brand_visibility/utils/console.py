"""
Rich console utilities for dual-mode CLI output.

Provides readable terminal output for humans and structured JSON for agents.
All output functions adapt to the global output_mode setting.

This module provides:
- OutputMode: Class to manage output format (text/json/quiet)
- Context manager: spinner()
- Output functions: success(), error(), warning(), info()
- Display functions: print_banner(), print_metrics_table(),
  print_citation_summary(), print_prompt_table(), print_analysis_summary()

Human Mode (--format text):
    - Rich spinners and colored tables
    - Panels for summaries

Agent Mode (--format json):
    - Structured JSON output to stdout, flushed once per command
    - No ANSI codes or spinners

Quiet Mode (--quiet):
    - Tab-separated values
    - No decorations

Examples:
    >>> from brand_visibility.utils.console import output_mode, spinner, success
    >>> output_mode.format = "text"
    >>> with spinner("Analyzing responses..."):
    ...     batch = analyze_responses(responses, config.brands, config)
    >>> success("Analyzed 12 responses")

    >>> output_mode.format = "json"
    >>> success("Analyzed 12 responses")  # Buffers to JSON
    >>> output_mode.flush_json()  # Outputs JSON to stdout
"""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from brand_visibility.utils.time import utc_timestamp

if TYPE_CHECKING:
    from brand_visibility.models import Citation, MetricsRecord
    from brand_visibility.prompts.deduplicator import DedupReport


class OutputMode:
    """
    Output mode configuration for dual-mode CLI.

    Attributes:
        format: Output format - "text" (human) or "json" (agent)
        quiet: If True, print tab-separated values only
        _json_buffer: Internal buffer for JSON output in agent mode

    Examples:
        >>> mode = OutputMode()
        >>> mode.is_human()
        True
        >>> mode.format = "json"
        >>> mode.is_agent()
        True
    """

    def __init__(self, format_type: str = "text", quiet: bool = False):
        """
        Initialize output mode.

        Raises:
            ValueError: If format_type is not "text" or "json"
        """
        if format_type not in ["text", "json"]:
            raise ValueError(f"Invalid format: {format_type}. Must be 'text' or 'json'")

        self.format = format_type
        self.quiet = quiet
        self._json_buffer: dict[str, Any] = {}

    def is_human(self) -> bool:
        """True if format is "text"."""
        return self.format == "text"

    def is_agent(self) -> bool:
        """True if format is "json"."""
        return self.format == "json"

    def add_json(self, key: str, value: Any) -> None:
        """
        Add key-value pair to JSON buffer.

        Used in agent mode to accumulate structured data before the final
        output via flush_json().
        """
        self._json_buffer[key] = value

    def append_json(self, key: str, value: Any) -> None:
        """Append value to the list stored under key in the JSON buffer."""
        self._json_buffer.setdefault(key, []).append(value)

    def flush_json(self) -> None:
        """
        Output buffered JSON to stdout and clear buffer.

        Only outputs in agent mode. In human mode, this is a no-op.
        """
        if self.is_agent() and self._json_buffer:
            json.dump(self._json_buffer, sys.stdout, indent=2, default=str)
            sys.stdout.write("\n")
            sys.stdout.flush()
            self._json_buffer.clear()

    def reset(self) -> None:
        """Restore defaults and drop any buffered JSON."""
        self.format = "text"
        self.quiet = False
        self._json_buffer.clear()


# Global output mode instance (set by CLI flags)
output_mode = OutputMode()

# Global Rich console instances for human mode
console = Console()  # stdout
console_err = Console(stderr=True)  # stderr


@contextmanager
def spinner(message: str):
    """
    Show a spinner while the block runs.

    Displays a Rich spinner in human mode, silent otherwise.
    """
    if output_mode.is_human() and not output_mode.quiet:
        with console.status(f"[bold blue]{message}", spinner="dots") as status:
            yield status
    else:
        yield None


def success(message: str) -> None:
    """
    Print a success message.

    Human mode: Green checkmark with message
    Agent mode: Buffer to JSON
    """
    if output_mode.is_agent():
        output_mode.add_json("status", "success")
        output_mode.add_json("message", message)
    elif not output_mode.quiet:
        console.print(f"[green]✓[/green] {message}")


def error(message: str) -> None:
    """
    Print an error message.

    Human mode: Red X with message to stderr (also in quiet mode)
    Agent mode: Buffer to JSON

    Examples:
        >>> error("Configuration file not found: brands.yaml")
        # Human: [red X] Configuration file not found: brands.yaml (to stderr)
        # Agent: Buffers {"status": "error", "error": "..."}
    """
    if output_mode.is_agent():
        output_mode.add_json("status", "error")
        output_mode.add_json("error", message)
    else:
        console_err.print(f"[red]✗[/red] {message}", style="red")


def warning(message: str) -> None:
    """
    Print a warning message.

    Human mode: Yellow warning symbol with message
    Agent mode: Appended to the "warnings" list in the JSON buffer
    """
    if output_mode.is_agent():
        output_mode.append_json("warnings", message)
    elif not output_mode.quiet:
        console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")


def info(message: str) -> None:
    """Print an info message (human mode only)."""
    if output_mode.is_human() and not output_mode.quiet:
        console.print(f"[blue]ℹ[/blue] {message}")


def print_banner(version: str) -> None:
    """
    Print a startup banner with version.

    Silent in agent/quiet modes.
    """
    if not output_mode.is_human() or output_mode.quiet:
        return

    banner = f"""
[bold cyan]╔{"═" * 39}╗
║   Brand Visibility v{version:<18}║
║   Brand presence in LLM answers       ║
╚{"═" * 39}╝[/bold cyan]
"""

    console.print(banner)


def _format_number(value: float) -> str:
    """Render 67.0 as "67" and 1.5 as "1.5"."""
    return f"{value:g}"


def _format_sentiment(score: float) -> str:
    """Render a sentiment score with a color by sign."""
    if score > 0:
        return f"[green]+{_format_number(score)}[/green]"
    if score < 0:
        return f"[red]{_format_number(score)}[/red]"
    return "0"


def print_metrics_table(records: list[MetricsRecord]) -> None:
    """
    Print per-brand visibility metrics.

    Human mode: Rich table ordered by visibility rank, owner highlighted
    Agent mode: Buffer records as JSON array under "metrics"
    Quiet mode: One tab-separated line per brand:
        <rank>\\t<brand>\\t<visibility>\\t<avg_position>\\t<depth>\\t<citation_share>
    """
    ordered = sorted(records, key=lambda r: r.visibility_rank)

    if output_mode.is_agent():
        output_mode.add_json("metrics", [asdict(r) for r in ordered])
        return

    if output_mode.quiet:
        for r in ordered:
            print(
                f"{r.visibility_rank}\t{r.brand_name}\t{_format_number(r.visibility_score)}\t"
                f"{_format_number(r.average_position)}\t{_format_number(r.depth_of_mention)}\t"
                f"{_format_number(r.citation_share)}"
            )
        return

    table = Table(title="Brand Visibility", box=box.ROUNDED)

    table.add_column("#", justify="right", style="dim")
    table.add_column("Brand", style="cyan", no_wrap=True)
    table.add_column("Visibility", justify="right")
    table.add_column("Avg Pos", justify="right")
    table.add_column("Depth", justify="right")
    table.add_column("1st/2nd/3rd", justify="center")
    table.add_column("Citations", justify="right")
    table.add_column("Cit. Share", justify="right", style="green")
    table.add_column("Voice", justify="right")
    table.add_column("Sentiment", justify="right")

    for r in ordered:
        name = f"[bold]{r.brand_name}[/bold] (you)" if r.is_owner else r.brand_name
        dist = r.position_distribution
        table.add_row(
            str(r.visibility_rank),
            name,
            f"{_format_number(r.visibility_score)}%",
            _format_number(r.average_position) if r.average_position else "-",
            _format_number(r.depth_of_mention),
            f"{dist.get(1, 0)}/{dist.get(2, 0)}/{dist.get(3, 0)}",
            str(r.citation_count),
            f"{_format_number(r.citation_share)}%",
            f"{_format_number(r.share_of_voice)}%",
            _format_sentiment(r.sentiment_score),
        )

    console.print(table)


def print_citation_summary(citations: list[Citation], social_count: int = 0) -> None:
    """
    Print brand vs earned citation counts and the most cited hosts.

    Human mode: Rich table of top hosts with type and owner
    Agent mode: Buffer counts and the citation list under "citations"
    Quiet mode: <total>\\t<brand>\\t<earned>\\t<social>
    """
    brand_count = sum(1 for c in citations if c.type == "brand")
    earned_count = len(citations) - brand_count

    if output_mode.is_agent():
        output_mode.add_json(
            "citations",
            {
                "total": len(citations),
                "brand": brand_count,
                "earned": earned_count,
                "social": social_count,
                "items": [asdict(c) for c in citations],
            },
        )
        return

    if output_mode.quiet:
        print(f"{len(citations)}\t{brand_count}\t{earned_count}\t{social_count}")
        return

    if not citations:
        info("No citations found")
        return

    host_counts: dict[str, list] = {}
    for c in citations:
        entry = host_counts.setdefault(c.host or "?", [0, c.type, c.owner_brand])
        entry[0] += 1

    table = Table(
        title=(
            f"Citations: {len(citations)} total, {brand_count} brand, "
            f"{earned_count} earned, {social_count} social"
        ),
        box=box.ROUNDED,
    )
    table.add_column("Host", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Type", justify="center")
    table.add_column("Owner", style="magenta")

    top_hosts = sorted(host_counts.items(), key=lambda item: -item[1][0])[:10]
    for host, (count, citation_type, owner) in top_hosts:
        type_str = (
            "[green]brand[/green]" if citation_type == "brand" else "[yellow]earned[/yellow]"
        )
        table.add_row(host, str(count), type_str, owner or "")

    console.print(table)


def print_prompt_table(report: DedupReport, show_rejected: bool = False) -> None:
    """
    Print deduplicated prompts.

    Human mode: Table of surviving prompts (and rejections if show_rejected)
    Agent mode: Buffer accepted texts and rejections with reasons
    Quiet mode: One surviving prompt per line
    """
    if output_mode.is_agent():
        output_mode.add_json("accepted", report.texts)
        output_mode.add_json("rejected", [asdict(r) for r in report.rejected])
        output_mode.add_json("rejection_counts", report.reason_counts())
        return

    if output_mode.quiet:
        for text in report.texts:
            print(text)
        return

    table = Table(
        title=f"Prompts: {len(report.accepted)} kept, {len(report.rejected)} removed",
        box=box.ROUNDED,
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Prompt", style="cyan")
    for index, text in enumerate(report.texts, start=1):
        table.add_row(str(index), text)
    console.print(table)

    if show_rejected and report.rejected:
        rejected = Table(title="Removed", box=box.SIMPLE)
        rejected.add_column("Prompt")
        rejected.add_column("Reason", style="yellow")
        rejected.add_column("Matched", style="dim")
        for r in report.rejected:
            rejected.add_row(r.text, r.reason, r.matched or "")
        console.print(rejected)


def print_analysis_summary(total: int, failed: int, owner: str | None) -> None:
    """
    Print the closing summary for an analyze run and flush JSON.

    Human mode: Panel with green border if every response was analyzed
    Agent mode: Add counts and flush all buffered JSON
    Quiet mode: Silent (tables already printed)
    """
    if output_mode.is_agent():
        output_mode.add_json("total_responses", total)
        output_mode.add_json("failed_responses", failed)
        output_mode.add_json("owner", owner)
        output_mode.add_json("analyzed_at", utc_timestamp())
        output_mode.flush_json()
        return

    if output_mode.quiet:
        return

    summary_text = f"""
[bold]Owner brand:[/bold] {owner or "(none)"}
[bold]Responses analyzed:[/bold] {total}
[bold]Responses missing:[/bold] {failed}
"""

    if failed == 0:
        border_style = "green"
        title = "[bold green]✓ Analysis Complete[/bold green]"
    elif total > 0:
        border_style = "yellow"
        title = "[bold yellow]⚠ Analysis Complete with Missing Responses[/bold yellow]"
    else:
        border_style = "red"
        title = "[bold red]✗ No Responses Analyzed[/bold red]"

    console.print(
        Panel(summary_text.strip(), title=title, border_style=border_style, box=box.ROUNDED)
    )
