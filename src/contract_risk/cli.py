"""Command-line interface for Contract Risk Analyzer.

Provides ``analyze``, ``quality``, ``rules`` and ``parse-response``
commands with rich terminal output using the ``click`` and ``rich``
libraries.

Usage::

    contract-risk analyze contract.pdf
    contract-risk analyze --ai --output json contract.docx
    contract-risk quality scanned.pdf
    contract-risk rules --rules my_rules.yaml
    contract-risk parse-response reply.txt
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .analyzer import ContractAnalyzer
from .config import Settings, load_rules
from .exceptions import ConfigurationError, ExtractionError, InsightError, TextTooShortError
from .extraction import extract_text
from .models import AnalysisResult, RiskLevel, Severity
from .preprocessing import TextNormalizer
from .response_parser import ResponseParser

console = Console()
err_console = Console(stderr=True)

# Third-party loggers that are noisy at DEBUG
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "pdfminer")


def _configure_logging(level_name: str) -> None:
    """Route package logging through rich on stderr."""
    level = getattr(logging, level_name.upper(), logging.WARNING)
    package_logger = logging.getLogger("contract_risk")
    package_logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(
            RichHandler(console=err_console, show_path=False, rich_tracebacks=True)
        )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def _get_risk_style(level: RiskLevel | Severity) -> str:
    """Return a rich style string for a risk level or severity."""
    return {
        "critical": "bold white on red",
        "high": "bold red",
        "medium": "bold yellow",
        "low": "dim green",
    }.get(level.value, "")


def _get_risk_icon(level: RiskLevel | Severity) -> str:
    """Return an emoji icon for a risk level or severity."""
    return {
        "critical": "⛔",
        "high": "🔴",
        "medium": "🟡",
        "low": "🟢",
    }.get(level.value, "")


def _fail(message: str) -> None:
    err_console.print(f"[bold red]Error:[/] {escape(message)}", soft_wrap=True)
    sys.exit(1)


def _load_settings() -> Settings:
    """Read settings for commands that need them; exits on bad values."""
    try:
        return Settings.from_env(dotenv=False)
    except ConfigurationError as e:
        _fail(str(e))


@click.group()
@click.version_option(package_name="contract-risk-analyzer")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def main(verbose: bool) -> None:
    """⚖️ Contract Risk Analyzer — find risky clauses before you sign.

    Detects red-flag clauses, missing sections and obligations, scores
    the overall risk and optionally asks a language model for a
    plain-English review.
    """
    load_dotenv()
    _configure_logging("DEBUG" if verbose else os.getenv("CONTRACT_RISK_LOG_LEVEL", "WARNING"))


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.option("--ai/--no-ai", default=False,
              help="Add insights from the configured language model.")
@click.option("--rules", "rules_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Rule file to use instead of the bundled rules.")
@click.option("--templates", "templates_path",
              type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Template file to use instead of the bundled templates.")
@click.option("--save", "-s", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Save results to a JSON file.")
def analyze(
    file: Path,
    output: str,
    ai: bool,
    rules_path: Path | None,
    templates_path: Path | None,
    save: Path | None,
) -> None:
    """Run the full risk analysis on a contract.

    Example: contract-risk analyze --ai contract.pdf
    """
    settings = _load_settings()
    overrides = {}
    if rules_path:
        overrides["rules_path"] = rules_path
    if templates_path:
        overrides["templates_path"] = templates_path
    settings = dataclasses.replace(settings, **overrides)

    try:
        analyzer = ContractAnalyzer(settings=settings)
        text = extract_text(file)
        with console.status("[bold blue]Analyzing contract...", spinner="dots"):
            result = analyzer.analyze(text)
    except (ConfigurationError, ExtractionError, TextTooShortError) as e:
        _fail(str(e))

    if ai:
        try:
            with console.status("[bold blue]Requesting AI insights...", spinner="dots"):
                result = analyzer.add_insights(result, text)
        except InsightError as e:
            err_console.print(
                f"[bold yellow]Warning:[/] AI insights unavailable: {escape(str(e))}",
                soft_wrap=True,
            )

    if output == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render_analysis(result, file.name)

    if save:
        save.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        err_console.print(f"[dim]Results saved to {escape(str(save))}[/]", soft_wrap=True)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def quality(file: Path) -> None:
    """Score how cleanly text was extracted from a document.

    Example: contract-risk quality scanned.pdf
    """
    normalizer = TextNormalizer()
    try:
        cleaned = normalizer.clean(extract_text(file))
    except ExtractionError as e:
        _fail(str(e))

    score = normalizer.assess_quality(cleaned)
    if score >= 80:
        style = "bold green"
    elif score >= 50:
        style = "bold yellow"
    else:
        style = "bold red"

    console.print(Panel(
        f"Quality Score: [{style}]{score}/100[/]\n"
        f"Words: {normalizer.word_count(cleaned)} | "
        f"Sentences: {len(normalizer.extract_sentences(cleaned))}",
        title=f"🔍 Extraction Quality — {file.name}",
        border_style="blue",
    ))


@main.command(name="rules")
@click.option("--rules", "rules_path", type=click.Path(exists=True, dir_okay=False, path_type=Path),
              default=None, help="Rule file to list instead of the configured rules.")
def list_rules(rules_path: Path | None) -> None:
    """List the configured red-flag rules.

    Example: contract-risk rules
    """
    try:
        rules = load_rules(rules_path or _load_settings().rules_path)
    except ConfigurationError as e:
        _fail(str(e))

    table = Table(title=f"Rules ({len(rules)})", show_lines=False)
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    table.add_column("Severity", justify="center", width=10)
    table.add_column("Patterns", justify="right", width=8)

    for rule in rules:
        table.add_row(
            rule.id,
            rule.name,
            Text(rule.severity.value.upper(), style=_get_risk_style(rule.severity)),
            str(len(rule.patterns)),
        )

    console.print(table)


@main.command(name="parse-response")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def parse_response(file: Path) -> None:
    """Parse a saved language-model reply into structured insights (JSON).

    Example: contract-risk parse-response reply.txt
    """
    insights = ResponseParser().parse(file.read_text(encoding="utf-8"))
    click.echo(json.dumps(insights.to_dict(), indent=2))


# ------------------------------------------------------------------
# Rich rendering helpers
# ------------------------------------------------------------------

def _render_analysis(result: AnalysisResult, filename: str) -> None:
    """Render a full AnalysisResult with rich formatting."""
    meta = result.metadata
    score = result.risk_score
    style = _get_risk_style(score.risk_level)

    console.print()
    console.print(Panel(
        f"[bold]{filename}[/]\n"
        f"Type: {meta.detected_type or 'unknown'} ({meta.confidence:.0f}% confidence) | "
        f"Words: {meta.word_count} | "
        f"Quality: {meta.quality_score if meta.quality_score is not None else '-'}/100\n"
        f"Risk Score: [{style}]{score.overall}/100 {score.risk_level.value.upper()}[/]",
        title="⚖️ Contract Risk Analysis",
        border_style="blue",
    ))

    if result.detected_clauses:
        table = Table(title="Risky Clauses", show_lines=True)
        table.add_column("Severity", justify="center", width=10)
        table.add_column("Clause", style="cyan", width=24)
        table.add_column("Excerpt", style="white", max_width=60)
        table.add_column("Hits", justify="right", width=5)

        for clause in result.detected_clauses:
            excerpt = clause.matches[0].context.replace("\n", " ")
            table.add_row(
                Text(clause.severity.value.upper(), style=_get_risk_style(clause.severity)),
                clause.rule.name,
                excerpt[:160] + ("..." if len(excerpt) > 160 else ""),
                str(len(clause.matches)),
            )
        console.print(table)
        console.print()

    if result.missing_terms:
        console.print("[bold]Missing Sections[/]")
        for term in result.missing_terms:
            icon = _get_risk_icon(term.importance)
            console.print(f"  {icon} [{_get_risk_style(term.importance)}]"
                          f"{term.importance.value.upper()}[/]: {term.name}")
            console.print(f"      💡 {term.recommendation}")
        console.print()

    if result.obligations:
        table = Table(title="Obligations", show_lines=False)
        table.add_column("#", justify="right", width=4)
        table.add_column("Type", style="cyan", width=10)
        table.add_column("Description", style="white", max_width=60)
        table.add_column("Deadline", justify="center", width=12)

        for i, obligation in enumerate(result.obligations, 1):
            table.add_row(
                str(i),
                obligation.type.value,
                obligation.description[:120],
                obligation.deadline.isoformat() if obligation.deadline else "-",
            )
        console.print(table)
        console.print()

    insights = result.ai_insights
    if insights and not insights.is_empty:
        body = [insights.summary] if insights.summary else []
        for heading, items in (
            ("Key Findings", insights.key_findings),
            ("Recommendations", insights.recommendations),
            ("Warnings", insights.warnings),
        ):
            if items:
                body.append(f"\n[bold]{heading}[/]")
                body.extend(f"  • {item}" for item in items)
        console.print(Panel("\n".join(body), title="🤖 AI Insights", border_style="magenta"))
        console.print()


if __name__ == "__main__":
    main()
