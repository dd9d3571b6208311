#!/usr/bin/env python3
"""
MediScout CLI

Command-line interface for the synthetic community health cohort and the
simulated AI symptom checker.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()


def setup_paths():
    """Add the project root to sys.path for imports."""
    root = Path(__file__).parent
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))


setup_paths()

from mediscout import __version__
from mediscout.config import get_settings, build_store
from mediscout.db import CohortRepository
from mediscout.engines import CohortAssembler, RandomSource
from mediscout.log import setup_logging


def _cohort_repository(seed: Optional[int] = None, per_condition: Optional[int] = None) -> CohortRepository:
    """Cohort cache over the configured store."""
    settings = get_settings()
    return CohortRepository(
        build_store(settings),
        assembler=CohortAssembler(rng=RandomSource(seed)),
        per_condition_count=per_condition or settings.records_per_condition,
    )


def _risk_style(score: int) -> str:
    if score >= 7:
        return "red"
    if score >= 4:
        return "yellow"
    return "green"


@click.group()
@click.version_option(version=__version__, prog_name="mediscout")
def cli():
    """
    MediScout - Synthetic Community Health Data

    Generate a synthetic cohort of community health records, explore it,
    and try the simulated AI symptom checker.
    """
    setup_logging("mediscout", get_settings().log_level)


@cli.command()
@click.option("--per-condition", "-n", type=click.IntRange(min=1), default=None,
              help="Records per condition family (default from MEDISCOUT_RECORDS_PER_CONDITION)")
@click.option("--seed", type=int, help="Random seed for reproducibility")
def generate(per_condition: Optional[int], seed: Optional[int]):
    """
    Generate a fresh synthetic cohort and cache it in the store.

    Examples:

        mediscout generate

        mediscout generate --per-condition 5 --seed 42
    """
    from mediscout.analytics import summarize

    repo = _cohort_repository(seed=seed, per_condition=per_condition)
    with console.status("Generating cohort..."):
        cohort = repo.regenerate_cohort()

    summary = summarize(cohort)
    console.print()
    console.print(Panel(
        f"[bold green]✓ Cohort Generated[/bold green]\n\n"
        f"Records: {summary.total_patients}\n"
        f"High risk: {summary.high_risk_patients}\n"
        f"Most common: {summary.most_common_condition} "
        f"({summary.most_common_condition_count})",
        title="Cohort Summary",
        border_style="green",
    ))


@cli.command()
@click.option("--limit", "-l", type=click.IntRange(min=1), default=20, help="Maximum rows to show")
@click.option("--condition", "-c", type=str, help="Only show this condition label")
@click.option("--search", "-s", "term", type=str, help="Case-insensitive search term")
@click.option("--sort", "sort_key", type=str, help="camelCase field to sort by, e.g. simulatedRiskScore")
@click.option("--desc", is_flag=True, help="Sort descending")
def show(limit: int, condition: Optional[str], term: Optional[str], sort_key: Optional[str], desc: bool):
    """
    Show records from the cached cohort.

    Example:

        mediscout show --condition "Hypertension" --sort simulatedRiskScore --desc
    """
    from mediscout.analytics import search_records

    cohort = _cohort_repository().get_cohort()
    try:
        records = search_records(cohort, term=term, condition=condition, sort_key=sort_key, descending=desc)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    if not records:
        console.print("[yellow]No matching records[/yellow]")
        return

    table = Table(title=f"Cohort Records ({len(records)} matching)")
    table.add_column("ID", style="dim")
    table.add_column("Date")
    table.add_column("Age", justify="right")
    table.add_column("Gender")
    table.add_column("Location")
    table.add_column("Condition", style="cyan")
    table.add_column("Risk", justify="right")
    table.add_column("Triage")

    for record in records[:limit]:
        style = _risk_style(record.simulated_risk_score)
        table.add_row(
            record.id,
            record.date.isoformat(),
            str(record.age),
            record.gender.value,
            record.location,
            record.condition_assigned,
            f"[{style}]{record.simulated_risk_score}[/{style}]",
            record.simulated_ai_triage_category,
        )

    console.print(table)
    if len(records) > limit:
        console.print(f"[dim]... {len(records) - limit} more (use --limit)[/dim]")


@cli.command()
def stats():
    """
    Show dashboard statistics and the simulated impact metrics.
    """
    from mediscout.analytics import (
        summarize,
        condition_distribution,
        risk_distribution,
        age_distribution,
        location_distribution,
        impact_metrics,
    )

    cohort = _cohort_repository().get_cohort()
    summary = summarize(cohort)

    console.print()
    console.print(Panel(
        f"Total patients: [bold]{summary.total_patients}[/bold]\n"
        f"High-risk patients: [bold red]{summary.high_risk_patients}[/bold red]\n"
        f"Most common condition: {summary.most_common_condition} "
        f"({summary.most_common_condition_count} cases)",
        title="Overview",
        border_style="blue",
    ))

    table = Table(title="Top Conditions")
    table.add_column("Condition", style="cyan")
    table.add_column("Count", justify="right")
    for row in condition_distribution(cohort):
        table.add_row(row["condition"], str(row["count"]))
    console.print(table)

    table = Table(title="Risk Levels")
    table.add_column("Category")
    table.add_column("Count", justify="right")
    for row in risk_distribution(cohort):
        table.add_row(row["riskCategory"], str(row["count"]))
    console.print(table)

    table = Table(title="Age Groups")
    table.add_column("Age Group")
    table.add_column("Count", justify="right")
    for row in age_distribution(cohort):
        table.add_row(row["ageGroup"], str(row["count"]))
    console.print(table)

    table = Table(title="Locations")
    table.add_column("Location")
    table.add_column("Cases", justify="right")
    table.add_column("High Risk", justify="right", style="red")
    for row in location_distribution(cohort):
        table.add_row(row["location"], str(row["count"]), str(row["highRisk"]))
    console.print(table)

    impact = impact_metrics(cohort)
    console.print(Panel(
        f"High-risk cases: {impact.total_high_risk}\n"
        f"Identified by AI triage: {impact.ai_identified_high_risk} "
        f"({impact.identification_rate}%)\n"
        f"Time to identify: {impact.avg_time_to_identify_baseline} h baseline, "
        f"{impact.avg_time_to_identify_ai} h with AI\n"
        f"Time saved per case: [bold green]{impact.time_saved_per_case} h[/bold green]",
        title="Simulated Impact",
        border_style="green",
    ))


@cli.command()
@click.option("--format", "fmt", type=click.Choice(["csv", "json"]), default="csv",
              help="Format to export to")
@click.option("--output", "-o", type=click.Path(), help="Output file path")
def export(fmt: str, output: Optional[str]):
    """
    Export the cached cohort.

    Example:

        mediscout export --format csv -o ./cohort.csv
    """
    from mediscout.exporters import export_csv, export_json, DEFAULT_FILENAME

    cohort = _cohort_repository().get_cohort()

    if output:
        out_path = Path(output)
    else:
        out_path = Path(DEFAULT_FILENAME).with_suffix(f".{fmt}")

    if fmt == "csv":
        result = export_csv(cohort, out_path)
    else:
        result = export_json(cohort, out_path) if cohort else None

    if result is None:
        console.print("[yellow]No data to export[/yellow]")
        return

    console.print(f"[green]✓ Exported {len(cohort)} records to {out_path}[/green]")


@cli.command()
@click.argument("symptoms", nargs=-1)
@click.option("--image", type=str, help="File name of an attached image, e.g. rash.jpg")
@click.option("--no-delay", is_flag=True, help="Skip the simulated inference delay")
def predict(symptoms: tuple[str, ...], image: Optional[str], no_delay: bool):
    """
    Run the simulated AI symptom checker.

    Example:

        mediscout predict "High fever, headache, rash for 3 days" --image rash.jpg
    """
    from mediscout.auth import EMPTY_SYMPTOMS
    from mediscout.predictor import SymptomMatcher

    text = " ".join(symptoms).strip()
    if not text:
        console.print(f"[red]{EMPTY_SYMPTOMS}[/red]")
        sys.exit(1)

    delay = 0 if no_delay else get_settings().predict_delay
    matcher = SymptomMatcher(delay_seconds=delay)

    with console.status("Analyzing symptoms..."):
        prediction = asyncio.run(matcher.predict(text, has_image=bool(image), image_name=image))

    console.print()
    console.print(Panel(
        f"[bold]{prediction.prediction}[/bold]\n"
        f"Confidence: {prediction.confidence:.0%}\n\n"
        f"{prediction.advice}\n\n"
        f"[dim]{prediction.image_analysis}[/dim]",
        title="Simulated AI Insight",
        border_style="cyan",
    ))
    console.print("[dim]This is a simulation, not medical advice.[/dim]")


@cli.command()
def info():
    """
    Show information about MediScout.
    """
    import knowledge
    from mediscout.db.client import is_configured as supabase_configured

    settings = get_settings()

    console.print(Panel(
        "[bold]MediScout[/bold] - Synthetic Community Health Data\n\n"
        "A prototype for community health workers:\n\n"
        "• Patient self-reporting with a simulated AI symptom checker\n"
        "• A synthetic cohort built from published prevalence assumptions\n"
        "• Dashboard statistics and CSV export\n\n"
        "[dim]All records are synthetic. The AI is keyword matching,[/dim]\n"
        "[dim]not a diagnostic model.[/dim]",
        title="About",
        border_style="blue",
    ))

    console.print("\n[bold]Configuration:[/bold]")
    console.print(f"  Store: {settings.store_backend}"
                  + (f" ({settings.store_path})" if settings.store_backend == "file" else ""))
    console.print(f"  Supabase: {'configured' if supabase_configured() else 'not configured'}")
    console.print(f"  Records per condition: {settings.records_per_condition}")
    console.print(f"  Prediction delay: {settings.predict_delay}s")

    table = Table(title="Condition Families")
    table.add_column("Key", style="cyan")
    table.add_column("Family")
    table.add_column("Rate", justify="right")
    for family in CohortAssembler().families:
        assumptions = knowledge.family_assumptions(family.key)
        if "rate" in assumptions:
            rate = f"{assumptions['rate']:.1%}"
        else:
            rate = f"{assumptions['prevalence_per_100k']}/100k"
        table.add_row(family.key, family.display_name, rate)
    console.print()
    console.print(table)

    console.print("\n[bold]Condition vocabulary:[/bold]")
    for label in knowledge.known_diseases():
        console.print(f"  • {label}")

    console.print("\n[bold]Quick Start:[/bold]")
    console.print("  mediscout generate --seed 42")
    console.print("  mediscout stats")
    console.print("  mediscout export -o ./cohort.csv")
    console.print('  mediscout predict "fever and cough"')


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
