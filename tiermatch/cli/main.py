"""CLI interface for tiermatch using Typer."""

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn
from rich.table import Table

from ..core.cache.result_cache import CACHE_KEY_PREFIX, ResultCache, job_cache_key
from ..core.config.loader import load_config
from ..core.models.candidate import CandidateProfile
from ..core.models.job import Job
from ..core.models.results import ScanProgress, TieredResultSet
from ..core.orchestrator.scan import build_scan_orchestrator
from ..core.selection.import_selector import materialize, parse_tiers
from ..core.storage.candidate_pool import (
    get_pool_stats,
    load_candidate_pool,
    load_demo_candidates,
)
from ..core.storage.kv_store import (
    FileKeyValueStore,
    is_demo_database_loaded,
    mark_demo_database_loaded,
    reset_demo_database,
)
from ..observability.logger import get_logger, setup_logging

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="tiermatch",
    help="Screen a candidate pool against a job with a budgeted AI fit analysis",
    add_completion=False,
)

TIER_STYLES = {
    "excellent": "bold green",
    "good": "green",
    "moderate": "yellow",
    "low": "dark_orange",
    "poor": "red",
}

JobOption = Annotated[
    Path,
    typer.Option(
        "--job",
        "-j",
        help="Job definition (YAML or JSON with id, title, description, required_skills)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
]
PoolOption = Annotated[
    Path | None,
    typer.Option("--pool", "-p", help="Candidate pool JSON (defaults to the demo database)"),
]
BudgetOption = Annotated[
    int | None,
    typer.Option("--budget", "-b", help="Max candidates to analyze with AI"),
]


@app.callback()
def main() -> None:
    """Configure logging from config before any command runs."""
    log_cfg = load_config().get("logging", {})
    setup_logging(
        log_level=log_cfg.get("level", "INFO"),
        log_format=log_cfg.get("format", "json"),
        log_file=log_cfg.get("file"),
    )


def _get_store(config: dict) -> FileKeyValueStore:
    """Get file-based key-value store from config."""
    return FileKeyValueStore(config.get("storage", {}).get("kv_dir", "data/kv"))


def _load_job(path: Path) -> Job:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        job = Job(**data)
    except (OSError, yaml.YAMLError, TypeError, ValidationError) as e:
        console.print(f"[red]! Error reading job definition:[/red] {e}")
        raise typer.Exit(code=1)

    if not data.get("id"):
        # Stable id so imported match scores land under the same key every run
        fingerprint = job_cache_key(job).removeprefix(CACHE_KEY_PREFIX)
        job = job.model_copy(update={"id": f"job-{fingerprint[:12]}"})
    return job


def _load_pool(path: Path | None, config: dict) -> list[CandidateProfile]:
    pool_path = path or config.get("demo", {}).get("pool_path")
    try:
        return load_candidate_pool(pool_path)
    except (OSError, json.JSONDecodeError, TypeError, ValidationError) as e:
        console.print(f"[red]! Error reading candidate pool:[/red] {e}")
        raise typer.Exit(code=1)


def _resolve_budget(budget: int | None, config: dict) -> int:
    scan_cfg = config.get("scan", {})
    value = budget if budget is not None else scan_cfg.get("default_budget", 10)
    max_budget = scan_cfg.get("max_budget", 20)
    if value < 0 or value > max_budget:
        console.print(f"[red]! Error:[/red] --budget must be between 0 and {max_budget}")
        raise typer.Exit(code=1)
    return value


def _run_scan(job: Job, pool: list[CandidateProfile], budget: int, config: dict) -> TieredResultSet:
    """Run a scan with a live progress bar."""
    orchestrator = build_scan_orchestrator(config, _get_store(config))

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Screening", total=len(pool))

        def on_progress(step: ScanProgress) -> None:
            mode = "AI" if step.is_ai_analysis else "quick"
            label = f"[{mode}] {step.candidate_name}"
            if step.current_score is not None:
                label += f" ({step.current_score:g})"
            progress.update(task, completed=step.current, description=label)

        return asyncio.run(orchestrator.scan(job, pool, budget=budget, on_progress=on_progress))


def _print_results(results: TieredResultSet) -> None:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Tier", width=10)
    table.add_column("Name")
    table.add_column("Score", justify="right")
    table.add_column("Method", width=9)
    table.add_column("Rationale")

    for tier_name, count in results.counts().items():
        style = TIER_STYLES[tier_name]
        if not count:
            table.add_row(f"[{style}]{tier_name}[/{style}]", "[dim]-[/dim]", "", "", "")
            continue
        for match in results.tier(tier_name):
            rationale = match.match_rationale
            rationale_display = rationale[:60] + "..." if len(rationale) > 60 else rationale
            table.add_row(
                f"[{style}]{tier_name}[/{style}]",
                match.candidate.name,
                f"{match.match_score:g}",
                str(match.method),
                rationale_display,
            )

    console.print(table)


@app.command()
def scan(
    job_file: JobOption,
    pool_file: PoolOption = None,
    budget: BudgetOption = None,
    output_file: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Path to save tiered results JSON"),
    ] = None,
):
    """Screen the candidate pool for a job and show candidates per tier."""
    config = load_config()
    job = _load_job(job_file)
    pool = _load_pool(pool_file, config)
    budget = _resolve_budget(budget, config)

    console.print(f"\n[bold blue]Scanning {len(pool)} candidates for:[/bold blue] {job.title}")
    console.print(f"[dim]AI analysis budget:[/dim] {budget}")

    results = _run_scan(job, pool, budget, config)
    _print_results(results)

    if output_file:
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(results.model_dump_json(indent=2), encoding="utf-8")
            console.print(f"\n[green]Results saved to:[/green] {output_file}")
        except OSError as e:
            console.print(f"\n[red]! Error saving results:[/red] {e}")
            raise typer.Exit(code=1)


@app.command("import")
def import_candidates(
    job_file: JobOption,
    tiers: Annotated[
        str,
        typer.Option("--tiers", "-t", help="Comma-separated tiers, e.g. excellent,good"),
    ],
    output_file: Annotated[
        Path,
        typer.Option("--output", "-o", help="Path to save imported candidates JSON"),
    ],
    pool_file: PoolOption = None,
    budget: BudgetOption = None,
):
    """Scan (cache-aware) and export candidates from the chosen tiers."""
    config = load_config()
    job = _load_job(job_file)

    try:
        tier_list = parse_tiers(tiers)
    except ValueError as e:
        console.print(f"[red]! Error:[/red] {e}")
        raise typer.Exit(code=1)
    if not tier_list:
        console.print("[red]! Error:[/red] --tiers must name at least one tier")
        raise typer.Exit(code=1)

    pool = _load_pool(pool_file, config)
    results = _run_scan(job, pool, _resolve_budget(budget, config), config)
    imported = materialize(results, job, tier_list)

    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(
            json.dumps([c.model_dump(mode="json") for c in imported], indent=2),
            encoding="utf-8",
        )
    except OSError as e:
        console.print(f"[red]! Error saving candidates:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(
        f"[green]> Imported {len(imported)} candidates "
        f"({', '.join(t.value for t in tier_list)}) to[/green] {output_file}"
    )


@app.command()
def stats(pool_file: PoolOption = None):
    """Show candidate pool statistics."""
    config = load_config()
    pool_stats = get_pool_stats(_load_pool(pool_file, config))

    table = Table(title="Candidate Pool", show_header=False)
    table.add_column("Metric", style="dim")
    table.add_column("Value")
    table.add_row("Candidates", str(pool_stats.total_candidates))
    table.add_row("Unique skills", str(pool_stats.unique_skills_count))
    table.add_row("Average experience", f"{pool_stats.average_experience} years")
    table.add_row("Locations", str(pool_stats.locations_count))
    table.add_row("Top skills", ", ".join(pool_stats.top_skills))
    console.print(table)


@app.command("load-demo")
def load_demo(pool_file: PoolOption = None):
    """Load the demo candidate database and mark it as loaded."""
    config = load_config()
    store = _get_store(config)
    demo_cfg = config.get("demo", {})

    if is_demo_database_loaded(store):
        console.print("[dim]Demo database was loaded before; reloading.[/dim]")

    pool = _load_pool(pool_file, config)

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Loading", total=len(pool))
        loaded = asyncio.run(
            load_demo_candidates(
                pool,
                on_progress=lambda step: progress.update(
                    task, completed=step.current, description=step.candidate_name
                ),
                min_delay=demo_cfg.get("min_delay_ms", 50) / 1000,
                random_delay=demo_cfg.get("random_delay_ms", 100) / 1000,
            )
        )

    mark_demo_database_loaded(store)
    console.print(f"[green]> Loaded {len(loaded)} demo candidates[/green]")


@app.command("reset-demo")
def reset_demo():
    """Forget that the demo database was loaded."""
    store = _get_store(load_config())
    reset_demo_database(store)
    console.print("[green]> Demo database flag reset[/green]")


@app.command("clear-cache")
def clear_cache(job_file: JobOption):
    """Drop the cached scan result for a job."""
    config = load_config()
    job = _load_job(job_file)
    ResultCache(_get_store(config)).invalidate(job_cache_key(job))
    console.print(f"[green]> Cleared cached results for[/green] {job.title}")


if __name__ == "__main__":
    app()
