"""
Ruptura CLI
===========

Offline demonstration of the damage-assessment ledger.  Every command runs
against an in-process AssessmentLedger seeded with the Istanbul demo
network, so no server or chain connection is required.
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from ruptura.adapters.source import DEMO_SCENARIOS, DEMO_SENSOR_IDS
from ruptura.core.classifier import SEVERITY_THRESHOLDS
from ruptura.core.dispatcher import RESPONSE_MATRIX
from ruptura.core.engine import RULE_TABLE_VERSION
from ruptura.core.urgency import CATEGORY_MULTIPLIERS
from ruptura.store.ledger import AssessmentLedger

app = typer.Typer(
    name="ruptura",
    help="Ruptura: earthquake damage assessment and response dispatch",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()


# ── Steps ────────────────────────────────────────────────────────────────────

async def _register(ledger: AssessmentLedger) -> None:
    console.print("[bold]Registering Omron D7S sensors...[/bold]")
    for sensor_id in DEMO_SENSOR_IDS:
        await ledger.register_sensor(sensor_id)
        console.print(f"  [green]✓[/green] {sensor_id}")


async def _scenarios(ledger: AssessmentLedger) -> None:
    table = Table(title="Earthquake scenario results")
    table.add_column("Scenario")
    table.add_column("Input")
    table.add_column("Damage", justify="right")
    table.add_column("Urgency", justify="right")
    table.add_column("Response teams")
    table.add_column("Crisis system")

    for label, submission in DEMO_SCENARIOS:
        assessment = await ledger.submit(submission)
        collapse = ", COLLAPSE" if submission.collapse_flag else ""
        table.add_row(
            label,
            f"{submission.displacement_mm:g}mm, JMA{submission.seismic_intensity}{collapse}",
            f"{assessment.severity_level}/5",
            f"{assessment.urgency_score}/100",
            ", ".join(team.value for team in assessment.response_teams),
            "notified" if assessment.notify_external else "-",
        )
    console.print(table)


async def _stats(ledger: AssessmentLedger) -> None:
    stats = await ledger.get_stats()
    console.print("[bold]System statistics[/bold]")
    console.print(f"  Registered sensors:     {stats.total_sensors}")
    console.print(f"  Events processed:       {stats.total_events_processed}")
    console.print(f"  Emergency events:       {stats.total_emergency_events}")
    console.print(f"  Crisis notifications:   {stats.total_notifications_sent}")

    for record in await ledger.list_sensors():
        state = "[green]active[/green]" if record["active"] else "[red]inactive[/red]"
        console.print(f"  {record['sensor_id']}: {state} (last reading: {record['last_reading_at']})")


def _algorithm() -> None:
    console.print(f"[bold]Damage assessment rules (table v{RULE_TABLE_VERSION})[/bold]")
    console.print("  Level 5: collapse flag set")
    for severity, min_intensity, displacement in SEVERITY_THRESHOLDS:
        console.print(f"  Level {severity}: JMA >= {min_intensity} or displacement > {displacement:g}mm")
    console.print("  Level 1: all other cases")

    console.print("\n[bold]Building multipliers[/bold]")
    for category, multiplier in CATEGORY_MULTIPLIERS.items():
        console.print(f"  {category.value:<14} {multiplier}x")

    console.print("\n[bold]Response matrix[/bold]")
    for level in sorted(RESPONSE_MATRIX, reverse=True):
        console.print(f"  Level {level}: {', '.join(t.value for t in RESPONSE_MATRIX[level])}")


def _run(*steps) -> None:
    async def _main() -> None:
        ledger = AssessmentLedger()
        for step in steps:
            await step(ledger)

    asyncio.run(_main())


# ── Commands ─────────────────────────────────────────────────────────────────

@app.command()
def register():
    """Register the demo sensor network"""
    _run(_register)


@app.command()
def scenarios():
    """Register sensors and process the five demo scenarios"""
    _run(_register, _scenarios)


@app.command()
def stats():
    """Process the demo scenarios and show ledger statistics"""
    _run(_register, _scenarios, _stats)


@app.command()
def algorithm():
    """Show the classification, urgency and dispatch tables"""
    _algorithm()


@app.command()
def full():
    """Run the complete offline demonstration"""
    _run(_register, _scenarios, _stats)
    console.print()
    _algorithm()


def main() -> None:
    app()


if __name__ == "__main__":
    main()
