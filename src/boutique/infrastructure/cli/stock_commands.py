"""CLI commands for stock adjustments."""

from __future__ import annotations

import click


@click.command("pending")
@click.pass_obj
def stock_pending(services) -> None:
    """Show stock adjustments that have not been applied."""
    adjustments = services.show_unapplied_adjustments().handle()

    if not adjustments:
        click.echo("No unapplied stock adjustments.")
        return

    click.echo(
        f"{'ID':<5} {'Order':>6} {'Product':<10} {'Variant':<16} {'Delta':>6} "
        f"{'Reason':<14} {'Status':<8} {'Tries':>5}  Last error"
    )
    click.echo("-" * 100)
    for adj in adjustments:
        click.echo(
            f"{adj.id:<5} {adj.order_id:>6} {adj.product_id:<10} {adj.variant:<16} "
            f"{adj.delta:>+6} {adj.reason:<14} {adj.status:<8} {adj.attempts:>5}  "
            f"{adj.last_error or ''}"
        )


@click.command("reconcile")
@click.pass_obj
def stock_reconcile(services) -> None:
    """Retry stock adjustments that are pending or failed."""
    report = services.reconcile_stock().handle()
    click.echo(
        f"Applied {report.applied}, failed {report.failed}, "
        f"skipped {report.skipped} (too many attempts)."
    )
