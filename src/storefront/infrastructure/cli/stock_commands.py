"""CLI commands for the stock reconciliation queue."""

from __future__ import annotations

import asyncio

import click

from storefront.application.reconcile_stock import ListPendingStockHandler
from storefront.infrastructure.bootstrap import reconcile_handler, reconciliation_repository


@click.command("reconcile")
def stock_reconcile() -> None:
    """Retry queued stock updates with their original idempotency keys."""
    report = asyncio.run(reconcile_handler().handle())

    if report.retried == 0:
        click.echo("Nothing to reconcile.")
        return
    click.echo(
        f"Retried {report.retried}: {report.succeeded} succeeded, "
        f"{report.failed} still failing, {report.abandoned} abandoned."
    )


@click.command("pending")
def stock_pending() -> None:
    """List stock updates waiting for reconciliation."""
    entries = ListPendingStockHandler(reconciliation_repository()).handle()

    if not entries:
        click.echo("No pending stock updates.")
        return

    click.echo(f"  {'Key':<30} {'Qty':>5} {'Tries':>6}  Status")
    click.echo(f"  {'-'*60}")
    for entry in entries:
        status = "ABANDONED" if entry.abandoned else "pending"
        click.echo(f"  {entry.key:<30} {entry.quantity:>5} {entry.attempts:>6}  {status}")
        if entry.last_error:
            click.echo(f"      last error: {entry.last_error}")
