"""CLI commands for order receipts."""

from __future__ import annotations

import asyncio

import click

from storefront.application.dto import ReceiptDTO
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import receipt_handler


def display_receipt(dto: ReceiptDTO) -> None:
    """Shared formatting for displaying a receipt."""
    click.echo(f"Order #{dto.id}  (status={dto.status})")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Payment:  {dto.payment}")
    click.echo(f"Ship to:  {dto.ship_to}")
    click.echo()
    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*52}")
    for item in dto.items:
        click.echo(
            f"  {item.name[:24]:<24} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}"
        )
    click.echo(f"  {'-'*52}")
    click.echo(f"  {'Subtotal':<30} {dto.subtotal:>22}")
    click.echo(f"  {'Shipping':<30} {dto.shipping_cost:>22}")
    click.echo(f"  {'Tax':<30} {dto.tax:>22}")
    click.echo(f"  {'Discount':<30} {'-' + dto.discount_total:>22}")
    if dto.adjustments not in ("0.00", "-0.00"):
        click.echo(f"  {'Adjustments':<30} {dto.adjustments:>22}")
    click.echo(f"  {'Total':<30} {dto.payable_total:>22}")


@click.command("show")
@click.option("--id", "order_id", required=True, help="Order ID to display.")
def receipt_show(order_id: str) -> None:
    """Re-fetch an order and show its receipt."""
    handler = receipt_handler()

    try:
        order = asyncio.run(handler.handle(order_id=order_id))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_receipt(ReceiptDTO.from_order(order))
