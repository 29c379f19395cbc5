"""CLI commands for the saved payment method."""

from __future__ import annotations

import asyncio

import click

from storefront.domain.exceptions import DomainException
from storefront.domain.model.payment import CardInput, PaymentMethod
from storefront.infrastructure.bootstrap import payment_resolver


def _describe(method: PaymentMethod | None) -> str:
    if method is None:
        return "No payment method on file."
    expiry = ""
    if method.exp_month and method.exp_year:
        expiry = f"  exp {method.exp_month:02d}/{method.exp_year}"
    source = f"id={method.id}" if method.id else "local only"
    return f"{method.display_name}{expiry}  ({source})"


@click.command("show")
def payment_show() -> None:
    """Show the current payment method."""
    resolver = payment_resolver()

    try:
        method = asyncio.run(resolver.resolve())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(_describe(method))


@click.command("save")
@click.option("--number", required=True, help="16-digit card number.")
@click.option("--cvv", required=True, help="3-digit security code.")
@click.option("--exp-month", required=True, type=int, help="Expiry month (1-12).")
@click.option("--exp-year", required=True, type=int, help="Expiry year.")
@click.option("--id", "method_id", default=None, help="Existing method ID to update.")
def payment_save(
    number: str, cvv: str, exp_month: int, exp_year: int, method_id: str | None
) -> None:
    """Save (create or update) the account's payment method."""
    card = CardInput(number=number, cvv=cvv, exp_month=exp_month, exp_year=exp_year)
    resolver = payment_resolver()

    async def _save() -> PaymentMethod:
        await resolver.resolve()
        return await resolver.save(card, method_id=method_id)

    try:
        method = asyncio.run(_save())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment method saved: {_describe(method)}")


@click.command("delete")
@click.option("--id", "method_id", required=True, help="Payment method ID to remove.")
def payment_delete(method_id: str) -> None:
    """Remove a saved payment method."""
    resolver = payment_resolver()

    try:
        method = asyncio.run(resolver.delete(method_id))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment method {method_id} removed.")
    click.echo(f"Current: {_describe(method)}")
