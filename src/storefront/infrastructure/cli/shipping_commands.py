"""CLI commands for shipping addresses."""

from __future__ import annotations

import asyncio

import click

from storefront.domain.exceptions import DomainException, ValidationError
from storefront.domain.model.address import ShippingAddress
from storefront.infrastructure.bootstrap import shipping_handler


def _format(address: ShippingAddress) -> str:
    parts = [
        address.full_name,
        address.line1,
        address.line2,
        address.district,
        address.province,
        address.postal_code,
    ]
    return ", ".join(part for part in parts if part)


@click.command("list")
def shipping_list() -> None:
    """List saved shipping addresses."""
    handler = shipping_handler()
    addresses = asyncio.run(handler.list_addresses())
    selected = handler.selected()

    if not addresses:
        click.echo("No saved addresses.")
    for address in addresses:
        marker = "*" if selected is not None and selected.id == address.id else " "
        click.echo(f" {marker} [{address.id or '-'}] {_format(address)}")


@click.command("save")
@click.option("--name", "full_name", required=True, help="Recipient full name.")
@click.option("--line1", required=True, help="Street address.")
@click.option("--line2", default="", help="Apartment, suite, etc.")
@click.option("--district", required=True, help="District / city.")
@click.option("--province", default="", help="Province / state.")
@click.option("--postal-code", default="", help="Postal code.")
@click.option("--id", "address_id", default=None, help="Existing address ID to update.")
def shipping_save(
    full_name: str,
    line1: str,
    line2: str,
    district: str,
    province: str,
    postal_code: str,
    address_id: str | None,
) -> None:
    """Save a shipping address and select it for checkout."""
    address = ShippingAddress(
        id=address_id,
        full_name=full_name,
        line1=line1,
        line2=line2,
        district=district,
        province=province,
        postal_code=postal_code,
    )

    try:
        asyncio.run(shipping_handler().save(address))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Shipping address saved: {_format(address)}")


@click.command("select")
@click.option("--id", "address_id", required=True, help="Saved address ID to ship to.")
def shipping_select(address_id: str) -> None:
    """Select a saved address for the next checkout."""
    handler = shipping_handler()

    try:
        addresses = asyncio.run(handler.list_addresses())
        match = next((a for a in addresses if a.id == address_id), None)
        if match is None:
            raise ValidationError(f"Shipping address '{address_id}' not found")
    except DomainException as exc:
        raise click.ClickException(str(exc))

    handler.select(match)
    click.echo(f"Shipping to: {_format(match)}")
