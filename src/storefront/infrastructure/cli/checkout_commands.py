"""CLI command for placing an order from the local cart."""

from __future__ import annotations

import asyncio

import click

from storefront.application.checkout import CheckoutResult
from storefront.application.dto import ReceiptDTO
from storefront.application.show_cart import ShowCartHandler
from storefront.domain.exceptions import DomainException, ValidationError
from storefront.domain.model.address import ShippingAddress
from storefront.domain.model.order import Order
from storefront.infrastructure.bootstrap import (
    cart_normalizer,
    cart_repository,
    checkout_handler,
    payment_resolver,
    receipt_handler,
    shipping_handler,
)
from storefront.infrastructure.cli.receipt_commands import display_receipt


async def _resolve_address(address_id: str | None) -> ShippingAddress | None:
    handler = shipping_handler()
    if not address_id:
        return handler.selected()
    for address in await handler.list_addresses():
        if address.id == address_id:
            return address
    raise ValidationError(f"Shipping address '{address_id}' not found")


async def _checkout(
    address_id: str | None, allow_unsaved_payment: bool
) -> tuple[CheckoutResult, Order]:
    cart = await ShowCartHandler(cart_repository(), cart_normalizer()).load()
    address = await _resolve_address(address_id)
    method = await payment_resolver().resolve()

    result = await checkout_handler(allow_unsaved_payment).handle(
        cart, address, method
    )
    order = await receipt_handler().handle(raw=result.order)
    return result, order


@click.command("checkout")
@click.option("--address-id", default=None, help="Ship to this saved address instead of the selected one.")
@click.option(
    "--allow-unsaved-payment",
    is_flag=True,
    default=False,
    help="Submit with a payment method that has not been saved to the account.",
)
def checkout(address_id: str | None, allow_unsaved_payment: bool) -> None:
    """Place an order for everything in the cart."""
    try:
        result, order = asyncio.run(_checkout(address_id, allow_unsaved_payment))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{order.id} placed.")
    if result.warning:
        click.echo(f"Warning: {result.warning}", err=True)
    click.echo()
    display_receipt(ReceiptDTO.from_order(order))
