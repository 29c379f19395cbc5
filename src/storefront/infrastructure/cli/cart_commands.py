"""CLI commands for the local cart."""

from __future__ import annotations

import asyncio

import click

from storefront.application.add_to_cart import AddToCartHandler
from storefront.application.dto import CartDTO
from storefront.application.show_cart import ShowCartHandler
from storefront.application.update_cart import (
    ClearCartHandler,
    RemoveFromCartHandler,
    UpdateCartHandler,
)
from storefront.domain.exceptions import DomainException
from storefront.infrastructure.bootstrap import cart_normalizer, cart_repository


def display_cart(dto: CartDTO) -> None:
    """Shared formatting for displaying the cart."""
    if not dto.lines:
        click.echo("Your cart is empty.")
        return
    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*52}")
    for line in dto.lines:
        click.echo(
            f"  {line.name[:24]:<24} {line.quantity:>5} {line.unit_price:>10} {line.line_total:>10}"
        )
    click.echo(f"  {'-'*52}")
    click.echo(f"  {'Subtotal (' + str(dto.count) + ' items)':<30} {dto.subtotal:>22}")


@click.command("show")
@click.option("--no-enrich", is_flag=True, default=False, help="Skip product detail lookups.")
def cart_show(no_enrich: bool) -> None:
    """Show the cart, filling in missing product details."""
    handler = ShowCartHandler(cart_repo=cart_repository(), normalizer=cart_normalizer())

    try:
        dto = asyncio.run(handler.handle(enrich=not no_enrich))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_cart(dto)


@click.command("add")
@click.option("--id", "product_id", required=True, help="Product ID to add.")
@click.option("--qty", default=1, show_default=True, type=click.IntRange(min=1), help="Quantity.")
@click.option("--name", default=None, help="Product name, if already known.")
@click.option("--price", default=None, help="Unit price, if already known.")
def cart_add(product_id: str, qty: int, name: str | None, price: str | None) -> None:
    """Add a product to the cart."""
    item: dict = {"_id": product_id, "quantity": qty}
    if name:
        item["name"] = name
    if price:
        item["price"] = price

    handler = AddToCartHandler(cart_repo=cart_repository(), normalizer=cart_normalizer())

    try:
        dto = asyncio.run(handler.handle(item))
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Added {qty} x {product_id} to the cart.")
    display_cart(dto)


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID to change.")
@click.option("--delta", required=True, type=int, help="Quantity change, e.g. 1 or -1.")
def cart_update(product_id: str, delta: int) -> None:
    """Change a line's quantity (a line reaching zero is removed)."""
    handler = UpdateCartHandler(cart_repo=cart_repository())

    try:
        dto = handler.handle(product_id, delta)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_cart(dto)


@click.command("remove")
@click.option("--id", "product_id", required=True, help="Product ID to remove.")
def cart_remove(product_id: str) -> None:
    """Remove a product from the cart."""
    dto = RemoveFromCartHandler(cart_repo=cart_repository()).handle(product_id)
    display_cart(dto)


@click.command("clear")
def cart_clear() -> None:
    """Empty the cart."""
    ClearCartHandler(cart_repo=cart_repository()).handle()
    click.echo("Cart cleared.")
