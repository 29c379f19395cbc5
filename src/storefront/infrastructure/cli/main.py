import logging

import click

from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from storefront.infrastructure.cli.checkout_commands import checkout
from storefront.infrastructure.cli.payment_commands import (
    payment_delete,
    payment_save,
    payment_show,
)
from storefront.infrastructure.cli.receipt_commands import receipt_show
from storefront.infrastructure.cli.session_commands import session_logout, session_use_token
from storefront.infrastructure.cli.shipping_commands import (
    shipping_list,
    shipping_save,
    shipping_select,
)
from storefront.infrastructure.cli.stock_commands import stock_pending, stock_reconcile


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Storefront — checkout client for the storefront backend"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def cart() -> None:
    """Manage the local cart."""


@cli.group()
def payment() -> None:
    """Manage the saved payment method."""


@cli.group()
def shipping() -> None:
    """Manage shipping addresses."""


@cli.group()
def receipt() -> None:
    """Show order receipts."""


@cli.group()
def stock() -> None:
    """Reconcile stock updates that failed after checkout."""


@cli.group()
def session() -> None:
    """Manage the stored login session."""


# Register subcommands
cli.add_command(checkout)
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
payment.add_command(payment_delete)
payment.add_command(payment_save)
payment.add_command(payment_show)
shipping.add_command(shipping_list)
shipping.add_command(shipping_save)
shipping.add_command(shipping_select)
receipt.add_command(receipt_show)
stock.add_command(stock_pending)
stock.add_command(stock_reconcile)
session.add_command(session_logout)
session.add_command(session_use_token)
