"""CLI commands for the stored login session.

Tokens are issued by the backend's login flow; these commands only store
or forget one.
"""

from __future__ import annotations

import click

from storefront.domain.repository.local_store import TOKEN_KEY, USER_KEY
from storefront.infrastructure.bootstrap import local_store


@click.command("use-token")
@click.argument("token")
def session_use_token(token: str) -> None:
    """Store a bearer token issued by the backend."""
    local_store().set(TOKEN_KEY, token.strip())
    click.echo("Session token stored.")


@click.command("logout")
def session_logout() -> None:
    """Forget the stored session."""
    store = local_store()
    store.remove(TOKEN_KEY)
    store.remove(USER_KEY)
    click.echo("Logged out.")
