"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

Configuration comes from the environment:

``STOREFRONT_API_BASE``                backend origin (default http://localhost:5000)
``STOREFRONT_DATA_DIR``                local state directory (default <repo>/data)
``STOREFRONT_HTTP_TIMEOUT``            request timeout in seconds (default 10)
``STOREFRONT_RECONCILE_MAX_ATTEMPTS``  retries before a stock update is abandoned (default 5)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

from storefront.application.checkout import CheckoutHandler
from storefront.application.manage_shipping import ShippingAddressHandler
from storefront.application.normalize_cart import CartNormalizer
from storefront.application.reconcile_stock import (
    DEFAULT_MAX_ATTEMPTS,
    ReconcileStockHandler,
)
from storefront.application.resolve_payment_method import PaymentMethodResolver
from storefront.application.show_receipt import ShowReceiptHandler
from storefront.infrastructure.http.api_client import DEFAULT_TIMEOUT, ApiClient
from storefront.infrastructure.http.http_order_gateway import HttpOrderGateway
from storefront.infrastructure.http.http_payment_gateway import HttpPaymentMethodGateway
from storefront.infrastructure.http.http_product_catalog import HttpProductCatalog
from storefront.infrastructure.http.http_shipping_gateway import HttpShippingGateway
from storefront.infrastructure.http.http_stock_gateway import HttpStockGateway
from storefront.infrastructure.persistence.json_local_store import JsonLocalStore
from storefront.infrastructure.persistence.json_reconciliation_repository import (
    JsonReconciliationRepository,
)
from storefront.infrastructure.persistence.local_cart_repository import (
    LocalCartRepository,
)
from storefront.infrastructure.persistence.local_session import LocalSession

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "http://localhost:5000"

_N = TypeVar("_N", int, float)

# Resolve data directory relative to the project root.
# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


@dataclass(frozen=True)
class Settings:
    api_base: str
    data_dir: Path
    http_timeout: float
    reconcile_max_attempts: int

    @staticmethod
    def from_env() -> Settings:
        return Settings(
            api_base=os.environ.get("STOREFRONT_API_BASE") or DEFAULT_API_BASE,
            data_dir=Path(os.environ.get("STOREFRONT_DATA_DIR") or _DEFAULT_DATA_DIR),
            http_timeout=_env_number("STOREFRONT_HTTP_TIMEOUT", DEFAULT_TIMEOUT, float),
            reconcile_max_attempts=_env_number(
                "STOREFRONT_RECONCILE_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS, int
            ),
        )


def _env_number(name: str, default: _N, cast: Callable[[str], _N]) -> _N:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r; using %s", name, raw, default)
        return default
    return value


def settings() -> Settings:
    return Settings.from_env()


# --- Local state --------------------------------------------------------------


def local_store() -> JsonLocalStore:
    return JsonLocalStore(settings().data_dir / "local_store.json")


def session() -> LocalSession:
    return LocalSession(local_store())


def cart_repository() -> LocalCartRepository:
    return LocalCartRepository(local_store())


def reconciliation_repository() -> JsonReconciliationRepository:
    return JsonReconciliationRepository(settings().data_dir / "reconciliation.json")


# --- Backend ------------------------------------------------------------------


def api_client() -> ApiClient:
    config = settings()
    return ApiClient(config.api_base, session(), timeout=config.http_timeout)


def cart_normalizer() -> CartNormalizer:
    client = api_client()
    return CartNormalizer(HttpProductCatalog(client), client.session)


def payment_resolver() -> PaymentMethodResolver:
    client = api_client()
    return PaymentMethodResolver(HttpPaymentMethodGateway(client), local_store(), client.session)


def shipping_handler() -> ShippingAddressHandler:
    client = api_client()
    return ShippingAddressHandler(HttpShippingGateway(client), local_store(), client.session)


def checkout_handler(allow_unsaved_payment: bool = False) -> CheckoutHandler:
    client = api_client()
    return CheckoutHandler(
        order_gateway=HttpOrderGateway(client),
        stock_gateway=HttpStockGateway(client),
        session=client.session,
        local_store=local_store(),
        cart_repo=cart_repository(),
        reconciliation_repo=reconciliation_repository(),
        allow_unsaved_payment=allow_unsaved_payment,
    )


def receipt_handler() -> ShowReceiptHandler:
    client = api_client()
    return ShowReceiptHandler(
        order_gateway=HttpOrderGateway(client),
        payment_gateway=HttpPaymentMethodGateway(client),
        catalog=HttpProductCatalog(client),
        session=client.session,
    )


def reconcile_handler() -> ReconcileStockHandler:
    return ReconcileStockHandler(
        HttpStockGateway(api_client()),
        reconciliation_repository(),
        max_attempts=settings().reconcile_max_attempts,
    )
