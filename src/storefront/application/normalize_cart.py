"""Application service: Cart Normalizer.

Turns whatever a screen hands over (route-passed ``{product, quantity}``
snapshots, ``{productId, ...}`` objects, raw product records, or the
persisted cart's entries) into canonical CartLines, then best-effort
enriches lines that are still showing placeholder details.

Enrichment never blocks checkout: every lookup failure is swallowed and
the line keeps whatever it had.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from decimal import Decimal
from typing import Any, Mapping

from storefront.domain.exceptions import DomainException
from storefront.domain.gateway.product_catalog import ProductCatalog
from storefront.domain.model import fields
from storefront.domain.model.cart import PLACEHOLDER_NAME, CartLine
from storefront.domain.model.value_objects import Money, Quantity
from storefront.domain.repository.session import Session

logger = logging.getLogger(__name__)


def _always_active() -> bool:
    return True


async def fetch_product_details(
    catalog: ProductCatalog,
    session: Session,
    product_id: str,
) -> Mapping[str, Any] | None:
    """Best-effort product lookup: authenticated endpoint first, then public.

    Returns None instead of raising; callers only use the result to improve
    what they display.
    """
    try:
        if session.is_authenticated:
            try:
                return await catalog.get_product(product_id)
            except DomainException as exc:
                logger.debug(
                    "Authenticated lookup for %s failed (%s); trying public endpoint",
                    product_id,
                    exc,
                )
        return await catalog.get_public_product(product_id)
    except DomainException as exc:
        logger.debug("Product detail lookup skipped for %s: %s", product_id, exc)
        return None


class CartNormalizer:

    def __init__(self, catalog: ProductCatalog, session: Session) -> None:
        self._catalog = catalog
        self._session = session

    # --- Normalization (synchronous, no I/O) ----------------------------------

    def normalize(self, source: Iterable[Any] | None) -> list[CartLine]:
        """Map a heterogeneous item list to CartLines, dropping empty entries."""
        lines: list[CartLine] = []
        for entry in source or []:
            line = self._to_line(entry)
            if line is not None:
                lines.append(line)
        return lines

    @staticmethod
    def _to_line(entry: Any) -> CartLine | None:
        if not entry:
            return None
        if isinstance(entry, CartLine):
            return entry
        if isinstance(entry, str):
            entry = {"_id": entry}
        if not isinstance(entry, Mapping):
            return None

        product = entry.get("product") or entry.get("productId") or entry
        if isinstance(product, Mapping):
            product_id = fields.id_of(product, fields.PRODUCT_ID)
            details: Mapping[str, Any] = product
        else:
            # A bare id: the item itself carries whatever details exist.
            product_id = str(product)
            details = entry
        if not product_id:
            return None

        quantity = fields.to_int(
            entry.get("quantity")
            or details.get("quantity")
            or entry.get("qty")
            or details.get("qty"),
            1,
        )
        price = fields.to_decimal(fields.first_truthy(details, fields.UNIT_PRICE)) or Decimal("0")
        stock = details.get("stock")
        image = fields.first_truthy(details, fields.IMAGE_REF)

        return CartLine(
            product_id=product_id,
            name=str(fields.first_truthy(details, fields.PRODUCT_NAME) or PLACEHOLDER_NAME),
            unit_price=Money.clamped(price),
            quantity=Quantity(max(quantity, 1)),
            stock_available=fields.to_int(stock, 0) if stock is not None else None,
            image_ref=str(image) if image else None,
        )

    # --- Enrichment (async, best-effort) --------------------------------------

    async def enrich(
        self,
        lines: list[CartLine],
        is_active: Callable[[], bool] = _always_active,
    ) -> list[CartLine]:
        """Fill in missing name/price/image/stock from the product catalog.

        Lookups run concurrently.  Results are only applied while
        ``is_active()`` still returns True; a caller that has gone away
        gets its input back untouched.
        """
        targets = [line.product_id for line in lines if line.needs_enrichment]
        if not targets:
            return list(lines)

        fetched = await asyncio.gather(
            *(fetch_product_details(self._catalog, self._session, pid) for pid in targets)
        )
        if not is_active():
            logger.debug("Cart enrichment finished after caller went away; discarding")
            return list(lines)

        details = {pid: product for pid, product in zip(targets, fetched) if product}
        return [
            self._merge(line, details[line.product_id]) if line.product_id in details else line
            for line in lines
        ]

    @staticmethod
    def _merge(line: CartLine, product: Mapping[str, Any]) -> CartLine:
        price = fields.to_decimal(fields.first_truthy(product, fields.UNIT_PRICE))
        image = fields.first_truthy(product, fields.IMAGE_REF[:3])
        stock = product.get("stock")
        return line.with_details(
            name=fields.first_truthy(product, ("name", "title")),
            unit_price=Money.clamped(price) if price is not None else None,
            image_ref=str(image) if image else None,
            stock_available=fields.to_int(stock, 0) if stock is not None else None,
        )
