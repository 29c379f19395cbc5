"""Application service: Show Receipt use case (query).

Normalizes an order handed over by checkout, or re-fetches it read-only,
then improves what the receipt can display:

- a payment method that is only a bare id is swapped for the matching
  saved method so brand and last4 can be shown;
- items that arrived without a name or image get product details merged.

Both enrichments are best-effort.  Prices and totals are never touched
after normalization; they are what the server reported.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any, Mapping

from storefront.application.normalize_cart import fetch_product_details
from storefront.domain.exceptions import DomainException, ValidationError
from storefront.domain.gateway.order_gateway import OrderGateway
from storefront.domain.gateway.payment_gateway import PaymentMethodGateway
from storefront.domain.gateway.product_catalog import ProductCatalog
from storefront.domain.model import fields
from storefront.domain.model.order import Order, OrderItem
from storefront.domain.repository.session import Session
from storefront.domain.service.receipt_normalizer import ReceiptNormalizer

logger = logging.getLogger(__name__)


class ShowReceiptHandler:

    def __init__(
        self,
        order_gateway: OrderGateway,
        payment_gateway: PaymentMethodGateway,
        catalog: ProductCatalog,
        session: Session,
        normalizer: ReceiptNormalizer | None = None,
    ) -> None:
        self._order_gateway = order_gateway
        self._payment_gateway = payment_gateway
        self._catalog = catalog
        self._session = session
        self._normalizer = normalizer or ReceiptNormalizer()

    async def handle(
        self,
        order_id: str | None = None,
        raw: Order | Mapping[str, Any] | None = None,
    ) -> Order:
        """Return the canonical order for the receipt.

        Raises NotFound if the order cannot be fetched.
        """
        if raw is not None:
            order = self._normalizer.normalize(raw)
        elif order_id:
            order = self._normalizer.normalize(await self._order_gateway.fetch(order_id))
        else:
            raise ValidationError("An order id or order payload is required")

        order = await self._enrich_payment(order)
        return await self._enrich_items(order)

    async def _enrich_payment(self, order: Order) -> Order:
        method_id = order.payment_method_id
        if not method_id or not self._session.is_authenticated:
            return order
        try:
            methods = await self._payment_gateway.list_methods()
        except DomainException as exc:
            logger.debug("Payment method lookup for receipt skipped: %s", exc)
            return order
        for method in methods:
            if method.id == method_id:
                return order.with_payment_method(method)
        return order

    async def _enrich_items(self, order: Order) -> Order:
        targets = [
            item.product_id
            for item in order.items
            if item.product_id and (item.name in (item.product_id, "Item") or not item.image_ref)
        ]
        if not targets:
            return order

        fetched = await asyncio.gather(
            *(fetch_product_details(self._catalog, self._session, pid) for pid in targets)
        )
        details = {pid: product for pid, product in zip(targets, fetched) if product}
        if not details:
            return order
        return order.with_items(
            [
                self._merge(item, details[item.product_id])
                if item.product_id in details
                else item
                for item in order.items
            ]
        )

    @staticmethod
    def _merge(item: OrderItem, product: Mapping[str, Any]) -> OrderItem:
        name = fields.first_truthy(product, ("name", "title"))
        image = fields.first_truthy(product, fields.IMAGE_REF[:3])
        return replace(
            item,
            name=str(name) if name and item.name in (item.product_id, "Item") else item.name,
            image_ref=item.image_ref or (str(image) if image else None),
        )
