"""Application service: Checkout use case.

The backend exposes order creation and stock decrement as two separate,
non-transactional endpoints, so checkout runs as a saga without a
compensation step:

  IDLE -> SUBMITTING -> ORDER_CREATED -> STOCK_RECONCILING -> DONE
  IDLE -> SUBMITTING -> SUBMIT_FAILED

Order submission is the commit point.  If it fails nothing else happens
and the cart is untouched, so the caller may simply retry.  The failed
request is remembered under ``@pending_checkout`` so that an identical
retry, even from a later process, reuses its idempotency token.  Once the order
exists it is authoritative: stock decrements are issued concurrently with a
settle-all join, and any that fail are queued for the reconciliation sweep
and reported as a PartialFulfillment warning.  They are never retried
inline, which would risk decrementing stock twice.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from storefront.domain.exceptions import (
    DomainException,
    EmptyCart,
    Unauthenticated,
    ValidationError,
)
from storefront.domain.gateway.order_gateway import OrderGateway
from storefront.domain.gateway.stock_gateway import StockGateway
from storefront.domain.model.address import ShippingAddress
from storefront.domain.model.cart import Cart, CartLine
from storefront.domain.model.order import Order, OrderRequest
from storefront.domain.model.payment import PaymentMethod
from storefront.domain.model.stock import (
    PartialFulfillment,
    PendingStockTransaction,
    StockTransaction,
)
from storefront.domain.repository.cart_repository import CartRepository
from storefront.domain.repository.local_store import (
    PAYMENT_METHOD_KEY,
    PENDING_CHECKOUT_KEY,
    SAVED_PAYMENT_KEY,
    SHIPPING_DESTINATION_KEY,
    LocalStore,
)
from storefront.domain.repository.reconciliation_repository import (
    ReconciliationRepository,
)
from storefront.domain.repository.session import Session
from storefront.domain.service.receipt_normalizer import ReceiptNormalizer

logger = logging.getLogger(__name__)


class CheckoutState(Enum):
    IDLE = "IDLE"
    SUBMITTING = "SUBMITTING"
    SUBMIT_FAILED = "SUBMIT_FAILED"
    ORDER_CREATED = "ORDER_CREATED"
    STOCK_RECONCILING = "STOCK_RECONCILING"
    DONE = "DONE"


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    partial: PartialFulfillment | None = None

    @property
    def succeeded(self) -> bool:
        """True when every stock update went through as well."""
        return self.partial is None

    @property
    def warning(self) -> str | None:
        return self.partial.message if self.partial else None


def _new_client_token() -> str:
    return uuid.uuid4().hex


class CheckoutHandler:

    def __init__(
        self,
        order_gateway: OrderGateway,
        stock_gateway: StockGateway,
        session: Session,
        local_store: LocalStore,
        cart_repo: CartRepository,
        reconciliation_repo: ReconciliationRepository,
        normalizer: ReceiptNormalizer | None = None,
        allow_unsaved_payment: bool = False,
        token_factory: Callable[[], str] = _new_client_token,
    ) -> None:
        self._order_gateway = order_gateway
        self._stock_gateway = stock_gateway
        self._session = session
        self._local_store = local_store
        self._cart_repo = cart_repo
        self._reconciliation_repo = reconciliation_repo
        self._normalizer = normalizer or ReceiptNormalizer()
        self._allow_unsaved_payment = allow_unsaved_payment
        self._token_factory = token_factory
        self.state = CheckoutState.IDLE

    async def handle(
        self,
        cart: Cart,
        address: ShippingAddress | None,
        payment_method: PaymentMethod | None,
    ) -> CheckoutResult:
        """Place an order for *cart* and decrement stock for each line.

        Raises Unauthenticated / EmptyCart / ValidationError before any
        network call, and NetworkError if the order itself could not be
        created.  Stock failures never raise.
        """
        if self.state == CheckoutState.SUBMITTING:
            raise ValidationError("A checkout is already in progress")
        if not self._session.is_authenticated:
            raise Unauthenticated("Please log in before checking out")
        if cart.is_empty:
            raise EmptyCart("There are no items to check out")
        if address is None:
            raise ValidationError("Select a shipping address before checking out")
        reference = self._payment_reference(payment_method)

        self._remember_selection(address, payment_method)

        lines = list(cart.lines)
        request = self._build_request(lines, address, reference)

        # Step 1: commit point.
        self.state = CheckoutState.SUBMITTING
        try:
            raw = await self._order_gateway.create(request)
        except DomainException:
            self.state = CheckoutState.SUBMIT_FAILED
            self._remember_attempt(request)
            raise
        self._forget_attempt()

        order = self._normalizer.normalize(raw)
        self.state = CheckoutState.ORDER_CREATED
        logger.info("Order %s created with %d line(s)", order.id, len(lines))

        # Step 2: stock decrements, settle-all.
        self.state = CheckoutState.STOCK_RECONCILING
        partial = await self._decrement_stock(order.id or request.client_token, lines)

        cart.clear()
        try:
            self._cart_repo.save(cart)
        except OSError as exc:
            logger.warning("Could not persist cleared cart: %s", exc)

        self.state = CheckoutState.DONE
        return CheckoutResult(order=order, partial=partial)

    # --- Steps ----------------------------------------------------------------

    def _payment_reference(self, method: PaymentMethod | None) -> str:
        if method is None:
            raise ValidationError("Select a payment method before checking out")
        if method.is_server_backed:
            return method.id  # type: ignore[return-value]
        if self._allow_unsaved_payment:
            logger.warning(
                "Submitting order with unsaved payment method %r", method.order_reference
            )
            return method.order_reference
        raise ValidationError("Save the payment method before checking out")

    def _remember_selection(
        self,
        address: ShippingAddress,
        method: PaymentMethod | None,
    ) -> None:
        """Best-effort: advisory cache only, never blocks submission."""
        try:
            self._local_store.set_json(SHIPPING_DESTINATION_KEY, address.to_raw())
            if method is not None and method.id:
                self._local_store.set(PAYMENT_METHOD_KEY, method.id)
            elif method is not None:
                self._local_store.set_json(SAVED_PAYMENT_KEY, method.to_summary())
                self._local_store.remove(PAYMENT_METHOD_KEY)
        except OSError as exc:
            logger.warning("Could not persist checkout selection: %s", exc)

    def _build_request(
        self,
        lines: list[CartLine],
        address: ShippingAddress,
        reference: str,
    ) -> OrderRequest:
        """Build the request, reusing the token of an identical failed attempt."""
        request = OrderRequest.from_cart(lines, address, reference)
        pending = self._local_store.get_json(PENDING_CHECKOUT_KEY)
        if (
            isinstance(pending, dict)
            and pending.get("fingerprint") == request.fingerprint
            and pending.get("clientToken")
        ):
            return request.with_token(pending["clientToken"])
        return request.with_token(self._token_factory())

    def _remember_attempt(self, request: OrderRequest) -> None:
        try:
            self._local_store.set_json(
                PENDING_CHECKOUT_KEY,
                {"fingerprint": request.fingerprint, "clientToken": request.client_token},
            )
        except OSError as exc:
            logger.warning("Could not persist failed checkout attempt: %s", exc)

    def _forget_attempt(self) -> None:
        try:
            self._local_store.remove(PENDING_CHECKOUT_KEY)
        except OSError as exc:
            logger.warning("Could not clear failed checkout attempt: %s", exc)

    async def _decrement_stock(
        self,
        order_id: str,
        lines: list[CartLine],
    ) -> PartialFulfillment | None:
        transactions = [
            StockTransaction.for_order_line(order_id, line.product_id, line.quantity)
            for line in lines
        ]
        outcomes = await asyncio.gather(
            *(self._stock_gateway.record(tx) for tx in transactions),
            return_exceptions=True,
        )

        failed: list[StockTransaction] = []
        for tx, outcome in zip(transactions, outcomes):
            if outcome is None:
                continue
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning(
                "Stock update for product %s on order %s failed: %s",
                tx.product_id,
                order_id,
                outcome,
            )
            failed.append(tx)
            self._enqueue(order_id, tx, str(outcome))

        if not failed:
            return None
        partial = PartialFulfillment(order_id=order_id, failed=tuple(failed))
        logger.warning(partial.message)
        return partial

    def _enqueue(self, order_id: str, tx: StockTransaction, error: str) -> None:
        try:
            self._reconciliation_repo.save(
                PendingStockTransaction(order_id=order_id, transaction=tx, last_error=error)
            )
        except OSError as exc:
            logger.error(
                "Could not queue stock reconciliation for %s: %s", tx.idempotency_key, exc
            )
