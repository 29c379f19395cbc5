"""Application service: Payment Method Resolver.

Reconciles the server's saved payment methods with the device's cached
selection and exposes one canonical "current" method.

Supersession rules:

- A non-empty server list wins outright; its first entry is current.
- An empty server list means there is nothing saved: a JSON summary in
  ``@payment_method`` (stripped of any id), then the id-less
  ``@saved_payment`` summary, may stand in.  A bare id is stale.
- A failed fetch (or no session) falls back to the durable selection:
  ``@payment_method`` (id or JSON summary), then ``@saved_payment``.

Id-less summaries are written to ``@saved_payment`` only.

Server state and the local cache are never merged field by field.
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace

from storefront.domain.exceptions import NetworkError, NotFound, Unauthenticated
from storefront.domain.gateway.payment_gateway import PaymentMethodGateway
from storefront.domain.model.payment import CardInput, PaymentMethod
from storefront.domain.repository.local_store import (
    PAYMENT_METHOD_KEY,
    SAVED_PAYMENT_KEY,
    LocalStore,
)
from storefront.domain.repository.session import Session

logger = logging.getLogger(__name__)


class PaymentMethodResolver:

    def __init__(
        self,
        gateway: PaymentMethodGateway,
        local_store: LocalStore,
        session: Session,
    ) -> None:
        self._gateway = gateway
        self._local_store = local_store
        self._session = session
        self._methods: list[PaymentMethod] = []
        self._current: PaymentMethod | None = None

    @property
    def current(self) -> PaymentMethod | None:
        return self._current

    @property
    def methods(self) -> list[PaymentMethod]:
        return list(self._methods)

    # --- Queries --------------------------------------------------------------

    async def resolve(self) -> PaymentMethod | None:
        """Pick the canonical current method (see module docstring)."""
        server_reachable = False
        if self._session.is_authenticated:
            try:
                methods = await self._gateway.list_methods()
            except (NetworkError, NotFound) as exc:
                logger.warning("Payment methods unavailable (%s); using local selection", exc)
            else:
                server_reachable = True
                self._methods = methods
                if methods:
                    self.select(methods[0])
                    return self._current

        self._current = self._local_fallback(server_reachable)
        return self._current

    # --- Mutations ------------------------------------------------------------

    async def save(self, card: CardInput, method_id: str | None = None) -> PaymentMethod:
        """Create or update the account's payment method.

        Update takes precedence whenever any id is known (explicit, current
        selection, or first listed) so an account never accumulates
        duplicates.  Nothing changes locally unless the server accepts.
        """
        card.validate()
        if not self._session.is_authenticated:
            raise Unauthenticated("Please log in to save a payment method")

        existing_id = method_id or self._known_id()
        if existing_id:
            returned = await self._gateway.update(existing_id, card)
        else:
            returned = await self._gateway.create(card)

        # Optimistic summary only when the server confirmed without a body.
        saved = returned if returned is not None else card.to_payment_method(existing_id)
        if not saved.id and existing_id:
            saved = replace(saved, id=existing_id)

        self._methods = [saved] + [m for m in self._methods if m.id != saved.id]
        self.select(saved)
        logger.info("Payment method %s saved", saved.display_name)
        return saved

    async def delete(self, method_id: str) -> PaymentMethod | None:
        """Delete on the server first; only then drop it locally and re-resolve."""
        if not self._session.is_authenticated:
            raise Unauthenticated("Please log in to remove a payment method")

        await self._gateway.delete(method_id)

        self._methods = [m for m in self._methods if m.id != method_id]
        if self._current is not None and self._current.id == method_id:
            self._current = None
        if self._local_store.get(PAYMENT_METHOD_KEY) == method_id:
            self._local_store.remove(PAYMENT_METHOD_KEY)
        return await self.resolve()

    def select(self, method: PaymentMethod) -> None:
        """Make *method* current and persist the choice durably."""
        self._current = method
        try:
            if method.id:
                self._local_store.set(PAYMENT_METHOD_KEY, method.id)
            else:
                self._local_store.set_json(SAVED_PAYMENT_KEY, method.to_summary())
                self._local_store.remove(PAYMENT_METHOD_KEY)
        except OSError as exc:
            logger.warning("Could not persist payment selection: %s", exc)

    # --- Internal helpers -----------------------------------------------------

    def _known_id(self) -> str | None:
        if self._current is not None and self._current.id:
            return self._current.id
        for method in self._methods:
            if method.id:
                return method.id
        return None

    def _local_fallback(self, server_reachable: bool) -> PaymentMethod | None:
        stored = self._local_store.get(PAYMENT_METHOD_KEY)
        if stored:
            summary = self._parse_summary(stored)
            if summary is not None:
                # An empty server list makes any id in the summary stale.
                return replace(summary, id=None) if server_reachable else summary
            if not server_reachable and not stored.lstrip().startswith("{"):
                # Details are only known server-side; keep the reference.
                return PaymentMethod(id=stored, brand="", last4="")

        saved = self._local_store.get_json(SAVED_PAYMENT_KEY)
        if isinstance(saved, dict):
            return replace(PaymentMethod.from_raw(saved), id=None)
        return None

    @staticmethod
    def _parse_summary(stored: str) -> PaymentMethod | None:
        """``@payment_method`` holds either a bare id or a JSON summary."""
        if not stored.lstrip().startswith("{"):
            return None
        try:
            raw = json.loads(stored)
        except ValueError:
            return None
        return PaymentMethod.from_raw(raw) if isinstance(raw, dict) else None
