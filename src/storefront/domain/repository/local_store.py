"""Abstract durable key/value store on the device.

Several screens read the same keys; each writer fully overwrites its own
key and nothing else.  There is no cross-key transaction, so the values
are advisory caches: once an order exists, it is the source of truth.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

SHIPPING_DESTINATION_KEY = "@shipping_destination"
PAYMENT_METHOD_KEY = "@payment_method"
SAVED_PAYMENT_KEY = "@saved_payment"
CART_ITEMS_KEY = "@cart_items"
PENDING_CHECKOUT_KEY = "@pending_checkout"
TOKEN_KEY = "token"
USER_KEY = "user"


class LocalStore(ABC):

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored string, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Overwrite *key* with *value*."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete *key*; a missing key is not an error."""

    # --- JSON helpers ---------------------------------------------------------

    def get_json(self, key: str) -> Any:
        """Decode a JSON value; unparseable or missing values read as None."""
        raw = self.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return None

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value))
