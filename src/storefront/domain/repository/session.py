"""Read-only view of the auth session.

Token issuance and storage belong to the login flow; the checkout
pipeline only asks whether a session exists and which bearer token to
send.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Session(ABC):

    @property
    @abstractmethod
    def token(self) -> str | None:
        """Bearer token, or None when logged out."""

    @property
    @abstractmethod
    def user(self) -> dict[str, Any] | None:
        """The logged-in user record, if known."""

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)
