"""Session read from the ``token`` / ``user`` local keys written at login."""

from __future__ import annotations

from typing import Any

from storefront.domain.repository.local_store import TOKEN_KEY, USER_KEY, LocalStore
from storefront.domain.repository.session import Session


class LocalSession(Session):

    def __init__(self, local_store: LocalStore) -> None:
        self._local_store = local_store

    @property
    def token(self) -> str | None:
        return self._local_store.get(TOKEN_KEY) or None

    @property
    def user(self) -> dict[str, Any] | None:
        user = self._local_store.get_json(USER_KEY)
        return user if isinstance(user, dict) else None
