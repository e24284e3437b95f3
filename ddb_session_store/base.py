# PURPOSE: Contract a host session framework expects from any session store.
# CONTEXT: DynamoDBStore implements it; hosts may compose several stores behind it.

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence


class SessionStore(ABC):
    """Abstract session store: set/get/remove by id, plus optional reaping."""

    can_reap_expired = False

    @abstractmethod
    def set(self, id: str, data: Dict[str, Any], expires: int = 0, namespace: Sequence[str] = ()) -> None:
        """Store `data` under the id, expiring `expires` seconds from now (0 = never)."""

    @abstractmethod
    def get(self, id: str, namespace: Sequence[str] = ()) -> Optional[Dict[str, Any]]:
        """Return the stored data, or None if missing or expired."""

    @abstractmethod
    def remove(self, id: str, namespace: Sequence[str] = ()) -> None:
        """Delete the stored data; missing ids are not an error."""

    def reap_expired(self) -> int:
        raise NotImplementedError(f"{type(self).__name__} does not support reaping expired sessions")
