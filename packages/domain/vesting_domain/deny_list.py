"""Set of identities barred from claiming."""

import logging
from typing import Iterator, Set

logger = logging.getLogger(__name__)


class DenyList:
    """Identities on this list cannot claim from any pool, whatever their allocations."""

    def __init__(self):
        self._blocked: Set[str] = set()

    def set_blocked(self, identity: str, blocked: bool) -> None:
        """Add (blocked=True) or remove (blocked=False) an identity.

        Both directions are idempotent.
        """
        if blocked:
            self._blocked.add(identity)
        else:
            self._blocked.discard(identity)
        logger.info("Deny-list: %s %s", identity, "blocked" if blocked else "unblocked")

    def is_blocked(self, identity: str) -> bool:
        return identity in self._blocked

    def __contains__(self, identity: object) -> bool:
        return identity in self._blocked

    def __len__(self) -> int:
        return len(self._blocked)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._blocked))
