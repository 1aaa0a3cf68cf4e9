"""Interfaces the engine consumes from its host, plus in-memory implementations.

The host supplies:
    - a clock: Callable[[], int] returning non-decreasing integer timestamps
    - an Authorizer deciding who may run administrative operations
    - an AssetTransfer that actually moves tokens to a beneficiary
    - an AssetMetadata giving each asset's decimals (display only)

The in-memory implementations are suitable for tests, simulations and
single-process deployments.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def system_clock() -> int:
    """Wall-clock time in whole seconds."""
    return int(time.time())


# =============================================================================
# Protocols
# =============================================================================

class Authorizer(Protocol):
    def is_admin(self, caller: str) -> bool:
        """Whether caller may run administrative operations."""
        ...


class AssetTransfer(Protocol):
    def transfer(self, asset: str, to: str, amount: int) -> bool:
        """Move amount raw units of asset to a beneficiary.

        Returns True on success. Returning False or raising both count as a
        failed transfer.
        """
        ...


class AssetMetadata(Protocol):
    def decimals(self, asset: str) -> int:
        """Number of decimal places of one display unit of asset."""
        ...


# =============================================================================
# In-memory implementations
# =============================================================================

class StaticAuthorizer:
    """Fixed set of administrator identities.

    Example:
        authorizer = StaticAuthorizer(["treasury_admin"])
        authorizer.is_admin("treasury_admin")  -> True
    """

    def __init__(self, admins: Iterable[str]):
        self.admins = set(admins)

    def is_admin(self, caller: str) -> bool:
        return caller in self.admins


@dataclass
class StaticAssetMetadata:
    """Decimals looked up from a dict, with a fallback for unknown assets."""

    decimals_by_asset: Dict[str, int] = field(default_factory=dict)
    default: int = 0

    def decimals(self, asset: str) -> int:
        return self.decimals_by_asset.get(asset, self.default)


@dataclass
class InMemoryLedger:
    """Transfer collaborator that credits balances in a dict.

    Set fail_next (or fail_always) to simulate a transfer that could not be
    completed.
    """

    balances: Dict[Tuple[str, str], int] = field(default_factory=dict)
    transfers: List[Tuple[str, str, int]] = field(default_factory=list)
    fail_next: bool = False
    fail_always: bool = False

    def transfer(self, asset: str, to: str, amount: int) -> bool:
        if self.fail_next or self.fail_always:
            self.fail_next = False
            logger.warning("Ledger refused transfer of %d %s to %s", amount, asset, to)
            return False
        self.balances[(asset, to)] = self.balances.get((asset, to), 0) + amount
        self.transfers.append((asset, to, amount))
        return True

    def balance_of(self, asset: str, holder: str) -> int:
        return self.balances.get((asset, holder), 0)


def to_display_units(amount: int, decimals: Optional[int]) -> int:
    """Normalize a raw amount into whole display units (amount // 10**decimals).

    Used for reporting only; accounting always stays in raw units.
    """
    if not decimals:
        return amount
    return amount // 10 ** decimals
