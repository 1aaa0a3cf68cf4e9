"""Vesting Domain Engine - token-grant vesting models and business logic.

This package provides the foundational layer for token vesting:
- Vesting pools with linear, interval, monthly and custom strategies
- Per-beneficiary allocations with revocation and soft removal
- Multi-pool claim aggregation with two-phase transfer hand-off
- Global deny-list and administrator capability guards

The domain layer is designed to be:
- Framework-agnostic (no web dependencies)
- Exact (all amounts and times are Python ints)
- Testable (pure Python with Pydantic validation, injectable clock and collaborators)
"""

from .schemas import *  # noqa: F403, F401
from .errors import (  # noqa: F401
    VestingError,
    InvalidConfig,
    PoolNotFound,
    AllocationNotFound,
    AlreadyWhitelisted,
    NotWhitelisted,
    NothingToClaim,
    Blocked,
    Unauthorized,
    TransferFailed,
)
from .collaborators import (  # noqa: F401
    StaticAuthorizer,
    StaticAssetMetadata,
    InMemoryLedger,
    to_display_units,
)
from .engine import VestingEngine  # noqa: F401

__version__ = "0.1.0"
