"""Scale constants, annotated field types and the shared model base.

Scale conventions:
    - Amounts are raw integer token units (never floats, never Decimal)
    - Percentages are basis points on a 10000 denominator (10000 = 100%)
    - Times are integer seconds from a single fixed epoch (no timezone)
"""

from typing import Annotated
from pydantic import BaseModel, Field, ConfigDict

# =============================================================================
# Scale
# =============================================================================

BPS_DENOMINATOR = 10_000
"""Basis-point denominator: 10000 bp = 100%."""

SECONDS_PER_DAY = 86_400


# =============================================================================
# Base Model
# =============================================================================

class DomainModel(BaseModel):
    """Common pydantic configuration for pools, allocations and reports.

    Records stay mutable because the engine updates them in place, but every
    assignment is re-validated, so a bad edit fails instead of being stored.
    """

    model_config = ConfigDict(
        frozen=False,  # Pools and allocations are mutated in place by the engine
        validate_assignment=True,  # Validate on field assignment
        use_enum_values=True,  # Use enum values in JSON
        arbitrary_types_allowed=True,
    )


# =============================================================================
# Type Aliases - Numeric
# =============================================================================

TokenAmount = Annotated[
    int,
    Field(ge=0, description="Raw token amount in the asset's smallest unit (non-negative)")
]

BasisPoints = Annotated[
    int,
    Field(ge=0, le=BPS_DENOMINATOR, description="Percentage in basis points (0 to 10000)")
]

Timestamp = Annotated[
    int,
    Field(description="Seconds since the engine epoch")
]

Duration = Annotated[
    int,
    Field(ge=0, description="Length of time in seconds (non-negative)")
]


# =============================================================================
# ID Conventions
# =============================================================================

PoolId = Annotated[
    int,
    Field(ge=0, description="Pool identifier, assigned sequentially from 0 on creation")
]

BeneficiaryId = Annotated[
    str,
    Field(min_length=1, description="Opaque beneficiary identity (wallet address, account id)")
]

AssetId = Annotated[
    str,
    Field(min_length=1, description="Opaque identifier of the fungible asset being vested")
]


# =============================================================================
# ID Examples and Conventions
# =============================================================================
#
# Pool IDs:
#   - 0, 1, 2, ... in creation order; never reused
#
# Beneficiary IDs:
#   - "0x5aeda56215b167893e80b4fe645ba6d5bab767de" - wallet address
#   - "employee_1234" - internal account id
#
# Asset IDs:
#   - "ABC" - ticker
#   - "0xdac17f958d2ee523a2206206994597c13d831ec7" - token contract address
#
# =============================================================================
