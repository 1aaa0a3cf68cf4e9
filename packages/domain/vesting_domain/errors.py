"""Exception hierarchy for the vesting engine.

Every failure the engine surfaces derives from VestingError, so callers can
catch the whole family at once. None of these are retried by the engine.
"""


class VestingError(Exception):
    """Base class for all vesting engine errors."""
    pass


class InvalidConfig(VestingError, ValueError):
    """Pool parameters or an administrative edit violate a precondition.

    The rejected operation leaves state unchanged.
    """
    pass


class PoolNotFound(VestingError, LookupError):
    """Referenced pool id does not exist."""

    def __init__(self, pool_id: int):
        self.pool_id = pool_id
        super().__init__(f"Pool {pool_id} not found")


class AllocationNotFound(VestingError, LookupError):
    """Beneficiary has no allocation record in the referenced pool."""

    def __init__(self, pool_id: int, beneficiary: str):
        self.pool_id = pool_id
        self.beneficiary = beneficiary
        super().__init__(f"No allocation for {beneficiary} in pool {pool_id}")


class AlreadyWhitelisted(VestingError):
    """An allocation record already exists for this (pool, beneficiary) pair."""
    pass


class NotWhitelisted(VestingError):
    """No active allocation exists for this (pool, beneficiary) pair."""
    pass


class NothingToClaim(VestingError):
    """The claim would transfer zero tokens."""
    pass


class Blocked(VestingError):
    """Beneficiary is on the deny-list."""
    pass


class Unauthorized(VestingError, PermissionError):
    """Caller is not an administrator."""
    pass


class TransferFailed(VestingError):
    """The transfer collaborator could not move the tokens.

    Raised only after every reserved distributed amount has been rolled back.
    """
    pass
