"""Capability guards composed at the engine's call boundary.

Each guard is a decorator for an engine method whose first positional
argument after self identifies the caller or the beneficiary. Guards run
before the wrapped operation touches any state.

Usage:
    class VestingEngine:
        @requires_admin
        def create_pool(self, caller, config): ...

        @rejects_blocked
        def claim(self, beneficiary, asset, pool_ids=None): ...
"""

import functools
import logging

from .errors import Blocked, Unauthorized

logger = logging.getLogger(__name__)


def requires_admin(method):
    """Reject the call with Unauthorized unless the caller is an administrator."""

    @functools.wraps(method)
    def wrapper(self, caller, *args, **kwargs):
        if not self.authorizer.is_admin(caller):
            logger.warning("Unauthorized %s attempt by %s", method.__name__, caller)
            raise Unauthorized(f"{caller} may not call {method.__name__}")
        return method(self, caller, *args, **kwargs)

    return wrapper


def rejects_blocked(method):
    """Reject the call with Blocked if the beneficiary is on the deny-list."""

    @functools.wraps(method)
    def wrapper(self, beneficiary, *args, **kwargs):
        if self.deny_list.is_blocked(beneficiary):
            logger.warning("Blocked beneficiary %s attempted %s", beneficiary, method.__name__)
            raise Blocked(f"{beneficiary} is on the deny-list")
        return method(self, beneficiary, *args, **kwargs)

    return wrapper
