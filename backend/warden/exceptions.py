"""Exceptions raised by the warden stores.

Absence of a client, resource or grant is never an exception; storage-layer
faults (``sqlalchemy.exc.OperationalError`` and friends) are not wrapped and
reach the caller unchanged.
"""


class WardenStoreError(Exception):
    """Base exception for all store errors."""

    pass


class GrantStoreConflictError(WardenStoreError):
    """Raised under the ``raise`` conflict policy when a grant write lost a race."""

    def __init__(self, operation: str, target: str, cause: Exception = None):
        self.operation = operation
        self.target = target
        self.cause = cause
        message = f"Concurrent modification while {operation} {target}"
        if cause:
            message += f": {cause}"
        super().__init__(message)


class UnknownConflictPolicyError(WardenStoreError, ValueError):
    """Raised when a store is built with a conflict policy it does not know."""

    def __init__(self, policy: str):
        self.policy = policy
        super().__init__(f"Unknown grant conflict policy '{policy}' (expected 'ignore' or 'raise')")
