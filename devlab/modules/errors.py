"""
Exceptions raised by the business modules.
"""


class InvalidArgumentError(Exception):
    """Raised when a caller supplies a malformed argument."""

    pass


class StorageConflictError(Exception):
    """Raised when a unique-key race cannot be resolved."""

    pass


class NotFoundError(Exception):
    """Raised when a requested record does not exist."""

    pass
