# tokenmint/errors.py
"""
Error taxonomy for registry operations.

Every failure raised by an operation is a RegistryError carrying a short
string tag, so callers (and the CLI) can report the category without
matching on class names.
"""


class RegistryError(Exception):
    """Base class for all operation failures."""

    tag = "registry-error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.tag)
        self.message = message or self.tag


class AccessDenied(RegistryError):
    """Caller is not the admin of the registry."""

    tag = "access-denied"


class NotTokenOwner(AccessDenied):
    """Caller is not the holder of the asset it tries to mutate."""

    tag = "not-token-owner"


class InvalidFee(RegistryError):
    """Attached value is below the fee and the caller is not exempt."""

    tag = "invalid-fee"


class NotFound(RegistryError):
    """Referenced asset id has not been assigned."""

    tag = "not-found"


class NoFunds(RegistryError):
    """Withdrawal attempted with an empty balance."""

    tag = "no-funds"


class InvalidSignature(RegistryError):
    """A signed call failed verification or was replayed."""

    tag = "invalid-signature"


class AlreadyInitialized(RegistryError):
    """A store already holds an initialized registry."""

    tag = "already-initialized"
