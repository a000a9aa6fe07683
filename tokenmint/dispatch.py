# tokenmint/dispatch.py
"""
Signed call dispatcher.

Verifies that a Call was signed by the account owning its caller address,
rejects replayed nonces, then routes it to the matching TokenRegistry
operation. The verified address becomes the caller principal.

When the registry is bound to a StateStore, accepted nonces are saved
with it, so a replay is rejected across processes too.
"""

import logging
from typing import Any, Callable, Dict, Optional, Set

from .contract import TokenRegistry
from .errors import InvalidSignature
from .identity import AccountStore, Call, verify_call

logger = logging.getLogger(__name__)

# Operation handlers: (registry, caller, value, params) -> result
Handler = Callable[[TokenRegistry, str, int, Dict[str, Any]], Any]

_HANDLERS: Dict[str, Handler] = {}

# Operations that accept attached value
_PAYABLE = {"mint"}


def register_operation(name: str):
    """Decorator to register a call handler for an operation name."""
    def decorator(fn: Handler) -> Handler:
        _HANDLERS[name] = fn
        return fn
    return decorator


def list_operations() -> list:
    return sorted(_HANDLERS)


@register_operation("mint")
def _mint(registry, caller, value, params):
    return registry.mint(caller, params["descriptor"], value)


@register_operation("update_descriptor")
def _update_descriptor(registry, caller, value, params):
    registry.update_descriptor(caller, int(params["token_id"]), params["descriptor"])


@register_operation("update_fee")
def _update_fee(registry, caller, value, params):
    registry.update_fee(caller, int(params["fee"]))


@register_operation("toggle_exemptions")
def _toggle_exemptions(registry, caller, value, params):
    registry.toggle_exemptions(caller, params["principals"])


@register_operation("withdraw_all")
def _withdraw_all(registry, caller, value, params):
    return registry.withdraw_all(caller)


@register_operation("transfer_admin")
def _transfer_admin(registry, caller, value, params):
    registry.transfer_admin(caller, params["new_admin"])


@register_operation("relinquish_admin")
def _relinquish_admin(registry, caller, value, params):
    registry.relinquish_admin(caller)


class CallDispatcher:
    """
    Routes signed calls to a registry.

    Usage:
        dispatcher = CallDispatcher(registry, AccountStore(".tokenmint/accounts"))
        call = sign_call(Call("mint", {"descriptor": "ipfs://..."}, alice.address, value=10), alice)
        token_id = dispatcher.submit(call)
    """

    def __init__(self, registry: TokenRegistry, accounts: AccountStore, seen_nonces: Optional[Set[str]] = None):
        self.registry = registry
        self.accounts = accounts
        if seen_nonces is None:
            seen_nonces = registry.store.load_nonces() if registry.store is not None else set()
        self._seen_nonces: Set[str] = seen_nonces

    def authenticate(self, call: Call) -> str:
        """
        Verify a call and return the caller principal.

        Raises:
            InvalidSignature: unknown caller, bad signature, or replayed nonce
        """
        account = self.accounts.find_by_address(call.caller)
        if account is None:
            raise InvalidSignature(f"unknown caller {call.caller}")
        if not verify_call(call, account.public_key):
            raise InvalidSignature(f"signature does not match caller {call.caller}")
        if call.nonce in self._seen_nonces:
            raise InvalidSignature(f"nonce {call.nonce} already used")
        return account.address

    def submit(self, call: Call) -> Any:
        """Authenticate and run a call, returning the operation's result."""
        handler = _HANDLERS.get(call.operation)
        if handler is None:
            raise ValueError(f"Unknown operation: {call.operation}")
        if call.value < 0:
            raise ValueError(f"Attached value cannot be negative: {call.value}")
        if call.value and call.operation not in _PAYABLE:
            raise ValueError(f"Operation {call.operation} does not accept value")

        caller = self.authenticate(call)
        self._seen_nonces.add(call.nonce)
        if self.registry.store is not None:
            self.registry.store.save_nonces(self._seen_nonces)
        logger.debug(f"Dispatching {call.operation} from {caller}")
        return handler(self.registry, caller, call.value, call.params)
