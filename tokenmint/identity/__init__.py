# tokenmint/identity/__init__.py
"""
Principal identities for the token registry.

Core concepts:
- Account: A key pair whose public key determines the principal address
- Call: A registry operation requested by an address
- Signature: Proof that the call came from the account holding the key
"""

from .account import Account, AccountStore, address_from_public_key
from .signatures import Call, sign_call, verify_call

__all__ = [
    "Account",
    "AccountStore",
    "address_from_public_key",
    "Call",
    "sign_call",
    "verify_call",
]
