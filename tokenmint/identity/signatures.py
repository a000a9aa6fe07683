# tokenmint/identity/signatures.py
"""
Signed registry calls.

A Call names an operation, its parameters, and the calling address. The
caller signs the canonical JSON of the call (without the signature) with
RSA-SHA256 so the dispatcher can attribute it to a principal.
"""

import base64
import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding

from .account import Account


def _canonicalize(data: Dict[str, Any]) -> str:
    """
    Canonicalize JSON for signing.

    Sorted keys, no whitespace.
    """
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


@dataclass
class Call:
    """
    A request to run one registry operation.

    Attributes:
        operation: Operation name (mint, withdraw_all, ...)
        params: Operation parameters (JSON-serializable)
        caller: Address of the calling principal
        value: Value attached to the call
        nonce: Unique id, rejected if seen twice
        signature: Base64 signature (added after signing)
    """
    operation: str
    params: Dict[str, Any]
    caller: str
    value: int = 0
    nonce: str = field(default_factory=lambda: str(uuid.uuid4()))
    signature: Optional[str] = None

    def signing_payload(self) -> bytes:
        return _canonicalize({
            "operation": self.operation,
            "params": self.params,
            "caller": self.caller,
            "value": self.value,
            "nonce": self.nonce,
        }).encode("utf-8")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "params": self.params,
            "caller": self.caller,
            "value": self.value,
            "nonce": self.nonce,
            "signature": self.signature,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Call":
        return cls(
            operation=data["operation"],
            params=data.get("params", {}),
            caller=data["caller"],
            value=data.get("value", 0),
            nonce=data["nonce"],
            signature=data.get("signature"),
        )


def sign_call(call: Call, account: Account) -> Call:
    """
    Sign a call with the account's private key.

    Args:
        call: The call to sign (its caller must be the account's address)
        account: The account whose key signs the call

    Returns:
        Call with signature attached
    """
    if call.caller != account.address:
        raise ValueError(f"Call caller {call.caller} does not match account {account.label}")

    private_key = serialization.load_pem_private_key(
        account.private_key,
        password=None,
    )
    signature_bytes = private_key.sign(
        call.signing_payload(),
        padding.PKCS1v15(),
        hashes.SHA256(),
    )
    call.signature = base64.b64encode(signature_bytes).decode("utf-8")
    return call


def verify_call(call: Call, public_key_pem: bytes) -> bool:
    """
    Verify a call's signature.

    Args:
        call: The call with signature
        public_key_pem: PEM-encoded public key

    Returns:
        True if signature is valid
    """
    if not call.signature:
        return False

    try:
        public_key = serialization.load_pem_public_key(public_key_pem)
        signature_bytes = base64.b64decode(call.signature)
        public_key.verify(
            signature_bytes,
            call.signing_payload(),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        return True

    except (InvalidSignature, ValueError):
        return False
