# tokenmint/identity/account.py
"""
Account management.

An Account is a principal identity with:
- A local label (e.g., "alice")
- An RSA key pair for signing calls
- An address derived from the public key
"""

import hashlib
import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def _generate_keypair() -> tuple[bytes, bytes]:
    """Generate RSA key pair for signing."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


def address_from_public_key(public_key_pem: bytes) -> str:
    """
    Derive a principal address from a PEM public key.

    The address is "0x" followed by the last 40 hex characters of the
    SHA3-256 digest of the DER-encoded key.
    """
    public_key = serialization.load_pem_public_key(public_key_pem)
    der = public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return "0x" + hashlib.sha3_256(der).hexdigest()[-40:]


@dataclass
class Account:
    """
    A principal identity.

    Attributes:
        label: Local name for the account
        public_key: PEM-encoded public key
        private_key: PEM-encoded private key (kept secret)
        created_at: Timestamp of creation
    """
    label: str
    public_key: bytes
    private_key: bytes
    created_at: float = field(default_factory=time.time)

    @property
    def address(self) -> str:
        """Principal address used by the registry."""
        return address_from_public_key(self.public_key)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage."""
        return {
            "label": self.label,
            "public_key": self.public_key.decode("utf-8"),
            "private_key": self.private_key.decode("utf-8"),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Account":
        """Deserialize from storage."""
        return cls(
            label=data["label"],
            public_key=data["public_key"].encode("utf-8"),
            private_key=data["private_key"].encode("utf-8"),
            created_at=data.get("created_at", time.time()),
        )

    @classmethod
    def create(cls, label: str) -> "Account":
        """Create a new account with generated keys."""
        private_pem, public_pem = _generate_keypair()
        return cls(label=label, public_key=public_pem, private_key=private_pem)


class AccountStore:
    """
    Persistent storage for accounts.

    Structure:
        store_dir/
            accounts.json     # All accounts, keyed by label
    """

    def __init__(self, store_dir: Path | str):
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)
        self._accounts: Dict[str, Account] = {}
        self._load()

    def _index_path(self) -> Path:
        return self.store_dir / "accounts.json"

    def _load(self):
        """Load accounts from disk."""
        index_path = self._index_path()
        if index_path.exists():
            with open(index_path) as f:
                data = json.load(f)
            self._accounts = {
                label: Account.from_dict(account_data)
                for label, account_data in data.get("accounts", {}).items()
            }

    def _save(self):
        """Save accounts to disk."""
        data = {
            "version": "1.0",
            "accounts": {
                label: account.to_dict()
                for label, account in self._accounts.items()
            },
        }
        with open(self._index_path(), "w") as f:
            json.dump(data, f, indent=2)

    def create(self, label: str) -> Account:
        """Create and store a new account."""
        if label in self._accounts:
            raise ValueError(f"Account {label} already exists")

        account = Account.create(label)
        self._accounts[label] = account
        self._save()
        return account

    def get(self, label: str) -> Optional[Account]:
        """Get an account by label."""
        return self._accounts.get(label)

    def find_by_address(self, address: str) -> Optional[Account]:
        """Get an account by its principal address."""
        for account in self._accounts.values():
            if account.address == address:
                return account
        return None

    def list(self) -> List[Account]:
        """List all accounts."""
        return list(self._accounts.values())

    def __contains__(self, label: str) -> bool:
        return label in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)
