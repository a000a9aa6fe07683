# tokenmint/contract.py
"""
Token registry facade.

Composes access control, the exemption list, the treasury and the asset
registry into one state object, and runs every mutating operation as an
atomic unit:

1. Snapshot the full state
2. Run the operation, buffering notifications
3. On success, commit the buffered notifications (and save, if bound to a store)
4. On any exception, restore the snapshot, drop the notifications, re-raise
"""

import copy
import hashlib
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, List, Optional

from .access import AccessControl
from .events import Event, EventLog
from .exemptions import ExemptionRegistry
from .metadata import Descriptor, Metadata
from .registry import Asset, AssetRegistry
from .treasury import Treasury

logger = logging.getLogger(__name__)

STATE_VERSION = "1.0"


def derive_registry_address(initializer: str, name: str, symbol: str) -> str:
    """Deterministic address for a registry created by initializer."""
    digest = hashlib.sha3_256(f"{initializer}:{name}:{symbol}".encode()).hexdigest()
    return "0x" + digest[-40:]


class TokenRegistry:
    """
    A fee-gated asset registry with a single admin.

    Create one with TokenRegistry.initialize(); restore a saved one with
    TokenRegistry.from_dict().
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        admin: Optional[str],
        fee: int,
        registry_address: str,
        event_log: EventLog = None,
        store=None,
    ):
        self.events = event_log if event_log is not None else EventLog()
        self.store = store
        self._pending: List[Event] = []
        self.access = AccessControl(admin, self._pending.append)
        self.exemptions = ExemptionRegistry(self.access, self._pending.append)
        self.treasury = Treasury(self.access, fee, registry_address, self._pending.append)
        self.assets = AssetRegistry(
            name, symbol, self.access, self.exemptions, self.treasury, self._pending.append,
        )

    @classmethod
    def initialize(
        cls,
        initializer: str,
        name: str,
        symbol: str,
        fee: int,
        first_descriptor: str,
        registry_address: str = None,
        event_log: EventLog = None,
        store=None,
    ) -> "TokenRegistry":
        """
        Create a registry administered by initializer.

        Performs the fee-free first mint of asset 1 to the initializer with
        first_descriptor as its raw URI.
        """
        if registry_address is None:
            registry_address = derive_registry_address(initializer, name, symbol)
        registry = cls(
            name=name,
            symbol=symbol,
            admin=initializer,
            fee=fee,
            registry_address=registry_address,
            event_log=event_log,
            store=store,
        )
        with registry._transaction("initialize"):
            registry.assets.issue_initial(initializer, first_descriptor)
        logger.info(f"Initialized registry {name!r} ({symbol}) at {registry_address}, admin {initializer}")
        return registry

    # -- atomicity --

    @contextmanager
    def _transaction(self, operation: str):
        snapshot = copy.deepcopy(self._state_dict())
        self._pending.clear()
        try:
            yield
            if self.store is not None:
                self.store.save_state(self.to_dict())
        except Exception as e:
            self._load_state_dict(snapshot)
            self._pending.clear()
            logger.warning(f"{operation} rolled back: {e}")
            raise
        committed = list(self._pending)
        self._pending.clear()
        self.events.extend(committed)

    # -- queries --

    @property
    def name(self) -> str:
        return self.assets.name

    @property
    def symbol(self) -> str:
        return self.assets.symbol

    @property
    def fee(self) -> int:
        return self.treasury.fee

    @property
    def next_id(self) -> int:
        return self.assets.next_id

    @property
    def admin(self) -> Optional[str]:
        return self.access.admin

    @property
    def balance(self) -> int:
        return self.treasury.balance

    @property
    def registry_address(self) -> str:
        return self.treasury.registry_address

    def owner_of(self, token_id: int) -> str:
        return self.assets.owner_of(token_id)

    def uri_of(self, token_id: int) -> str:
        return self.assets.uri_of(token_id)

    def descriptor_of(self, token_id: int) -> Descriptor:
        return self.assets.descriptor_of(token_id)

    def metadata_of(self, token_id: int) -> Optional[Metadata]:
        return self.assets.metadata_of(token_id)

    def tokens_of(self, holder: str) -> List[int]:
        return self.assets.tokens_of(holder)

    def is_exempt(self, principal: str) -> bool:
        return self.exemptions.is_exempt(principal)

    def list_assets(self) -> List[Asset]:
        return self.assets.list()

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        """Receive every committed notification."""
        self.events.subscribe(callback)

    # -- mutators --

    def mint(self, caller: str, descriptor, attached_value: int = 0) -> int:
        """Mint a new asset to caller; see AssetRegistry.mint()."""
        with self._transaction("mint"):
            token_id = self.assets.mint(caller, descriptor, attached_value)
        return token_id

    def update_descriptor(self, caller: str, token_id: int, descriptor) -> None:
        with self._transaction("update_descriptor"):
            self.assets.update_descriptor(caller, token_id, descriptor)

    def update_fee(self, caller: str, new_fee: int) -> None:
        with self._transaction("update_fee"):
            self.treasury.update_fee(caller, new_fee)
        logger.info(f"Fee set to {new_fee}")

    def toggle_exemptions(self, caller: str, principals: Iterable[str]) -> None:
        principals = list(principals)
        with self._transaction("toggle_exemptions"):
            self.exemptions.toggle(caller, principals)
        logger.info(f"Toggled exemptions for {len(principals)} principal(s)")

    def withdraw_all(self, caller: str) -> int:
        with self._transaction("withdraw_all"):
            amount = self.treasury.withdraw_all(caller)
        logger.info(f"Withdrew {amount} from {self.registry_address}")
        return amount

    def transfer_admin(self, caller: str, new_admin: str) -> None:
        with self._transaction("transfer_admin"):
            self.access.transfer_admin(caller, new_admin)
        logger.info(f"Admin transferred to {new_admin}")

    def relinquish_admin(self, caller: str) -> None:
        with self._transaction("relinquish_admin"):
            self.access.relinquish_admin(caller)
        logger.info("Admin relinquished")

    # -- serialization --

    def _state_dict(self) -> Dict[str, Any]:
        return {
            "access": self.access.to_dict(),
            "exemptions": self.exemptions.to_dict(),
            "treasury": self.treasury.to_dict(),
            "assets": self.assets.to_dict(),
        }

    def _load_state_dict(self, data: Dict[str, Any]) -> None:
        self.access.load_dict(data["access"])
        self.exemptions.load_dict(data["exemptions"])
        self.treasury.load_dict(data["treasury"])
        self.assets.load_dict(data["assets"])

    def to_dict(self) -> Dict[str, Any]:
        data = self._state_dict()
        data["version"] = STATE_VERSION
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], event_log: EventLog = None, store=None) -> "TokenRegistry":
        """Restore a registry from to_dict() output."""
        registry = cls(
            name=data["assets"]["name"],
            symbol=data["assets"]["symbol"],
            admin=data["access"].get("admin"),
            fee=data["treasury"]["fee"],
            registry_address=data["treasury"]["registry_address"],
            event_log=event_log,
            store=store,
        )
        registry._load_state_dict(data)
        return registry
