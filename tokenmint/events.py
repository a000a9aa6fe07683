# tokenmint/events.py
"""
Notifications emitted by registry operations.

One notification is emitted per state change:
- Minted: an asset was issued to a holder
- DescriptorUpdated: a holder replaced an asset's descriptor
- ExemptionAdded / ExemptionRemoved: fee exemption toggled
- Withdrawn: the admin withdrew the collected balance
- AdminChanged: admin transferred or relinquished
- FeeUpdated: the mint fee changed

Notifications are buffered while an operation runs and appended to the
EventLog only when the operation commits.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

MINTED = "Minted"
DESCRIPTOR_UPDATED = "DescriptorUpdated"
EXEMPTION_ADDED = "ExemptionAdded"
EXEMPTION_REMOVED = "ExemptionRemoved"
WITHDRAWN = "Withdrawn"
ADMIN_CHANGED = "AdminChanged"
FEE_UPDATED = "FeeUpdated"

# Argument keys that name principals, used by find_by_principal()
_PRINCIPAL_KEYS = ("holder", "principal", "admin", "old_admin", "new_admin", "registry")


@dataclass
class Event:
    """
    A single notification.

    Attributes:
        event_type: Notification name (Minted, Withdrawn, ...)
        args: Notification arguments, in declaration order
        sequence: Position in the event log (assigned on commit)
        emitted_at: Timestamp of emission
    """
    event_type: str
    args: Dict[str, Any]
    sequence: Optional[int] = None
    emitted_at: float = field(default_factory=time.time)

    @property
    def values(self) -> tuple:
        """Argument values in declaration order."""
        return tuple(self.args.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "args": self.args,
            "sequence": self.sequence,
            "emitted_at": self.emitted_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        return cls(
            event_type=data["event_type"],
            args=data["args"],
            sequence=data.get("sequence"),
            emitted_at=data.get("emitted_at", time.time()),
        )

    @classmethod
    def minted(cls, holder: str, token_id: int) -> "Event":
        return cls(MINTED, {"holder": holder, "token_id": token_id})

    @classmethod
    def descriptor_updated(cls, holder: str, token_id: int) -> "Event":
        return cls(DESCRIPTOR_UPDATED, {"holder": holder, "token_id": token_id})

    @classmethod
    def exemption_added(cls, principal: str) -> "Event":
        return cls(EXEMPTION_ADDED, {"principal": principal})

    @classmethod
    def exemption_removed(cls, principal: str) -> "Event":
        return cls(EXEMPTION_REMOVED, {"principal": principal})

    @classmethod
    def withdrawn(cls, admin: str, registry: str, amount: int) -> "Event":
        return cls(WITHDRAWN, {"admin": admin, "registry": registry, "amount": amount})

    @classmethod
    def admin_changed(cls, old_admin: Optional[str], new_admin: Optional[str]) -> "Event":
        return cls(ADMIN_CHANGED, {"old_admin": old_admin, "new_admin": new_admin})

    @classmethod
    def fee_updated(cls, old_fee: int, new_fee: int) -> "Event":
        return cls(FEE_UPDATED, {"old_fee": old_fee, "new_fee": new_fee})


# Callback used by components to emit notifications
EmitFn = Callable[[Event], None]


class EventLog:
    """
    Append-only log of committed notifications.

    Kept in memory; when a store_dir is given the log is also written to
    store_dir/events.json on every append.
    """

    def __init__(self, store_dir: Path | str = None):
        self.store_dir = Path(store_dir) if store_dir else None
        self._events: List[Event] = []
        self._subscribers: List[Callable[[Event], None]] = []
        if self.store_dir:
            self.store_dir.mkdir(parents=True, exist_ok=True)
            self._load()

    def _log_path(self) -> Path:
        return self.store_dir / "events.json"

    def _load(self):
        """Load events from disk."""
        log_path = self._log_path()
        if log_path.exists():
            try:
                with open(log_path) as f:
                    data = json.load(f)
                self._events = [Event.from_dict(e) for e in data.get("events", [])]
            except (json.JSONDecodeError, KeyError) as e:
                logger.warning(f"Failed to load events: {e}")
                self._events = []

    def _save(self):
        """Save events to disk."""
        if not self.store_dir:
            return
        data = {
            "version": "1.0",
            "events": [e.to_dict() for e in self._events],
        }
        with open(self._log_path(), "w") as f:
            json.dump(data, f, indent=2)

    def subscribe(self, callback: Callable[[Event], None]) -> None:
        """Register a callback invoked for every committed event."""
        self._subscribers.append(callback)

    def extend(self, events: List[Event]) -> None:
        """Commit a batch of events in order."""
        if not events:
            return
        for event in events:
            event.sequence = len(self._events)
            self._events.append(event)
        self._save()
        for event in events:
            for callback in self._subscribers:
                try:
                    callback(event)
                except Exception as e:
                    logger.warning(f"Event subscriber error on {event.event_type}: {e}")

    def list(self) -> List[Event]:
        """List all events."""
        return list(self._events)

    def find_by_type(self, event_type: str) -> List[Event]:
        """Find events of a given type."""
        return [e for e in self._events if e.event_type == event_type]

    def find_by_principal(self, principal: str) -> List[Event]:
        """Find events naming a principal in any principal argument."""
        return [
            e for e in self._events
            if any(e.args.get(k) == principal for k in _PRINCIPAL_KEYS)
        ]

    def last(self) -> Optional[Event]:
        return self._events[-1] if self._events else None

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(self._events)
