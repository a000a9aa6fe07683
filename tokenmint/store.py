# tokenmint/store.py
"""
On-disk store for a token registry.

Structure:
    store_dir/
        state.json      # Full registry state
        events.json     # Committed notifications (append-only)
        nonces.json     # Nonces of accepted signed calls
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Set

from .contract import TokenRegistry
from .errors import AlreadyInitialized
from .events import EventLog

logger = logging.getLogger(__name__)


class StateStore:
    """Persists registry state and its event log under one directory."""

    def __init__(self, store_dir: Path | str):
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def _state_path(self) -> Path:
        return self.store_dir / "state.json"

    def exists(self) -> bool:
        return self._state_path().exists()

    def load_state(self) -> Optional[Dict[str, Any]]:
        """Load saved state, None if nothing has been saved."""
        state_path = self._state_path()
        if not state_path.exists():
            return None
        with open(state_path) as f:
            return json.load(f)

    def save_state(self, data: Dict[str, Any]) -> None:
        """Write state atomically (temp file, then rename)."""
        tmp_path = self._state_path().with_suffix(".json.tmp")
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(self._state_path())

    def event_log(self) -> EventLog:
        return EventLog(self.store_dir)

    def _nonces_path(self) -> Path:
        return self.store_dir / "nonces.json"

    def load_nonces(self) -> Set[str]:
        """Load the nonces of calls already accepted against this registry."""
        nonces_path = self._nonces_path()
        if not nonces_path.exists():
            return set()
        with open(nonces_path) as f:
            return set(json.load(f))

    def save_nonces(self, nonces: Set[str]) -> None:
        tmp_path = self._nonces_path().with_suffix(".json.tmp")
        with open(tmp_path, "w") as f:
            json.dump(sorted(nonces), f, indent=2)
        tmp_path.replace(self._nonces_path())

    def initialize(
        self,
        initializer: str,
        name: str,
        symbol: str,
        fee: int,
        first_descriptor: str,
        registry_address: str = None,
    ) -> TokenRegistry:
        """Create a new registry bound to this store."""
        if self.exists():
            raise AlreadyInitialized(f"registry already initialized in {self.store_dir}")
        registry = TokenRegistry.initialize(
            initializer=initializer,
            name=name,
            symbol=symbol,
            fee=fee,
            first_descriptor=first_descriptor,
            registry_address=registry_address,
            event_log=self.event_log(),
            store=self,
        )
        return registry

    def open(self) -> TokenRegistry:
        """
        Load the registry saved in this store.

        Raises:
            FileNotFoundError: if the store holds no registry
        """
        data = self.load_state()
        if data is None:
            raise FileNotFoundError(f"No registry found in {self.store_dir}")
        version = data.get("version")
        if version != "1.0":
            logger.warning(f"Unexpected state version {version!r} in {self.store_dir}")
        return TokenRegistry.from_dict(data, event_log=self.event_log(), store=self)
