# tokenmint/registry/registry.py
"""
Asset registry.

The registry issues numbered assets and stores their descriptors:
- Sequential ids starting at 1, never reused or skipped
- One holder per asset, fixed at creation
- Descriptor mutation restricted to the holder
- Structured descriptors encoded to data URIs on read
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from .. import fees
from ..access import AccessControl
from ..errors import NotFound, NotTokenOwner
from ..events import EmitFn, Event
from ..exemptions import ExemptionRegistry
from ..metadata import Descriptor, Metadata, as_descriptor, descriptor_from_dict, metadata_from_descriptor
from ..treasury import Treasury

logger = logging.getLogger(__name__)


@dataclass
class Asset:
    """
    An issued asset.

    Attributes:
        token_id: Sequential id, the canonical identifier
        holder: Principal the asset was issued to
        descriptor: Raw or structured descriptor
        created_at: Timestamp when issued
        updated_at: Timestamp of the last descriptor change
    """
    token_id: int
    holder: str
    descriptor: Descriptor
    created_at: float = field(default_factory=time.time)
    updated_at: Optional[float] = None

    @property
    def uri(self) -> str:
        """Descriptor as a URI (structured descriptors are encoded)."""
        return self.descriptor.resolve()

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "token_id": self.token_id,
            "holder": self.holder,
            "descriptor": self.descriptor.to_dict(),
            "created_at": self.created_at,
        }
        if self.updated_at:
            data["updated_at"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Asset":
        return cls(
            token_id=data["token_id"],
            holder=data["holder"],
            descriptor=descriptor_from_dict(data["descriptor"]),
            created_at=data.get("created_at", time.time()),
            updated_at=data.get("updated_at"),
        )


class AssetRegistry:
    """
    Issues assets and guards descriptor mutation.

    Minting goes through the fee gate, using the admin from access control,
    the exemption list and the treasury fee; paid value is credited to the
    treasury.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        access: AccessControl,
        exemptions: ExemptionRegistry,
        treasury: Treasury,
        emit: EmitFn,
    ):
        self.name = name
        self.symbol = symbol
        self.access = access
        self.exemptions = exemptions
        self.treasury = treasury
        self._emit = emit
        self.next_id = 1
        self._assets: Dict[int, Asset] = {}

    def _issue(self, holder: str, descriptor) -> int:
        """Assign the next id to a new asset, without any fee check."""
        descriptor = as_descriptor(descriptor)
        token_id = self.next_id
        self.next_id += 1
        self._assets[token_id] = Asset(token_id=token_id, holder=holder, descriptor=descriptor)
        logger.debug(f"Issued asset {token_id} to {holder} ({descriptor.kind})")
        self._emit(Event.minted(holder, token_id))
        return token_id

    def issue_initial(self, initializer: str, uri: str) -> int:
        """Fee-free first mint performed at initialization."""
        if not isinstance(uri, str):
            raise TypeError("Initial descriptor must be a string")
        return self._issue(initializer, uri)

    def mint(self, caller: str, descriptor, attached_value: int = 0) -> int:
        """
        Mint a new asset to the caller.

        Args:
            caller: Principal minting (becomes the holder)
            descriptor: URI string, Metadata, or metadata dict
            attached_value: Value sent along with the mint

        Returns:
            The new asset id

        Raises:
            InvalidFee: value below the fee, caller neither admin nor exempt
        """
        descriptor = as_descriptor(descriptor)
        fees.check(
            caller,
            self.access.admin,
            self.treasury.fee,
            self.exemptions,
            attached_value,
        )
        token_id = self._issue(caller, descriptor)
        if attached_value:
            self.treasury.credit(attached_value)
        return token_id

    def get(self, token_id: int) -> Asset:
        """Get an asset, raising NotFound if the id is unassigned."""
        asset = self._assets.get(token_id)
        if asset is None:
            raise NotFound(f"asset {token_id} does not exist")
        return asset

    def owner_of(self, token_id: int) -> str:
        return self.get(token_id).holder

    def uri_of(self, token_id: int) -> str:
        return self.get(token_id).uri

    def descriptor_of(self, token_id: int) -> Descriptor:
        return self.get(token_id).descriptor

    def metadata_of(self, token_id: int) -> Optional[Metadata]:
        """Structured metadata of an asset, None if its descriptor is raw."""
        return metadata_from_descriptor(self.get(token_id).descriptor)

    def update_descriptor(self, caller: str, token_id: int, descriptor) -> None:
        """
        Replace an asset's descriptor, holder only.

        Raises:
            NotFound: id unassigned
            NotTokenOwner: caller is not the holder
        """
        asset = self.get(token_id)
        if caller != asset.holder:
            raise NotTokenOwner(f"caller is not the holder of asset {token_id}")
        asset.descriptor = as_descriptor(descriptor)
        asset.updated_at = time.time()
        logger.debug(f"Descriptor of asset {token_id} updated ({asset.descriptor.kind})")
        self._emit(Event.descriptor_updated(caller, token_id))

    def tokens_of(self, holder: str) -> List[int]:
        """Ids of all assets issued to a holder, ascending."""
        return [a.token_id for a in self._assets.values() if a.holder == holder]

    def list(self) -> List[Asset]:
        """List all assets in id order."""
        return [self._assets[i] for i in sorted(self._assets)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "next_id": self.next_id,
            "assets": [a.to_dict() for a in self.list()],
        }

    def load_dict(self, data: Dict[str, Any]) -> None:
        self.name = data["name"]
        self.symbol = data["symbol"]
        self.next_id = data["next_id"]
        self._assets = {}
        for asset_data in data.get("assets", []):
            asset = Asset.from_dict(asset_data)
            self._assets[asset.token_id] = asset

    def __contains__(self, token_id: int) -> bool:
        return token_id in self._assets

    def __len__(self) -> int:
        return len(self._assets)

    def __iter__(self) -> Iterator[Asset]:
        return iter(self.list())
