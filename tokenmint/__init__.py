# tokenmint - Fee-gated asset registry with a single admin
#
# Issues sequentially numbered assets to callers and stores a mutable
# descriptor per asset. Minting is gated by a fee that the admin and
# exempt principals skip; collected fees are withdrawn by the admin.
#
# Core concepts:
# - TokenRegistry: The state object; every mutation is atomic
# - Descriptor: A raw URI or structured Metadata, encoded as a data URI
# - Event: A notification committed to the EventLog per state change
# - Account/Call: Key-backed principals and signed operation requests

from .errors import (
    RegistryError,
    AccessDenied,
    NotTokenOwner,
    InvalidFee,
    NotFound,
    NoFunds,
    InvalidSignature,
    AlreadyInitialized,
)
from .metadata import Attribute, Metadata, RawDescriptor, StructuredDescriptor, encode, decode
from .events import Event, EventLog
from .access import AccessControl
from .exemptions import ExemptionRegistry
from .treasury import Treasury
from .registry import AssetRegistry, Asset
from .contract import TokenRegistry
from .store import StateStore
from .config import RegistryConfig

__all__ = [
    # Errors
    "RegistryError",
    "AccessDenied",
    "NotTokenOwner",
    "InvalidFee",
    "NotFound",
    "NoFunds",
    "InvalidSignature",
    "AlreadyInitialized",
    # Descriptors
    "Attribute",
    "Metadata",
    "RawDescriptor",
    "StructuredDescriptor",
    "encode",
    "decode",
    # Core
    "Event",
    "EventLog",
    "AccessControl",
    "ExemptionRegistry",
    "Treasury",
    "AssetRegistry",
    "Asset",
    "TokenRegistry",
    "StateStore",
    "RegistryConfig",
]

__version__ = "0.1.0"
