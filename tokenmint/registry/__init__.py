# tokenmint/registry/__init__.py
"""
Token registry.

The registry issues sequentially numbered assets and stores a descriptor
per asset. Descriptors are either raw URIs or structured metadata.

Example:
    registry = AssetRegistry("Yoink", "YNK", access, exemptions, treasury, emit)
    token_id = registry.mint("0xabc...", "https://example.com/1.json", attached_value=10)
    registry.uri_of(token_id)
"""

from .registry import AssetRegistry, Asset

__all__ = ["AssetRegistry", "Asset"]
