# tokenmint/metadata.py
"""
Asset descriptors and the metadata codec.

A descriptor is either a raw string stored verbatim or a structured
metadata record. Structured records are encoded at write time into a
self-contained data URI:

    data:application/json;base64,<base64 of the JSON text>

The JSON keys are always written in the same order (description, image,
name, attributes) so the encoded form is canonical for a given record.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

DATA_URI_PREFIX = "data:application/json;base64,"

METADATA_FIELDS = ("description", "image", "name", "attributes")


@dataclass(frozen=True)
class Attribute:
    """A single trait of an asset."""
    trait_type: str
    value: str

    def __post_init__(self):
        for name in ("trait_type", "value"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"Attribute {name} must be a string, got {getattr(self, name)!r}")

    def to_dict(self) -> Dict[str, str]:
        return {"trait_type": self.trait_type, "value": self.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Attribute":
        return cls(trait_type=data["trait_type"], value=data["value"])


@dataclass(frozen=True)
class Metadata:
    """
    Structured descriptor of an asset.

    Attributes:
        description: Free text description
        image: Image location (URL or any string)
        name: Display name
        attributes: Ordered traits, may be empty
    """
    description: str
    image: str
    name: str
    attributes: tuple = field(default_factory=tuple)

    def __post_init__(self):
        for name in ("description", "image", "name"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"Metadata {name} must be a string, got {getattr(self, name)!r}")
        # Accept any sequence of Attribute or dicts, store as a tuple
        attributes = tuple(
            a if isinstance(a, Attribute) else Attribute.from_dict(a)
            for a in self.attributes
        )
        object.__setattr__(self, "attributes", attributes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "image": self.image,
            "name": self.name,
            "attributes": [a.to_dict() for a in self.attributes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Metadata":
        missing = [k for k in METADATA_FIELDS if k not in data]
        if missing:
            raise ValueError(f"Metadata missing fields: {', '.join(missing)}")
        return cls(
            description=data["description"],
            image=data["image"],
            name=data["name"],
            attributes=tuple(Attribute.from_dict(a) for a in data["attributes"]),
        )


def encode(metadata: Metadata) -> str:
    """
    Encode metadata to its data URI form.

    Args:
        metadata: The record to encode

    Returns:
        "data:application/json;base64," followed by the base64 JSON text
    """
    json_str = json.dumps(metadata.to_dict(), separators=(",", ":"), ensure_ascii=False)
    encoded = base64.b64encode(json_str.encode("utf-8")).decode("ascii")
    return DATA_URI_PREFIX + encoded


def decode(uri: str) -> Metadata:
    """
    Decode a data URI produced by encode() back into Metadata.

    Raises:
        ValueError: If the string is not an encoded metadata record
    """
    if not uri.startswith(DATA_URI_PREFIX):
        raise ValueError("Not an encoded metadata URI")
    payload = uri[len(DATA_URI_PREFIX):]
    try:
        json_str = base64.b64decode(payload, validate=True).decode("utf-8")
        data = json.loads(json_str)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Malformed metadata URI: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Metadata payload is not a JSON object")
    try:
        return Metadata.from_dict(data)
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed metadata attributes: {e}") from e


def is_encoded(uri: str) -> bool:
    """Check if a URI carries encoded metadata."""
    return uri.startswith(DATA_URI_PREFIX)


@dataclass(frozen=True)
class RawDescriptor:
    """Opaque string descriptor, stored and returned verbatim."""
    uri: str

    @property
    def kind(self) -> str:
        return "raw"

    def resolve(self) -> str:
        return self.uri

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "raw", "uri": self.uri}


@dataclass(frozen=True)
class StructuredDescriptor:
    """Metadata descriptor, encoded when resolved to a URI."""
    metadata: Metadata

    @property
    def kind(self) -> str:
        return "structured"

    def resolve(self) -> str:
        return encode(self.metadata)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": "structured", "metadata": self.metadata.to_dict()}


Descriptor = Union[RawDescriptor, StructuredDescriptor]


def descriptor_from_dict(data: Dict[str, Any]) -> Descriptor:
    """Rebuild a descriptor from its to_dict() form."""
    kind = data.get("kind")
    if kind == "raw":
        return RawDescriptor(data["uri"])
    if kind == "structured":
        return StructuredDescriptor(Metadata.from_dict(data["metadata"]))
    raise ValueError(f"Unknown descriptor kind: {kind}")


def as_descriptor(value: Union[str, Metadata, Dict[str, Any], RawDescriptor, StructuredDescriptor]) -> Descriptor:
    """
    Coerce caller input into a descriptor variant.

    Strings become raw descriptors; Metadata instances and metadata dicts
    become structured descriptors. Existing descriptors pass through.
    """
    if isinstance(value, (RawDescriptor, StructuredDescriptor)):
        return value
    if isinstance(value, str):
        return RawDescriptor(value)
    if isinstance(value, Metadata):
        return StructuredDescriptor(value)
    if isinstance(value, dict):
        return StructuredDescriptor(Metadata.from_dict(value))
    raise TypeError(f"Cannot use {type(value).__name__} as a descriptor")


def metadata_from_descriptor(descriptor: Descriptor) -> Optional[Metadata]:
    """Return the structured metadata of a descriptor, or None for raw ones."""
    if isinstance(descriptor, StructuredDescriptor):
        return descriptor.metadata
    return None


def metadata_from_attributes(description: str, image: str, name: str,
                             attributes: Optional[List[Dict[str, str]]] = None) -> Metadata:
    """Convenience constructor from plain values."""
    return Metadata(
        description=description,
        image=image,
        name=name,
        attributes=tuple(Attribute.from_dict(a) for a in (attributes or [])),
    )
