# tokenmint/config.py
"""
Registry configuration.

Loaded from YAML:

    name: Yoink
    symbol: YNK
    fee: 10000000000000000
    first_descriptor: https://example.com/1.json
    registry_address: "0x..."      # optional, derived when omitted; quote it
    data_dir: .tokenmint           # optional
    log_level: INFO                # optional
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_DATA_DIR = ".tokenmint"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass
class RegistryConfig:
    """Initialization parameters plus local settings."""
    name: str = ""
    symbol: str = ""
    fee: int = 0
    first_descriptor: str = ""
    registry_address: Optional[str] = None
    data_dir: str = DEFAULT_DATA_DIR
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self):
        if not isinstance(self.fee, int) or isinstance(self.fee, bool):
            raise ValueError(f"Fee must be an integer, got {self.fee!r}")
        if self.fee < 0:
            raise ValueError(f"Fee cannot be negative: {self.fee}")
        if logging.getLevelName(self.log_level.upper()) == f"Level {self.log_level.upper()}":
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistryConfig":
        registry_address = data.get("registry_address")
        if registry_address is not None and not isinstance(registry_address, str):
            raise ValueError("registry_address must be a quoted string")
        return cls(
            name=str(data.get("name") or ""),
            symbol=str(data.get("symbol") or ""),
            fee=data.get("fee", 0),
            first_descriptor=str(data.get("first_descriptor") or ""),
            registry_address=registry_address,
            data_dir=str(data.get("data_dir", DEFAULT_DATA_DIR)),
            log_level=str(data.get("log_level", DEFAULT_LOG_LEVEL)),
        )

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "RegistryConfig":
        """Parse config from YAML string."""
        data = yaml.safe_load(yaml_content) or {}
        if not isinstance(data, dict):
            raise ValueError("Config must be a YAML mapping")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Path | str) -> "RegistryConfig":
        """Load config from YAML file."""
        with open(path, "r") as f:
            return cls.from_yaml(f.read())
