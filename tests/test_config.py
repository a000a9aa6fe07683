# tests/test_config.py
"""Tests for YAML configuration."""

import tempfile
from pathlib import Path

import pytest

from tokenmint.config import DEFAULT_DATA_DIR, RegistryConfig


class TestRegistryConfig:
    """Test RegistryConfig."""

    def test_from_yaml(self):
        config = RegistryConfig.from_yaml(
            "name: Yoink\n"
            "symbol: YNK\n"
            "fee: 10000000000000000\n"
            "first_descriptor: https://wwww.testing.com\n"
            "registry_address: '0xabc'\n"
            "log_level: info\n"
        )
        assert config.name == "Yoink"
        assert config.symbol == "YNK"
        assert config.fee == 10 ** 16
        assert config.first_descriptor == "https://wwww.testing.com"
        assert config.registry_address == "0xabc"
        assert config.log_level == "info"

    def test_defaults(self):
        config = RegistryConfig.from_yaml("")
        assert config.name == ""
        assert config.symbol == ""
        assert config.fee == 0
        assert config.first_descriptor == ""
        assert config.registry_address is None
        assert config.data_path == Path(DEFAULT_DATA_DIR)

    def test_negative_fee(self):
        with pytest.raises(ValueError):
            RegistryConfig.from_yaml("fee: -1")

    def test_non_integer_fee(self):
        with pytest.raises(ValueError):
            RegistryConfig.from_yaml("fee: 0.5")

    def test_unquoted_hex_address(self):
        """YAML reads bare 0x... as an integer."""
        with pytest.raises(ValueError):
            RegistryConfig.from_yaml("registry_address: 0x1234")

    def test_unknown_log_level(self):
        with pytest.raises(ValueError):
            RegistryConfig.from_yaml("log_level: chatty")

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            RegistryConfig.from_yaml("- a\n- b\n")

    def test_from_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "registry.yaml"
            path.write_text("name: Yoink\nsymbol: YNK\ndata_dir: /tmp/ynk\n")
            config = RegistryConfig.from_file(path)
        assert config.name == "Yoink"
        assert config.data_path == Path("/tmp/ynk")
