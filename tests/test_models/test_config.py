"""Tests for scan configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from localscan.exceptions import ConfigurationError
from localscan.models.config import DEFAULT_HISTORY_PATH, ScanConfig


class TestScanConfigDefaults:
    """Tests for default values."""

    def test_defaults(self):
        """Test default values are applied."""
        config = ScanConfig()
        assert config.interface is None
        assert config.timeout_ms == 500
        assert config.workers == 100
        assert config.output_format == "table"
        assert config.output is None
        assert config.diff is False
        assert config.history_path == DEFAULT_HISTORY_PATH

    def test_default_history_location(self):
        """History lives under ~/.localscan by default."""
        assert DEFAULT_HISTORY_PATH.name == "last.json"
        assert DEFAULT_HISTORY_PATH.parent.name == ".localscan"

    def test_timeout_in_seconds(self):
        config = ScanConfig(timeout_ms=250)
        assert config.timeout == 0.25

    def test_blank_interface_means_auto(self):
        """Test that an empty interface name is treated as auto-detect."""
        assert ScanConfig(interface="").interface is None
        assert ScanConfig(interface="  ").interface is None
        assert ScanConfig(interface="eth0").interface == "eth0"


class TestScanConfigValidation:
    """Tests for field validation."""

    @pytest.mark.parametrize("fmt", ["table", "json", "csv"])
    def test_valid_formats(self, fmt):
        assert ScanConfig(output_format=fmt).output_format == fmt

    def test_unknown_format(self):
        """Test that unknown output formats are rejected."""
        with pytest.raises(ValidationError):
            ScanConfig(output_format="xml")

    def test_zero_workers(self):
        with pytest.raises(ValidationError):
            ScanConfig(workers=0)

    def test_negative_timeout(self):
        with pytest.raises(ValidationError):
            ScanConfig(timeout_ms=-1)

    def test_output_path(self, temp_dir):
        config = ScanConfig(output=temp_dir / "out.json")
        assert isinstance(config.output, Path)


class TestFromArgs:
    """Tests for ScanConfig.from_args."""

    def test_valid_args(self):
        config = ScanConfig.from_args(workers=10, timeout_ms=100, output_format="csv")
        assert config.workers == 10
        assert config.output_format == "csv"

    def test_invalid_args_raise_configuration_error(self):
        """Test that validation errors become ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            ScanConfig.from_args(output_format="yaml")
        assert "output_format" in str(exc_info.value)

    def test_all_errors_reported(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ScanConfig.from_args(workers=0, timeout_ms=0)
        message = str(exc_info.value)
        assert "workers" in message
        assert "timeout_ms" in message
