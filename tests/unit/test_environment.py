"""Tests for the MDIO Variable environment configuration."""

import os
from unittest.mock import patch

import pytest

from mdio_variable.core.config import MDIOVariableSettings
from mdio_variable.core.config import cloud_drivers
from mdio_variable.core.config import ignore_checks
from mdio_variable.exceptions import EnvironmentFormatError


class TestEnvironment:
    """Test the environment configuration functions."""

    def test_defaults(self) -> None:
        """Defaults apply when nothing is set."""
        with patch.dict(os.environ, {}, clear=True):
            assert cloud_drivers() == ["gcs", "s3"]
            assert ignore_checks() is False

    def test_cloud_drivers_override(self) -> None:
        """The cloud driver list is read as JSON."""
        with patch.dict(os.environ, {"MDIO__VARIABLE__CLOUD_DRIVERS": '["gcs"]'}):
            assert MDIOVariableSettings().cloud_drivers == ["gcs"]
            assert cloud_drivers() == ["gcs"]

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1", True), ("true", True), ("YES", True), ("on", True), ("0", False), ("false", False), ("", False)],
    )
    def test_ignore_checks(self, value: str, expected: bool) -> None:
        """Booleans are parsed leniently."""
        with patch.dict(os.environ, {"MDIO_IGNORE_CHECKS": value}):
            assert ignore_checks() is expected

    def test_invalid_cloud_drivers(self) -> None:
        """Unparsable values raise a format error."""
        with (
            patch.dict(os.environ, {"MDIO__VARIABLE__CLOUD_DRIVERS": "not-json"}),
            pytest.raises(EnvironmentFormatError, match="MDIO__VARIABLE__CLOUD_DRIVERS"),
        ):
            cloud_drivers()

    def test_environment_isolation(self) -> None:
        """Test that environment changes don't affect other tests."""
        original = MDIOVariableSettings().ignore_checks

        with patch.dict(os.environ, {"MDIO_IGNORE_CHECKS": "true"}):
            assert MDIOVariableSettings().ignore_checks is True

        assert MDIOVariableSettings().ignore_checks == original
