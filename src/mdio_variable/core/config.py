"""Environment variable management for MDIO Variable operations."""

from __future__ import annotations

from pydantic import Field
from pydantic import ValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsError
from pydantic_settings import SettingsConfigDict

from mdio_variable.constants import DEFAULT_CLOUD_DRIVERS
from mdio_variable.exceptions import EnvironmentFormatError


class MDIOVariableSettings(BaseSettings):
    """MDIO Variable environment configuration settings."""

    cloud_drivers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CLOUD_DRIVERS),
        description="Key-value drivers that address objects without a leading separator",
        alias="MDIO__VARIABLE__CLOUD_DRIVERS",
    )
    ignore_checks: bool = Field(
        default=False,
        description="Whether to skip the attribute conformance check when opening",
        alias="MDIO_IGNORE_CHECKS",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=True,
    )

    @field_validator("ignore_checks", mode="before")
    @classmethod
    def parse_bool_fields(cls, v: object) -> bool:
        """Parse boolean fields leniently."""
        if v is None:
            return False
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes", "on")
        return bool(v)


def _get_settings() -> MDIOVariableSettings:
    """Get current MDIO Variable settings from environment variables."""
    # Only the driver list can fail to parse, booleans are read leniently.
    try:
        return MDIOVariableSettings()
    except (ValidationError, SettingsError) as e:
        raise EnvironmentFormatError("MDIO__VARIABLE__CLOUD_DRIVERS", "list[str]") from e


def cloud_drivers() -> list[str]:
    """Key-value drivers treated as object stores."""
    return _get_settings().cloud_drivers


def ignore_checks() -> bool:
    """Whether to skip the attribute conformance check."""
    return _get_settings().ignore_checks
