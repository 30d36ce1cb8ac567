"""Metadata schemas and conventions."""

from __future__ import annotations

from typing import Any
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError

from mdio_variable.exceptions import InvalidArgumentError
from mdio_variable.schemas.core import CamelCaseStrictModel
from mdio_variable.schemas.stats import SummaryStatistics


class UserAttributes(CamelCaseStrictModel):
    """User defined attributes and optional statistics of a Variable.

    Instances are treated as immutable values: an update always builds a new instance.
    """

    model_config = ConfigDict(frozen=True, validate_assignment=False)

    attributes: dict[str, Any] | None = Field(
        default=None,
        description="User defined attributes as key/value pairs.",
    )
    stats_v1: SummaryStatistics | list[SummaryStatistics] | None = Field(
        default=None,
        alias="statsV1",
        description="Minimal summary statistics.",
    )

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> UserAttributes:
        """Validate a JSON payload into a new `UserAttributes`.

        Args:
            payload: Object with optional ``attributes`` and ``statsV1`` keys.

        Returns:
            The validated attributes.

        Raises:
            InvalidArgumentError: If the payload doesn't match the schema.
        """
        if not isinstance(payload, dict):
            msg = f"User attributes must be a JSON object, got {type(payload).__name__}"
            raise InvalidArgumentError(msg)
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            msg = f"Invalid user attributes: {e}"
            raise InvalidArgumentError(msg) from e

    @classmethod
    def from_variable_json(cls, spec: dict[str, Any]) -> UserAttributes:
        """Extract user attributes from a Variable's metadata document.

        The document may be wrapped in an ``attributes`` section. The mutable keys are
        looked up at the top level and inside the ``metadata`` sub-document, the latter
        taking precedence.
        """
        document = spec
        if isinstance(document.get("attributes"), dict) and "variable_name" in document["attributes"]:
            document = document["attributes"]

        payload = {}
        nested = document.get("metadata")
        for source in (document, nested if isinstance(nested, dict) else {}):
            for key in ("attributes", "statsV1"):
                if source.get(key) is not None:
                    payload[key] = source[key]
        return cls.from_json(payload)

    def to_json(self) -> dict[str, Any]:
        """JSON form, without unset fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class KvStoreSpec(BaseModel):
    """Key-value store part of a Variable's engine spec."""

    model_config = ConfigDict(extra="allow", frozen=True)

    driver: Literal["file", "memory", "gcs", "s3"] = Field(..., description="Key-value backend.")
    path: str = Field(default="", description="Path of the array within the backend.")
    bucket: str | None = Field(default=None, description="Bucket name for object stores.")
    storage_options: dict[str, Any] | None = Field(default=None, description="Options for fsspec backends.")

    @property
    def name(self) -> str:
        """Final path component."""
        return self.path.rstrip("/").split("/")[-1]
