"""Pydantic settings for the codec and the I/O façade.

Settings are per instance: each FileIO (and each Conversions) holds its
own copies, nothing here is global.
"""

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

from txfileio.core.constants import (
    DEFAULT_BUFFER_SIZE,
    DEFAULT_ROLLBACK_TOLERANCE_MS,
    ENV_BUFFER_SIZE,
    ENV_ROLLBACK_TOLERANCE_MS,
)


class JsonSettings(BaseModel):
    """Options passed to json.dumps."""

    indent: int | None = 2
    sort_keys: bool = False
    ensure_ascii: bool = False


class CsvSettings(BaseModel):
    """Dialect options for csv readers and writers."""

    delimiter: str = ","
    quotechar: str = '"'
    lineterminator: str = "\n"

    @field_validator("delimiter", "quotechar")
    @classmethod
    def validate_single_char(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("must be exactly one character")
        return value


class XmlSettings(BaseModel):
    """Element naming for the XML codec.

    Attributes:
        root_tag: Root element name used when the object has no type name
        item_tag: Element name for list entries
        xml_declaration: Whether to prefix output with an XML declaration
    """

    root_tag: str = "root"
    item_tag: str = "item"
    xml_declaration: bool = True


class IOSettings(BaseModel):
    """Top-level settings for a FileIO instance."""

    json_settings: JsonSettings = Field(default_factory=JsonSettings)
    csv_settings: CsvSettings = Field(default_factory=CsvSettings)
    xml_settings: XmlSettings = Field(default_factory=XmlSettings)
    buffer_size: int = Field(default=DEFAULT_BUFFER_SIZE, gt=0)
    rollback_tolerance_ms: float = Field(default=DEFAULT_ROLLBACK_TOLERANCE_MS, ge=0)

    @classmethod
    def from_env(cls, **overrides: Any) -> "IOSettings":
        """Build settings, reading numeric defaults from the environment.

        Environment:
            TXFILEIO_ROLLBACK_TOLERANCE_MS: Rollback tolerance in milliseconds
            TXFILEIO_BUFFER_SIZE: Default copy chunk size in bytes

        Args:
            **overrides: Explicit values that win over the environment
        """
        values: dict[str, Any] = {}

        tolerance = os.getenv(ENV_ROLLBACK_TOLERANCE_MS)
        if tolerance:
            values["rollback_tolerance_ms"] = tolerance

        buffer_size = os.getenv(ENV_BUFFER_SIZE)
        if buffer_size:
            values["buffer_size"] = buffer_size

        values.update(overrides)
        return cls.model_validate(values)
