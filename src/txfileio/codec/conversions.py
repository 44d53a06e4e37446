"""Conversions between in-memory objects and JSON, BSON, XML and CSV.

The codec is stateless apart from its settings. Objects may be plain
Python data, dataclasses, or Pydantic models; decoding returns plain data
unless a target type is supplied, in which case the result is validated
with a Pydantic TypeAdapter.
"""

from __future__ import annotations

import csv
import dataclasses
import io
import json
import xml.etree.ElementTree as ET
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

import bson
from bson.errors import BSONError
from pydantic import BaseModel, TypeAdapter, ValidationError

from txfileio.codec.settings import CsvSettings, JsonSettings, XmlSettings
from txfileio.core.errors import CodecError

# BSON documents must be mappings; other top-level values are wrapped.
_BSON_WRAPPER_KEY = "__value__"


def to_plain(item: Any) -> Any:
    """Convert models and dataclasses into JSON-compatible Python data."""
    if isinstance(item, BaseModel):
        return item.model_dump(mode="json")
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return to_plain(dataclasses.asdict(item))
    if isinstance(item, Mapping):
        return {str(key): to_plain(value) for key, value in item.items()}
    if isinstance(item, (list, tuple, set, frozenset)):
        return [to_plain(value) for value in item]
    if isinstance(item, Path):
        return str(item)
    if isinstance(item, (datetime, date)):
        return item.isoformat()
    return item


def _validate(data: Any, model: Any, format: str) -> Any:
    if model is None:
        return data
    try:
        return TypeAdapter(model).validate_python(data)
    except ValidationError as e:
        raise CodecError(format, f"validation failed: {e}") from e


class Conversions:
    """Serializes objects to, and deserializes them from, supported formats."""

    def __init__(
        self,
        json_settings: JsonSettings | None = None,
        csv_settings: CsvSettings | None = None,
        xml_settings: XmlSettings | None = None,
    ) -> None:
        self.json_settings = json_settings or JsonSettings()
        self.csv_settings = csv_settings or CsvSettings()
        self.xml_settings = xml_settings or XmlSettings()

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    def to_json(self, item: Any) -> str:
        """Serialize an object to a JSON string."""
        try:
            return json.dumps(
                to_plain(item),
                indent=self.json_settings.indent,
                sort_keys=self.json_settings.sort_keys,
                ensure_ascii=self.json_settings.ensure_ascii,
            )
        except (TypeError, ValueError) as e:
            raise CodecError("json", str(e)) from e

    def from_json(self, data: str | bytes, model: Any = None) -> Any:
        """Deserialize a JSON string, optionally validating into ``model``."""
        try:
            decoded = json.loads(data)
        except ValueError as e:
            raise CodecError("json", str(e)) from e
        return _validate(decoded, model, "json")

    # ------------------------------------------------------------------
    # BSON
    # ------------------------------------------------------------------

    def to_bson(self, item: Any) -> bytes:
        """Serialize an object to BSON bytes.

        Non-mapping values are stored under a wrapper key and unwrapped again
        by from_bson().
        """
        plain = to_plain(item)
        if not isinstance(plain, Mapping):
            plain = {_BSON_WRAPPER_KEY: plain}
        try:
            return bson.encode(plain)
        except (BSONError, TypeError, ValueError) as e:
            raise CodecError("bson", str(e)) from e

    def from_bson(self, data: bytes, model: Any = None) -> Any:
        """Deserialize BSON bytes, optionally validating into ``model``."""
        try:
            decoded: Any = bson.decode(data)
        except (BSONError, TypeError, ValueError) as e:
            raise CodecError("bson", str(e)) from e

        if set(decoded) == {_BSON_WRAPPER_KEY}:
            decoded = decoded[_BSON_WRAPPER_KEY]
        return _validate(decoded, model, "bson")

    # ------------------------------------------------------------------
    # XML
    # ------------------------------------------------------------------

    def to_xml(self, item: Any, root_tag: str | None = None) -> str:
        """Serialize an object to an XML string.

        Mappings become child elements, sequences become repeated item
        elements, and None is marked with ``nil="true"``.

        Args:
            item: Object to serialize
            root_tag: Root element name; defaults to the model or dataclass
                name, then to the configured root tag
        """
        if root_tag is None:
            if isinstance(item, BaseModel) or (
                dataclasses.is_dataclass(item) and not isinstance(item, type)
            ):
                root_tag = type(item).__name__
            else:
                root_tag = self.xml_settings.root_tag

        root = ET.Element(root_tag)
        try:
            self._fill_element(root, to_plain(item))
            body = ET.tostring(root, encoding="unicode")
        except (TypeError, ValueError) as e:
            raise CodecError("xml", str(e)) from e

        if self.xml_settings.xml_declaration:
            return '<?xml version="1.0" encoding="utf-8"?>\n' + body
        return body

    def from_xml(self, data: str | bytes, model: Any = None) -> Any:
        """Deserialize an XML string produced by to_xml().

        Leaf values come back as strings; pass ``model`` to coerce them.
        """
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise CodecError("xml", str(e)) from e
        return _validate(self._read_element(root), model, "xml")

    def _fill_element(self, element: ET.Element, value: Any) -> None:
        if isinstance(value, Mapping):
            element.set("type", "dict")
            for key, child_value in value.items():
                child = ET.SubElement(element, str(key))
                self._fill_element(child, child_value)
        elif isinstance(value, list):
            element.set("type", "list")
            for child_value in value:
                child = ET.SubElement(element, self.xml_settings.item_tag)
                self._fill_element(child, child_value)
        elif value is None:
            element.set("nil", "true")
        elif isinstance(value, bool):
            element.text = "true" if value else "false"
        else:
            element.text = str(value)

    def _read_element(self, element: ET.Element) -> Any:
        kind = element.get("type")
        if kind == "dict":
            return {child.tag: self._read_element(child) for child in element}
        if kind == "list":
            return [self._read_element(child) for child in element]
        if element.get("nil") == "true":
            return None
        return element.text or ""

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    def to_csv(self, items: Iterable[Any]) -> str:
        """Serialize records to CSV text with a header row.

        Columns are the keys of the first record, followed by keys first
        seen in later records.
        """
        rows = [to_plain(item) for item in items]
        if not rows:
            return ""

        fieldnames: list[str] = []
        for row in rows:
            if not isinstance(row, Mapping):
                raise CodecError("csv", f"record is not a mapping: {row!r}")
            for key in row:
                if key not in fieldnames:
                    fieldnames.append(key)

        buffer = io.StringIO()
        writer = csv.DictWriter(
            buffer,
            fieldnames=fieldnames,
            delimiter=self.csv_settings.delimiter,
            quotechar=self.csv_settings.quotechar,
            lineterminator=self.csv_settings.lineterminator,
        )
        writer.writeheader()
        writer.writerows(rows)
        return buffer.getvalue()

    def from_csv(self, data: str, model: Any = None) -> list[Any]:
        """Deserialize CSV text into records.

        Args:
            data: CSV text with a header row
            model: Optional record type; every row is validated into it

        Returns:
            List of dicts, or of ``model`` instances
        """
        reader = csv.DictReader(
            io.StringIO(data),
            delimiter=self.csv_settings.delimiter,
            quotechar=self.csv_settings.quotechar,
        )
        try:
            rows = list(reader)
        except csv.Error as e:
            raise CodecError("csv", str(e)) from e

        if model is None:
            return rows
        return _validate(rows, list[model], "csv")

    # ------------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------------

    def deep_clone(self, item: Any) -> Any:
        """Deep copy an object by round-tripping it through a codec.

        Pydantic models go through JSON and are re-validated into their own
        type; everything else goes through BSON.
        """
        if isinstance(item, BaseModel):
            return self.from_json(self.to_json(item), model=type(item))
        return self.from_bson(self.to_bson(item))
