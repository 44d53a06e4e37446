"""Format codec: JSON, BSON, XML and CSV conversions plus their settings."""

from txfileio.codec.conversions import Conversions, to_plain
from txfileio.codec.settings import CsvSettings, IOSettings, JsonSettings, XmlSettings

__all__ = [
    "Conversions",
    "CsvSettings",
    "IOSettings",
    "JsonSettings",
    "XmlSettings",
    "to_plain",
]
