# PURPOSE: Pluggable serializers for structured session values (dicts, lists, ...).
# CONTEXT: The value codec prefixes their output with "__SERIALIZED__:" before it
#          is written to DynamoDB. Any object with serialize()/deserialize() works.

from __future__ import annotations
import json
from typing import Any, Dict, Mapping


class JSONSerializer:
    """
    Compact JSON serializer (the default).

    parameters:
    - sort_keys: bool – emit object keys in sorted order (stable output).
    - ensure_ascii: bool – escape non-ASCII characters.
    """

    name = "JSON"

    def __init__(self, sort_keys: bool = False, ensure_ascii: bool = False):
        self.sort_keys = sort_keys
        self.ensure_ascii = ensure_ascii

    def serialize(self, obj: Any) -> str:
        return json.dumps(
            obj,
            separators=(",", ":"),
            sort_keys=self.sort_keys,
            ensure_ascii=self.ensure_ascii,
        )

    def deserialize(self, raw: str) -> Any:
        return json.loads(raw)


# Registered serializer names (case-insensitive lookups).
SERIALIZERS: Dict[str, type] = {
    "json": JSONSerializer,
}


def build_serializer(option: Any = "JSON"):
    """
    Resolve a serializer from a name, a config mapping, or a ready instance.

    parameters:
    - option: str | dict | object – "JSON", {"name": "JSON", "options": {...}},
      or anything exposing serialize()/deserialize().

    returns:
    - object – a serializer instance.

    raises:
    - ValueError – unknown serializer name.
    - TypeError – option is none of the accepted shapes.
    """
    if hasattr(option, "serialize") and hasattr(option, "deserialize"):
        return option

    if isinstance(option, Mapping):
        options = dict(option.get("options") or {})
        return _lookup(option.get("name", "JSON"))(**options)

    if isinstance(option, str):
        return _lookup(option)()

    raise TypeError(f"Cannot build a serializer from {type(option).__name__}")


def _lookup(name: str) -> type:
    try:
        return SERIALIZERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown serializer: {name!r}") from None


__all__ = ["JSONSerializer", "SERIALIZERS", "build_serializer"]
