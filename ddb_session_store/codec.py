"""
Value codec for session fields.

PURPOSE:
- Map one session field value onto something DynamoDB can store as a plain
  attribute, and back again.

CONTEXT:
- DynamoDB rejects null and empty-string attribute values and we do not rely on
  its native map/list types, so three sentinels are used:

    None            -> "__UNDEF__"
    ""              -> "__EMPTY__"
    dict/list/...   -> "__SERIALIZED__:" + serializer output
    bool, float     -> "__SERIALIZED__:" + serializer output

  Everything else (non-empty strings, ints) is stored unchanged.

  Example session data and the raw DynamoDB attributes it becomes:

    {"this": "that", "thing": {"goose": 3}, "those": [1, 2, 3],
     "name": "", "age": None, "biography": "    "}

    this: 'that'
    thing: '__SERIALIZED__:{"goose":3}'
    those: '__SERIALIZED__:[1,2,3]'
    name: '__EMPTY__'
    age: '__UNDEF__'
    biography: '    '

- A plain string that already looks like a sentinel is decoded as the sentinel.
  Rows written by earlier versions depend on this exact format, so the
  ambiguity is kept as-is.
"""

from __future__ import annotations
from decimal import Decimal
from typing import Any

UNDEF = "__UNDEF__"
EMPTY = "__EMPTY__"
SERIALIZED_PREFIX = "__SERIALIZED__:"

# Ints at or above this magnitude exceed DynamoDB's 38 digits of number precision.
MAX_NUMBER = 10 ** 38


def is_structured(value: Any) -> bool:
    """
    True for values that have to go through the serializer.

    notes:
    - bool and float are treated as structured so they come back with their
      own type (True, 2.0, nan) instead of a DynamoDB number.
    - ints wider than DynamoDB's 38 digits of precision are serialized too.
    """
    if isinstance(value, (bool, float)):
        return True
    if isinstance(value, int):
        return abs(value) >= MAX_NUMBER
    return not isinstance(value, (str, Decimal))


def encode_value(value: Any, serializer) -> Any:
    """
    Encode a single field value for storage.

    parameters:
    - value: Any – the session field value.
    - serializer: object – provides serialize(obj) -> str.

    returns:
    - str | int | Decimal – never None and never "".
    """
    if value is None:
        return UNDEF
    if is_structured(value):
        return SERIALIZED_PREFIX + serializer.serialize(value)
    if value == "":
        return EMPTY
    return value


def decode_value(raw: Any, serializer) -> Any:
    """
    Decode a stored attribute back to its session value.

    parameters:
    - raw: Any – attribute value as returned by DynamoDB.
    - serializer: object – provides deserialize(str) -> obj.

    returns:
    - Any – the original value (see module notes for the sentinel caveat).
    """
    if isinstance(raw, str):
        if raw.startswith(SERIALIZED_PREFIX):
            return serializer.deserialize(raw[len(SERIALIZED_PREFIX):])
        if raw == UNDEF:
            return None
        if raw == EMPTY:
            return ""
        return raw
    if isinstance(raw, Decimal):
        return _narrow_number(raw)
    return raw


def _narrow_number(num: Decimal) -> Any:
    if num == num.to_integral_value():
        return int(num)
    return float(num)


__all__ = [
    "UNDEF",
    "EMPTY",
    "SERIALIZED_PREFIX",
    "is_structured",
    "encode_value",
    "decode_value",
]
