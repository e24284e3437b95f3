"""
Record mapper: SessionRecord <-> flat DynamoDB item.

PURPOSE:
- Build the item written by put_item (key column, expiration column, data
  columns) and take a fetched item apart again, applying the value codec per
  field.
- Flag rows whose expiration has passed so the caller can delete them.

CONTEXT:
- Two table layouts are supported, chosen by StoreConfig.data_field:
  * data_field is None (default): one attribute per session field.
  * data_field is set: the whole field mapping is serialized into that single
    attribute.
- Session field names must not equal the key or expiration column names.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .codec import decode_value, encode_value


@dataclass
class SessionRecord:
    """
    The unit of persistence.

    attributes:
    - key: str – stringified session key (id plus optional namespace).
    - fields: dict – session data, field name -> value.
    - expires_at: int | None – absolute epoch seconds; None/0 means never.
    """
    key: str
    fields: Dict[str, Any] = field(default_factory=dict)
    expires_at: Optional[int] = None


class _Expired:
    """Marker returned by from_item() for a row past its expiration."""

    def __repr__(self) -> str:
        return "EXPIRED"

    def __bool__(self) -> bool:
        return False


EXPIRED = _Expired()

FromItemResult = Union[None, _Expired, Tuple[SessionRecord, Optional[int]]]


def to_item(record: SessionRecord, config, serializer) -> Dict[str, Any]:
    """
    Flatten a SessionRecord into a DynamoDB item.

    parameters:
    - record: SessionRecord – what to store.
    - config: StoreConfig – supplies key/expiration/data column names.
    - serializer: object – used for structured values (or the whole payload).

    returns:
    - dict – item ready for put_item(); the expiration column is omitted when
      the record never expires.
    """
    item: Dict[str, Any] = {config.key_field: record.key}
    if record.expires_at:
        item[config.expiration_field] = int(record.expires_at)

    if config.data_field:
        item[config.data_field] = serializer.serialize(record.fields)
        return item

    for name, value in record.fields.items():
        item[name] = encode_value(value, serializer)
    return item


def from_item(
    item: Optional[Mapping[str, Any]],
    config,
    serializer,
    now: float,
) -> FromItemResult:
    """
    Rebuild a SessionRecord from a fetched item.

    parameters:
    - item: dict | None – raw row from get_item(); None when no row exists.
    - config: StoreConfig – column names.
    - serializer: object – for structured values.
    - now: float – current epoch seconds.

    returns:
    - None – no row (or, in the data-column layout, a row without data).
    - EXPIRED – the expiration is set and strictly earlier than `now`.
    - (SessionRecord, expires_at) – otherwise.
    """
    if not item:
        return None

    data = dict(item)
    expiration = data.pop(config.expiration_field, None)
    key = data.pop(config.key_field, None)

    if expiration and expiration < now:
        return EXPIRED

    expires_at = int(expiration) if expiration else None

    if config.data_field:
        raw = data.get(config.data_field)
        if raw is None:
            return None
        fields = serializer.deserialize(raw)
    else:
        fields = {name: decode_value(value, serializer) for name, value in data.items()}

    return SessionRecord(key=key, fields=fields, expires_at=expires_at), expires_at


__all__ = ["SessionRecord", "EXPIRED", "to_item", "from_item"]
