"""
DynamoDB session store.

PURPOSE:
- set/get/remove session data in a DynamoDB table with an expiration column.
- Lazily delete expired rows when they are read, and sweep the rest with
  reap_expired().
- Provision the table (create_table_args / create_table).

CONTEXT:
- Every method is one blocking round trip (reap: a scan, then a bulk delete).
  There is no locking or caching; concurrent writers to the same key are
  last-write-wins.
- reap_expired() does not re-check expirations at delete time, so a session
  renewed between the scan and the delete is still removed.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

import structlog
from boto3.dynamodb.conditions import Attr

from .base import SessionStore
from .config import StoreConfig
from .record import EXPIRED, SessionRecord, from_item, to_item
from .serializers import build_serializer
from .tools.dynamodb_tool import DynamoDBClient

log = structlog.get_logger(__name__)


def stringify_key(id: str, namespace: Sequence[str] = (), separator: str = ":") -> str:
    """
    Join namespace parts and the session id into the stored key.

    example:
    >>> stringify_key("abc123", ("app", "user"))
    'app:user:abc123'
    """
    if isinstance(namespace, str):
        namespace = (namespace,)
    return separator.join([*namespace, id])


class DynamoDBStore(SessionStore):
    """
    Session store persisting one row per session.

    parameters:
    - ddb: DynamoDBClient – shared collaborator (see from_config / from_existing_client).
    - config: StoreConfig (optional) – table and column names, read consistency, serializer.
    - clock: callable (optional) – returns epoch seconds; defaults to time.time.
    """

    can_reap_expired = True

    def __init__(
        self,
        ddb: DynamoDBClient,
        config: Optional[StoreConfig] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ddb = ddb
        self.config = config or StoreConfig()
        self.serializer = build_serializer(self.config.serializer)
        self.clock = clock

    @classmethod
    def from_config(cls, params: Optional[Mapping[str, Any]] = None, config: Optional[StoreConfig] = None, **kwargs):
        """Build the store with a fresh boto3 resource created from `params`."""
        return cls(DynamoDBClient.from_config(params), config, **kwargs)

    @classmethod
    def from_existing_client(cls, resource: Any, config: Optional[StoreConfig] = None, **kwargs):
        """Build the store around a DynamoDB resource the host already owns."""
        return cls(DynamoDBClient.from_existing_client(resource), config, **kwargs)

    @property
    def table(self) -> str:
        return self.config.table

    def stringify_key(self, id: str, namespace: Sequence[str] = ()) -> str:
        return stringify_key(id, namespace, self.config.namespace_separator)

    def _key(self, key: str) -> Dict[str, str]:
        return {self.config.key_field: key}

    # -------------------- Lifecycle -------------------- #

    def set(self, id: str, data: Dict[str, Any], expires: int = 0, namespace: Sequence[str] = ()) -> None:
        """
        Write the session, replacing any previous row for the same key.

        parameters:
        - data: dict – session fields (values may be None, "", scalars or structures).
        - expires: int – seconds from now until expiry; 0/None means never.

        raises:
        - DynamoDBStoreError – if put_item fails.
        """
        key = self.stringify_key(id, namespace)
        expires_at = int(self.clock()) + int(expires) if expires else None

        record = SessionRecord(key=key, fields=dict(data), expires_at=expires_at)
        self.ddb.put_item(self.table, to_item(record, self.config, self.serializer))
        log.debug("session.set", table=self.table, key=key, expires_at=expires_at, fields=len(record.fields))

    def get(self, id: str, namespace: Sequence[str] = ()) -> Optional[Dict[str, Any]]:
        """
        Read the session.

        returns:
        - dict – the decoded session fields.
        - None – no row, or the row had expired (it is deleted before returning).

        raises:
        - DynamoDBStoreError – if get_item (or the expiry delete) fails.
        """
        key = self.stringify_key(id, namespace)

        projection: Optional[List[str]] = None
        if self.config.data_field:
            projection = [self.config.data_field, self.config.expiration_field]

        item = self.ddb.get_item(
            self.table,
            self._key(key),
            projection=projection,
            consistent_read=self.config.consistent_read,
        )

        result = from_item(item, self.config, self.serializer, self.clock())
        if result is EXPIRED:
            log.info("session.expired", table=self.table, key=key)
            self.remove(id, namespace)
            return None
        if result is None:
            log.debug("session.miss", table=self.table, key=key)
            return None

        record, _ = result
        return record.fields

    def remove(self, id: str, namespace: Sequence[str] = ()) -> None:
        """
        Delete the session row (no error if it does not exist).

        raises:
        - DynamoDBStoreError – if delete_item fails.
        """
        key = self.stringify_key(id, namespace)
        self.ddb.delete_item(self.table, self._key(key))
        log.debug("session.removed", table=self.table, key=key)

    # -------------------- Reaping -------------------- #

    def reap_scan_filter(self):
        """
        Scan filter matching every row whose expiration is earlier than now.

        notes:
        - Rows without an expiration column never match.
        """
        return Attr(self.config.expiration_field).lt(int(self.clock()))

    def reap_expired(self) -> int:
        """
        Delete every expired row in the table.

        returns:
        - int – number of rows deleted (0 when nothing had expired).

        raises:
        - DynamoDBStoreError – scan or batch delete failed; the sweep is aborted.

        notes:
        - This is a full table scan; on large tables run it from a scheduled job
          (see handlers/reap_handler.py), not from request paths.
        """
        key_field = self.config.key_field
        keys: List[Any] = []

        log.info("reap.scan", table=self.table)
        self.ddb.scan(
            self.table,
            [key_field],
            self.reap_scan_filter(),
            lambda row: keys.append(row[key_field]),
        )

        if not keys:
            log.info("reap.none_found", table=self.table)
            return 0

        log.info("reap.deleting", table=self.table, count=len(keys))
        self.ddb.batch_delete(self.table, key_field, keys)
        log.info("reap.finished", table=self.table, count=len(keys))
        return len(keys)

    # -------------------- Provisioning -------------------- #

    def create_table_args(self, **overrides: Any) -> Dict[str, Any]:
        """
        Arguments for creating the session table.

        example (defaults):
        {
            "TableName": "starch_states",
            "ReadCapacityUnits": 10,
            "WriteCapacityUnits": 10,
            "AttributeDefinitions": {"__STARCH_KEY__": "S"},
            "KeySchema": ["__STARCH_KEY__"],
        }

        Any keyword argument overrides (or adds to) the defaults.
        """
        key_field = self.config.key_field
        args: Dict[str, Any] = {
            "TableName": self.table,
            "ReadCapacityUnits": 10,
            "WriteCapacityUnits": 10,
            "AttributeDefinitions": {key_field: "S"},
            "KeySchema": [key_field],
        }
        args.update(overrides)
        return args

    def create_table(self, **overrides: Any) -> None:
        """
        Create the table and block until it is ACTIVE.

        raises:
        - DynamoDBStoreError – 'create_table' or 'wait_for_table_status' failed.
        """
        args = self.create_table_args(**overrides)
        log.info("table.create", table=args["TableName"])
        self.ddb.create_table(args)
        self.ddb.wait_for_table(args["TableName"])
        log.info("table.active", table=args["TableName"])


__all__ = ["DynamoDBStore", "stringify_key"]
