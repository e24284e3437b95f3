"""
DynamoDB storage backend for session frameworks.

Quick start:

    from ddb_session_store import DynamoDBStore, StoreConfig

    store = DynamoDBStore.from_config({"region_name": "eu-west-2"}, StoreConfig(table="sessions"))
    store.set("abc123", {"user": "rafe", "cart": [1, 2]}, expires=3600)
    store.get("abc123")
"""

from .config import StoreConfig
from .errors import DynamoDBStoreError
from .record import EXPIRED, SessionRecord
from .serializers import JSONSerializer, build_serializer
from .store import DynamoDBStore, stringify_key
from .tools.dynamodb_tool import DynamoDBClient

__all__ = [
    "DynamoDBClient",
    "DynamoDBStore",
    "DynamoDBStoreError",
    "EXPIRED",
    "JSONSerializer",
    "SessionRecord",
    "StoreConfig",
    "build_serializer",
    "stringify_key",
]
