"""
Store configuration.

PURPOSE:
- Hold the options a host passes to the store (table, reserved column names,
  read consistency, serializer) and validate them against a JSON schema.
- Read the same options, plus boto3 connection parameters, from the
  environment for Lambda / local use.

CONTEXT:
- The schema lives in schemas/store_config.schema.json next to this module.
- Reserved column names are independently overridable. They must not clash
  with session field names.
"""

from __future__ import annotations

import json
import os
import pathlib
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from jsonschema import Draft7Validator, ValidationError

SCHEMA_DIR = pathlib.Path(__file__).resolve().parent / "schemas"

DEFAULT_TABLE = "starch_states"
DEFAULT_KEY_FIELD = "__STARCH_KEY__"
DEFAULT_EXPIRATION_FIELD = "__STARCH_EXPIRATION__"
DEFAULT_REGION = "eu-west-2"

_TRUTHY = {"1", "true", "yes", "on"}


# -------------------- Schema loading utilities -------------------- #

@lru_cache(maxsize=16)
def load_schema(name: str) -> Dict[str, Any]:
    """
    Read and parse a packaged JSON schema (cached).

    parameters:
    - name: str – file name under schemas/, e.g. 'store_config.schema.json'.

    raises:
    - FileNotFoundError – if the schema is not packaged.
    """
    p = SCHEMA_DIR / name
    if not p.exists():
        raise FileNotFoundError(f"Schema not found at: {p}")
    return json.loads(p.read_text(encoding="utf-8"))


def validate_with_schema(instance: Mapping[str, Any], schema: Dict[str, Any]) -> None:
    """Raise jsonschema.ValidationError if `instance` does not match `schema`."""
    Draft7Validator(schema).validate(instance)


def error_to_string(err: Exception) -> str:
    """
    Readable message for configuration errors.

    notes:
    - ValidationError messages get a pointer to the offending option (e.g. $.table).
    """
    if isinstance(err, ValidationError):
        path = "$" + "".join(f"[{repr(p)}]" if isinstance(p, int) else f".{p}" for p in err.path)
        return f"{err.message} at {path}"
    return f"{type(err).__name__}: {err}"


# -------------------- Store configuration -------------------- #

@dataclass(frozen=True)
class StoreConfig:
    """
    Options recognised by DynamoDBStore.

    attributes:
    - table: str – DynamoDB table name.
    - key_field: str – column holding the session key (partition key).
    - expiration_field: str – column holding the epoch expiration.
    - data_field: str | None – when set, all session data is serialized into
      this one column instead of one column per field.
    - consistent_read: bool – request strongly consistent point reads.
    - serializer: str | dict | object – see serializers.build_serializer().
    - namespace_separator: str – joins namespace parts and the id into a key.
    """
    table: str = DEFAULT_TABLE
    key_field: str = DEFAULT_KEY_FIELD
    expiration_field: str = DEFAULT_EXPIRATION_FIELD
    data_field: Optional[str] = None
    consistent_read: bool = True
    serializer: Any = "JSON"
    namespace_separator: str = ":"

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "StoreConfig":
        """
        Build a config from a plain mapping, validating it first.

        raises:
        - jsonschema.ValidationError – unknown option or wrong type.
        """
        # Pre-built serializer instances are not JSON; validate everything else.
        checked = {k: v for k, v in options.items() if k != "serializer" or isinstance(v, (str, dict))}
        validate_with_schema(checked, load_schema("store_config.schema.json"))
        return cls(**dict(options))

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """
        Build a config from DDB_* environment variables (unset -> default).
        """
        options: Dict[str, Any] = {}
        env_map = {
            "DDB_SESSION_TABLE": "table",
            "DDB_KEY_FIELD": "key_field",
            "DDB_EXPIRATION_FIELD": "expiration_field",
            "DDB_DATA_FIELD": "data_field",
            "DDB_SERIALIZER": "serializer",
            "DDB_NAMESPACE_SEPARATOR": "namespace_separator",
        }
        for env_name, option in env_map.items():
            value = os.getenv(env_name)
            if value:
                options[option] = value

        consistent = os.getenv("DDB_CONSISTENT_READ")
        if consistent is not None:
            options["consistent_read"] = consistent.strip().lower() in _TRUTHY

        return cls.from_dict(options)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def client_params_from_env() -> Dict[str, Any]:
    """
    boto3 connection parameters for DynamoDBClient.from_config().

    returns:
    - dict – {"region_name": ..., "endpoint_url": ...?}; endpoint_url is only
      present when DDB_ENDPOINT_URL is set (DynamoDB Local, moto server).
    """
    params: Dict[str, Any] = {
        "region_name": os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or DEFAULT_REGION,
    }
    endpoint = os.getenv("DDB_ENDPOINT_URL")
    if endpoint:
        params["endpoint_url"] = endpoint
    return params


__all__ = [
    "StoreConfig",
    "load_schema",
    "validate_with_schema",
    "error_to_string",
    "client_params_from_env",
]
