"""
AWS Lambda handler: deletes expired sessions on a schedule.

PURPOSE:
- Entry point for an EventBridge (cron) rule that runs DynamoDBStore.reap_expired().
- Emits structured JSON logs with request/correlation ids for CloudWatch.

CONTEXT:
- Table, column names and region come from the environment (see config.py).
- The store is built once per container and reused across invocations.
"""

from __future__ import annotations
import os
import time
import uuid
from typing import Any, Dict, Optional

from jsonschema import ValidationError

from ..config import DEFAULT_TABLE, StoreConfig, client_params_from_env, error_to_string
from ..errors import DynamoDBStoreError
from ..logging_setup import configure_logging
from ..observability import init_observability, xray_segment
from ..store import DynamoDBStore

SERVICE_NAME = "session-reaper"

log = configure_logging(SERVICE_NAME, table=os.getenv("DDB_SESSION_TABLE", DEFAULT_TABLE))
init_observability()

_store: Optional[DynamoDBStore] = None


def get_store() -> DynamoDBStore:
    """Build the store from the environment on first use, then reuse it."""
    global _store
    if _store is None:
        _store = DynamoDBStore.from_config(client_params_from_env(), StoreConfig.from_env())
    return _store


def _response(body: Dict[str, Any], status_code: int = 200) -> Dict[str, Any]:
    return {"statusCode": status_code, "body": body}


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    Lambda entry point.

    flow:
    1) Bind request/correlation ids.
    2) Run one reap sweep.
    3) Return {"status": "ok", "reaped": n}, or an error body (HTTP 500) if
       the configuration or a DynamoDB call failed.
    """
    t0 = time.time()
    event = event or {}

    request_id = getattr(context, "aws_request_id", None) or str(uuid.uuid4())
    correlation_id = event.get("id") or str(uuid.uuid4())
    rlog = log.bind(request_id=request_id, correlation_id=correlation_id)
    rlog.info("reap.requested", source=event.get("source"))

    try:
        store = get_store()
        with xray_segment("reap_expired"):
            reaped = store.reap_expired()
    except DynamoDBStoreError as e:
        latency_ms = round((time.time() - t0) * 1000, 1)
        rlog.error("reap.failed", operation=e.operation, error=str(e), latency_ms=latency_ms)
        return _response({"status": "error", "error": str(e), "latency_ms": latency_ms}, 500)
    except (ValidationError, ValueError, TypeError) as e:
        latency_ms = round((time.time() - t0) * 1000, 1)
        rlog.error("reap.bad_config", error=error_to_string(e), latency_ms=latency_ms)
        return _response({"status": "error", "error": error_to_string(e), "latency_ms": latency_ms}, 500)

    latency_ms = round((time.time() - t0) * 1000, 1)
    rlog.info("reap.success", table=store.table, reaped=reaped, latency_ms=latency_ms)
    return _response({"status": "ok", "table": store.table, "reaped": reaped, "latency_ms": latency_ms})
