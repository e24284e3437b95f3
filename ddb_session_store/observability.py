"""
Observability bootstrap.

PURPOSE:
- Optionally enables AWS X-Ray tracing when USE_XRAY=1.
- Wraps each DynamoDB call in a named subsegment (see tools/dynamodb_tool.py).
- Degrades to a no-op if X-Ray is disabled or the SDK is not installed.

CONTEXT:
- Tracing is an optional extra (`pip install ddb-session-store[xray]`); the
  store must behave identically without it.
"""
from __future__ import annotations
import os

_enabled = False


def init_observability():
    """
    Optionally initialise AWS X-Ray instrumentation.

    returns:
    - xray_recorder if successfully configured, otherwise None.

    notes:
    - patch_all() instruments botocore, so DynamoDB requests show up as
      remote calls under the subsegments opened by xray_segment().
    """
    global _enabled
    if os.getenv("USE_XRAY", "0") != "1":
        _enabled = False
        return None
    try:
        from aws_xray_sdk.core import xray_recorder, patch_all
        xray_recorder.configure(service=os.getenv("XRAY_SERVICE_NAME", "ddb-session-store"))
        patch_all()
    except Exception:
        # Tracing must never stop the store from working.
        _enabled = False
        return None
    _enabled = True
    return xray_recorder


class xray_segment:
    """
    Context manager for a manual subsegment, e.g. around one DynamoDB request.

    usage example:
    >>> with xray_segment("dynamodb.get_item"):
    >>>     table.get_item(Key=...)

    behaviour:
    - Only talks to X-Ray after init_observability() succeeded.
    - Never raises from tracing itself; exceptions from the body propagate.
    """

    def __init__(self, name: str):
        self.name = name
        self.sub = None

    def __enter__(self):
        if not _enabled:
            return self
        try:
            from aws_xray_sdk.core import xray_recorder
            self.sub = xray_recorder.begin_subsegment(self.name)
        except Exception:
            self.sub = None
        return self

    def __exit__(self, exc_type, exc, tb):
        if self.sub is None:
            return False
        try:
            from aws_xray_sdk.core import xray_recorder
            if exc is not None:
                self.sub.add_exception(exc, [])
            xray_recorder.end_subsegment()
        except Exception:
            pass
        return False
