"""
Structured logging setup for Lambda & local development.

PURPOSE:
- Configure JSON-formatted logs for the session store, both inside AWS Lambda
  (reap handler) and when embedded in a host application.
- Keep session keys out of the logs: a key is a live session id, so log events
  only carry a short prefix unless LOG_SESSION_KEYS=1.

CONTEXT:
- Store modules log through structlog.get_logger(); configure_logging() only
  decides how those events are rendered and what context is bound.
"""

from __future__ import annotations
import logging
import os
import sys
from typing import Any, Dict

import structlog

# Characters of a session key kept in log output.
KEY_PREFIX_LEN = 6


def mask_session_key(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    structlog processor: shorten the `key` field of store events.

    example:
    - {"event": "session.expired", "key": "app:user:abc123def"}
      -> {"event": "session.expired", "key": "app:us***"}
    """
    key = event_dict.get("key")
    if key is None or os.getenv("LOG_SESSION_KEYS") == "1":
        return event_dict
    key = str(key)
    if len(key) > KEY_PREFIX_LEN:
        event_dict["key"] = key[:KEY_PREFIX_LEN] + "***"
    return event_dict


def configure_logging(service: str, **context: Any):
    """
    Configure structured JSON logging for the current environment.

    parameters:
    - service: str – service name bound to every event.
    - context: extra key/values bound to the returned logger (e.g. table="sessions").

    returns:
    - structlog.BoundLogger – logger bound with service, env and `context`.

    behaviour:
    - Reads log level from LOG_LEVEL (default = INFO).
    - Writes to stdout so Lambda ships it to CloudWatch.

    example log entry:
    {
      "event": "reap.finished",
      "level": "info",
      "timestamp": "2026-10-16T13:00:00Z",
      "service": "session-reaper",
      "env": "dev",
      "table": "starch_states",
      "count": 2
    }
    """
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level, logging.INFO),
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            mask_session_key,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger().bind(service=service, env=os.getenv("ENV", "dev"), **context)
