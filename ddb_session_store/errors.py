"""
Error taxonomy for the DynamoDB session store.

PURPOSE:
- Turn any failure returned by the DynamoDB collaborator into one readable,
  fatal exception that names the remote operation which failed.

CONTEXT:
- Raised by tools/dynamodb_tool.py for put/get/delete/scan/batch delete and
  table creation. Expired records and empty reaps are normal outcomes and
  never pass through here.
"""

from __future__ import annotations
from typing import Any, Mapping

from botocore.exceptions import BotoCoreError, ClientError


class DynamoDBStoreError(RuntimeError):
    """
    A DynamoDB request failed.

    attributes:
    - operation: str – the collaborator call that failed (e.g. 'put_item').
    """

    def __init__(self, operation: str, message: str):
        super().__init__(message)
        self.operation = operation


def format_ddb_error(operation: str, error: Any) -> str:
    """
    Render a collaborator error as "<context>: [<type>: ]<message>".

    parameters:
    - operation: str – name of the DynamoDB call (e.g. 'get_item').
    - error: Any – the raised exception, an error mapping, or None.

    returns:
    - str – e.g. "DynamoDB.put_item: ResourceNotFoundException: Requested resource not found".

    notes:
    - Anything without a recognisable message is reported as
      "<context> Unknown Error: <repr>" ("UNDEFINED" when missing).
    """
    context = f"DynamoDB.{operation}"

    if error is None:
        return f"{context} Unknown Error: UNDEFINED"

    if isinstance(error, ClientError):
        err = error.response.get("Error", {})
        return _structured(context, err.get("Code"), err.get("Message") or str(error))

    if isinstance(error, BotoCoreError):
        return _structured(context, type(error).__name__, str(error))

    if isinstance(error, Mapping) and error.get("message") is not None:
        return _structured(context, error.get("type"), error["message"])

    if isinstance(error, str):
        return f"{context} Unknown Error: {error}"

    if isinstance(error, Exception) and str(error):
        return _structured(context, type(error).__name__, error)

    return f"{context} Unknown Error: {error!r}"


def _structured(context: str, type_: Any, message: Any) -> str:
    if type_:
        return f"{context}: {type_}: {message}"
    return f"{context}: {message}"


def raise_ddb_error(operation: str, error: Any) -> None:
    """
    Raise DynamoDBStoreError for `operation`, chaining the original exception.
    """
    exc = DynamoDBStoreError(operation, format_ddb_error(operation, error))
    if isinstance(error, BaseException):
        raise exc from error
    raise exc
