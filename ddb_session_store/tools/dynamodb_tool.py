# PURPOSE: Thin wrapper around boto3's DynamoDB resource API used by the session store.
# CONTEXT: The store only needs point put/get/delete, a filtered scan, a bulk delete
#          and table creation. Every boto3/botocore failure is re-raised as
#          DynamoDBStoreError naming the operation (see errors.py); nothing is retried here.

from __future__ import annotations
from decimal import DecimalException
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import raise_ddb_error
from ..observability import xray_segment

_AWS_ERRORS = (ClientError, BotoCoreError)
# Raised by boto3's TypeSerializer before a request is sent (NaN, over-precise Decimals, ...).
_ENCODE_ERRORS = (TypeError, DecimalException)


class DynamoDBClient:
    """
    DynamoDB collaborator backed by a boto3 service resource.

    The resource is created once and shared by every store operation; boto3
    resources are not thread-safe, so hosts running the store from several
    threads should give each thread its own client.
    """

    def __init__(self, resource: Any):
        self.resource = resource
        self._tables: Dict[str, Any] = {}

    @classmethod
    def from_config(cls, params: Optional[Mapping[str, Any]] = None, session: Any = None) -> "DynamoDBClient":
        """
        Build a new boto3 resource from connection parameters.

        parameters:
        - params: dict – keyword arguments for Session.resource("dynamodb", ...),
          e.g. {"region_name": "eu-west-2", "endpoint_url": "http://localhost:8000"}.
        - session: boto3.session.Session (optional) – defaults to a fresh session.
        """
        session = session or boto3.session.Session()
        return cls(session.resource("dynamodb", **dict(params or {})))

    @classmethod
    def from_existing_client(cls, resource: Any) -> "DynamoDBClient":
        """
        Reuse a DynamoDB resource the host application already built.

        raises:
        - TypeError – if `resource` is not a DynamoDB service resource.
        """
        if not hasattr(resource, "Table"):
            raise TypeError("expected a boto3 DynamoDB service resource (boto3.resource('dynamodb'))")
        return cls(resource)

    def table(self, name: str):
        if name not in self._tables:
            self._tables[name] = self.resource.Table(name)
        return self._tables[name]

    # -------------------- Point operations -------------------- #

    def put_item(self, table: str, item: Dict[str, Any]) -> None:
        """Insert or fully replace one item."""
        with xray_segment("dynamodb.put_item"):
            try:
                self.table(table).put_item(Item=item)
            except _AWS_ERRORS + _ENCODE_ERRORS as e:
                raise_ddb_error("put_item", e)

    def get_item(
        self,
        table: str,
        key: Dict[str, Any],
        projection: Optional[Sequence[str]] = None,
        consistent_read: bool = True,
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch one item by primary key.

        returns:
        - dict or None – the stored attributes (limited to `projection` if given).
        """
        kwargs: Dict[str, Any] = {"Key": key, "ConsistentRead": bool(consistent_read)}
        kwargs.update(_projection_args(projection))
        with xray_segment("dynamodb.get_item"):
            try:
                res = self.table(table).get_item(**kwargs)
            except _AWS_ERRORS as e:
                raise_ddb_error("get_item", e)
        return res.get("Item")

    def delete_item(self, table: str, key: Dict[str, Any]) -> None:
        """Delete one item; deleting a missing key is not an error in DynamoDB."""
        with xray_segment("dynamodb.delete_item"):
            try:
                self.table(table).delete_item(Key=key)
            except _AWS_ERRORS as e:
                raise_ddb_error("delete_item", e)

    # -------------------- Bulk operations -------------------- #

    def scan(
        self,
        table: str,
        projection: Optional[Sequence[str]],
        filter_condition: Any,
        on_row: Callable[[Dict[str, Any]], None],
    ) -> None:
        """
        Scan the whole table, calling `on_row` once per matching item.

        parameters:
        - filter_condition: boto3.dynamodb.conditions.ConditionBase – FilterExpression.

        notes:
        - Follows LastEvaluatedKey until the table is exhausted. This reads every
          item in the table (billed as such) regardless of the filter.
        """
        kwargs: Dict[str, Any] = {"FilterExpression": filter_condition}
        kwargs.update(_projection_args(projection))
        tbl = self.table(table)
        with xray_segment("dynamodb.scan"):
            while True:
                try:
                    res = tbl.scan(**kwargs)
                except _AWS_ERRORS as e:
                    raise_ddb_error("scan", e)
                for row in res.get("Items", []):
                    on_row(row)
                last = res.get("LastEvaluatedKey")
                if not last:
                    break
                kwargs["ExclusiveStartKey"] = last

    def batch_delete(self, table: str, key_field: str, keys: Iterable[Any]) -> None:
        """
        Delete every key in `keys`.

        notes:
        - boto3's batch writer splits the request into 25-item BatchWriteItem
          calls and resends unprocessed items.
        """
        with xray_segment("dynamodb.batch_write_item"):
            try:
                with self.table(table).batch_writer(overwrite_by_pkeys=[key_field]) as batch:
                    for k in keys:
                        batch.delete_item(Key={key_field: k})
            except _AWS_ERRORS as e:
                raise_ddb_error("batch_write_item", e)

    # -------------------- Table provisioning -------------------- #

    def create_table(self, args: Mapping[str, Any]) -> None:
        """
        Issue CreateTable from a create_table_args() mapping.

        parameters:
        - args: dict – {"TableName", "ReadCapacityUnits", "WriteCapacityUnits",
          "AttributeDefinitions": {name: type}, "KeySchema": [hash, range?], ...};
          any other keys are passed to boto3 as-is.
        """
        with xray_segment("dynamodb.create_table"):
            try:
                self.resource.create_table(**_boto_create_table_args(args))
            except _AWS_ERRORS as e:
                raise_ddb_error("create_table", e)

    def wait_for_table(self, table: str) -> None:
        """Block until the table reports ACTIVE."""
        with xray_segment("dynamodb.wait_for_table_status"):
            try:
                self.table(table).wait_until_exists()
            except _AWS_ERRORS as e:
                raise_ddb_error("wait_for_table_status", e)


def _projection_args(projection: Optional[Sequence[str]]) -> Dict[str, Any]:
    # Placeholders keep reserved words and "__"-style names legal in expressions.
    if not projection:
        return {}
    names = {f"#p{i}": name for i, name in enumerate(projection)}
    return {
        "ProjectionExpression": ", ".join(names),
        "ExpressionAttributeNames": names,
    }


def _boto_create_table_args(args: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(args)

    read = out.pop("ReadCapacityUnits", None)
    write = out.pop("WriteCapacityUnits", None)
    if out.get("BillingMode") != "PAY_PER_REQUEST" and "ProvisionedThroughput" not in out:
        out["ProvisionedThroughput"] = {
            "ReadCapacityUnits": int(read or 1),
            "WriteCapacityUnits": int(write or 1),
        }

    defs = out.get("AttributeDefinitions")
    if isinstance(defs, Mapping):
        out["AttributeDefinitions"] = [
            {"AttributeName": name, "AttributeType": type_} for name, type_ in defs.items()
        ]

    schema = out.get("KeySchema")
    if schema and isinstance(schema[0], str):
        key_types: List[str] = ["HASH", "RANGE"]
        out["KeySchema"] = [
            {"AttributeName": name, "KeyType": key_types[i]} for i, name in enumerate(schema)
        ]

    return out
