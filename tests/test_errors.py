import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from ddb_session_store.errors import DynamoDBStoreError, format_ddb_error, raise_ddb_error


def _client_error(code, message):
    return ClientError({"Error": {"Code": code, "Message": message}}, "PutItem")


def test_client_error_includes_code():
    msg = format_ddb_error("put_item", _client_error("ResourceNotFoundException", "Requested resource not found"))
    assert msg == "DynamoDB.put_item: ResourceNotFoundException: Requested resource not found"


def test_botocore_error_uses_class_name():
    err = EndpointConnectionError(endpoint_url="http://localhost:1")
    msg = format_ddb_error("get_item", err)
    assert msg.startswith("DynamoDB.get_item: EndpointConnectionError: ")


def test_mapping_errors():
    assert format_ddb_error("scan", {"message": "boom"}) == "DynamoDB.scan: boom"
    assert format_ddb_error("scan", {"message": "boom", "type": "Throttled"}) == "DynamoDB.scan: Throttled: boom"


def test_unknown_errors():
    assert format_ddb_error("delete_item", None) == "DynamoDB.delete_item Unknown Error: UNDEFINED"
    assert format_ddb_error("delete_item", "oops") == "DynamoDB.delete_item Unknown Error: oops"
    assert format_ddb_error("delete_item", {"code": 1}) == "DynamoDB.delete_item Unknown Error: {'code': 1}"


def test_raise_chains_original():
    original = _client_error("ValidationException", "bad key")
    with pytest.raises(DynamoDBStoreError) as e:
        raise_ddb_error("get_item", original)
    assert e.value.operation == "get_item"
    assert e.value.__cause__ is original
    assert isinstance(e.value, RuntimeError)


def test_local_encoding_errors_use_class_name():
    assert format_ddb_error("put_item", TypeError("Infinity and NaN not supported")) == (
        "DynamoDB.put_item: TypeError: Infinity and NaN not supported"
    )
