import pytest

from ddb_session_store import DynamoDBStore, StoreConfig
from ddb_session_store.handlers import reap_handler


class Ctx:
    aws_request_id = "req-123"


@pytest.fixture(autouse=True)
def fresh_store(monkeypatch):
    monkeypatch.setattr(reap_handler, "_store", None)
    monkeypatch.setenv("DDB_SESSION_TABLE", "sessions")


def test_handler_reaps_expired(dynamodb):
    s = DynamoDBStore.from_existing_client(dynamodb, StoreConfig(table="sessions"))
    s.create_table()
    s.set("old", {"a": 1}, -10)
    s.set("new", {"a": 2}, 600)

    resp = reap_handler.handler({"id": "evt-1", "source": "aws.events"}, Ctx())
    assert resp["statusCode"] == 200
    assert resp["body"]["status"] == "ok"
    assert resp["body"]["reaped"] == 1
    assert resp["body"]["table"] == "sessions"
    assert s.get("new") == {"a": 2}


def test_handler_reuses_store(dynamodb):
    DynamoDBStore.from_existing_client(dynamodb, StoreConfig(table="sessions")).create_table()
    reap_handler.handler({}, Ctx())
    first = reap_handler._store
    reap_handler.handler({}, Ctx())
    assert reap_handler._store is first


def test_handler_reports_ddb_errors(dynamodb):
    resp = reap_handler.handler({}, Ctx())
    assert resp["statusCode"] == 500
    assert resp["body"]["status"] == "error"
    assert resp["body"]["error"].startswith("DynamoDB.scan: ResourceNotFoundException")


def test_handler_reports_bad_config(monkeypatch):
    monkeypatch.setenv("DDB_SERIALIZER", "yaml")
    resp = reap_handler.handler({}, Ctx())
    assert resp["statusCode"] == 500
    assert "Unknown serializer" in resp["body"]["error"]


def test_handler_reports_schema_errors(monkeypatch):
    monkeypatch.setattr(reap_handler.StoreConfig, "from_env", classmethod(lambda cls: cls.from_dict({"table": ""})))
    resp = reap_handler.handler({}, Ctx())
    assert resp["statusCode"] == 500
    assert resp["body"]["status"] == "error"
    assert resp["body"]["error"].endswith("at $.table")
