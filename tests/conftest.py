import boto3
import pytest
from moto import mock_aws

from ddb_session_store import DynamoDBStore, StoreConfig

REGION = "eu-west-2"


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    # Fake credentials so nothing can reach a real account.
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.delenv("AWS_REGION", raising=False)
    monkeypatch.delenv("USE_XRAY", raising=False)


@pytest.fixture
def dynamodb():
    with mock_aws():
        yield boto3.resource("dynamodb", region_name=REGION)


@pytest.fixture
def store(dynamodb):
    s = DynamoDBStore.from_existing_client(dynamodb)
    s.create_table()
    return s


@pytest.fixture
def data_column_store(dynamodb):
    config = StoreConfig(table="sessions", key_field="key", expiration_field="expiration", data_field="data")
    s = DynamoDBStore.from_existing_client(dynamodb, config)
    s.create_table()
    return s
