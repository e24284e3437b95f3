# Re-export the DynamoDB collaborator so `from ddb_session_store.tools import DynamoDBClient` works.
from .dynamodb_tool import DynamoDBClient

__all__ = ["DynamoDBClient"]
