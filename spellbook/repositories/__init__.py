"""Document store backends."""
from .document_store import DocumentStore, create_store, COLLECTION_NAMES, BUSINESS_KEYS
from .memory_collection import InMemoryCollection
from .json_file_collection import JsonFileCollection
from .dynamodb_client import DynamoDBClient
from .dynamodb_collection import DynamoDBCollection

__all__ = [
    "DocumentStore",
    "create_store",
    "COLLECTION_NAMES",
    "BUSINESS_KEYS",
    "InMemoryCollection",
    "JsonFileCollection",
    "DynamoDBClient",
    "DynamoDBCollection",
]
