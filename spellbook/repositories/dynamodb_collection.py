"""DynamoDB backed document collection"""
import copy
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from botocore.exceptions import BotoCoreError, ClientError

from spellbook.exceptions import StoreError
from spellbook.interfaces.document_store import IDocumentCollection, SortSpec
from spellbook.repositories.dynamodb_client import DynamoDBClient
from spellbook.repositories.memory_collection import new_storage_id
from spellbook.repositories.query import matches, sort_documents

logger = logging.getLogger(__name__)


def to_dynamo(value: Any) -> Any:
    """DynamoDB rejects floats; store them as Decimal."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [to_dynamo(v) for v in value]
    return value


def from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [from_dynamo(v) for v in value]
    return value


class DynamoDBCollection(IDocumentCollection):
    """
    One DynamoDB table per collection, hash key `_id`.

    Predicates are evaluated client-side over a full scan; collections here
    are small reference libraries, so no secondary indexes are kept.
    """

    def __init__(self, client: DynamoDBClient, name: str, table_name: str):
        self.client = client
        self.name = name
        self.table_name = table_name

    async def _scan(self) -> List[Dict]:
        items: List[Dict] = []
        try:
            async with self.client.resource() as dynamodb:
                table = await dynamodb.Table(self.table_name)
                kwargs: Dict[str, Any] = {}
                while True:
                    response = await table.scan(**kwargs)
                    items.extend(response.get('Items', []))
                    last_key = response.get('LastEvaluatedKey')
                    if not last_key:
                        break
                    kwargs['ExclusiveStartKey'] = last_key
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to scan '{self.table_name}': {e}") from e
        return [from_dynamo(item) for item in items]

    async def find(
        self,
        query: Optional[Dict] = None,
        sort: Optional[SortSpec] = None
    ) -> List[Dict]:
        docs = [d for d in await self._scan() if matches(d, query)]
        return sort_documents(docs, sort)

    async def find_one(self, query: Dict) -> Optional[Dict]:
        for doc in await self._scan():
            if matches(doc, query):
                return doc
        return None

    async def upsert(self, docs: Union[Dict, List[Dict]]) -> List[Dict]:
        batch = docs if isinstance(docs, list) else [docs]
        stored = []
        for doc in batch:
            item = copy.deepcopy(doc)
            if not item.get('_id'):
                item['_id'] = new_storage_id()
            stored.append(item)

        try:
            async with self.client.resource() as dynamodb:
                table = await dynamodb.Table(self.table_name)
                async with table.batch_writer() as writer:
                    for item in stored:
                        await writer.put_item(Item=to_dynamo(item))
        except (ClientError, BotoCoreError, TypeError) as e:
            raise StoreError(f"Failed to write to '{self.table_name}': {e}") from e

        return stored

    async def remove(self, storage_id: str) -> bool:
        try:
            async with self.client.resource() as dynamodb:
                table = await dynamodb.Table(self.table_name)
                response = await table.delete_item(
                    Key={'_id': storage_id},
                    ReturnValues='ALL_OLD'
                )
        except (ClientError, BotoCoreError) as e:
            raise StoreError(f"Failed to delete from '{self.table_name}': {e}") from e
        return 'Attributes' in response
