"""Shared DynamoDB client configuration.

Uses aioboto3 for async operations. Connection settings come from
spellbook.config unless overridden.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import aioboto3
from botocore.config import Config
from botocore.exceptions import ClientError

from spellbook.config import settings

logger = logging.getLogger(__name__)


class DynamoDBClient:
    """
    Shared DynamoDB client configuration.

    Example:
        client = DynamoDBClient()

        async with client.resource() as dynamodb:
            table = await dynamodb.Table('spellbook_formulas')
            await table.put_item(Item={...})
    """

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        region_name: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
    ):
        self._endpoint_url = endpoint_url or settings.DYNAMODB_ENDPOINT
        self._region_name = region_name or settings.DYNAMODB_REGION
        self._access_key = access_key or settings.DYNAMODB_ACCESS_KEY
        self._secret_key = secret_key or settings.DYNAMODB_SECRET_KEY
        self.session = aioboto3.Session()

        self._config = Config(
            retries={
                'max_attempts': 3,
                'mode': 'adaptive'
            },
            connect_timeout=5,
            read_timeout=30,
        )

        logger.debug(f"DynamoDB client configured for {self._endpoint_url}")

    @property
    def _resource_config(self) -> Dict[str, Any]:
        return {
            'endpoint_url': self._endpoint_url,
            'region_name': self._region_name,
            'aws_access_key_id': self._access_key,
            'aws_secret_access_key': self._secret_key,
            'config': self._config,
        }

    @asynccontextmanager
    async def resource(self):
        """Async DynamoDB resource context manager."""
        async with self.session.resource('dynamodb', **self._resource_config) as dynamodb:
            yield dynamodb

    async def ensure_table(self, table_name: str) -> bool:
        """
        Create a table keyed by `_id` if it does not exist.

        Returns:
            True if the table was created, False if it already existed
        """
        async with self.resource() as dynamodb:
            try:
                table = await dynamodb.create_table(
                    TableName=table_name,
                    KeySchema=[
                        {'AttributeName': '_id', 'KeyType': 'HASH'}
                    ],
                    AttributeDefinitions=[
                        {'AttributeName': '_id', 'AttributeType': 'S'}
                    ],
                    BillingMode='PAY_PER_REQUEST'
                )
                await table.wait_until_exists()
                logger.info(f"Created DynamoDB table '{table_name}'")
                return True
            except ClientError as e:
                if e.response['Error']['Code'] == 'ResourceInUseException':
                    logger.debug(f"DynamoDB table '{table_name}' already exists")
                    return False
                raise

    def __repr__(self) -> str:
        return f"DynamoDBClient(endpoint={self._endpoint_url}, region={self._region_name})"
