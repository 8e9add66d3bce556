"""
Thin DynamoDB Table Gateway

This module provides a lightweight wrapper around the boto3 low-level
DynamoDB client for a single table. Items go in and come out in the client's
wire format (``{"Year": {"N": "2015"}}``); turning them into Movie records
is the codec's job, not the gateway's.

The gateway focuses on:
- Creating the boto3 client (or accepting one that is passed in)
- Forwarding requests with the table name filled in
- Mapping botocore ClientErrors to StoreError subclasses
- Logging mutations

It never retries; botocore's own retry configuration is the only retry
layer.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError, WaiterError

from ..config import DynamoDBConfig
from ..exceptions import (
    ConflictError,
    ConnectionError,
    NotFoundError,
    RetryableError,
    StoreError,
)

logger = logging.getLogger(__name__)

_CONFLICT_CODES = {
    'ConditionalCheckFailedException',
    'TransactionConflictException',
    'ResourceInUseException',
    'TableAlreadyExistsException',
}

_NOT_FOUND_CODES = {
    'ResourceNotFoundException',
    'TableNotFoundException',
}

_RETRYABLE_CODES = {
    'ProvisionedThroughputExceededException',
    'RequestLimitExceeded',
    'ThrottlingException',
    'InternalServerError',
    'ServiceUnavailable',
    'ServiceUnavailableException',
    'RequestTimeoutException',
}

_CONNECTION_CODES = {
    'UnrecognizedClientException',
    'AccessDeniedException',
    'InvalidSignatureException',
    'IncompleteSignatureException',
    'ExpiredTokenException',
    'MissingAuthenticationToken',
}


def map_dynamodb_error(
    error: ClientError,
    operation: str,
    table_name: str,
    resource_id: Optional[str] = None
) -> StoreError:
    """Map a DynamoDB ClientError to a StoreError subclass.

    The store's error code is kept on the returned error as ``error_code``;
    codes without a dedicated subclass become a plain StoreError.

    Args:
        error: The botocore ClientError
        operation: The operation that failed (e.g., "GetItem", "PutItem")
        table_name: The DynamoDB table name
        resource_id: Optional resource identifier for context

    Returns:
        StoreError (or subclass) wrapping the original error
    """
    error_code = error.response.get('Error', {}).get('Code', 'Unknown')
    error_message = error.response.get('Error', {}).get('Message', str(error))

    context = f"{operation} on {table_name}"
    if resource_id:
        context += f" (resource: {resource_id})"
    full_message = f"{context}: {error_message}"

    details = {
        'error_code': error_code,
        'operation': operation,
        'table_name': table_name,
        'original_error': error,
    }

    if error_code in _CONFLICT_CODES:
        return ConflictError(f"Conflict - {full_message}", resource_id, **details)

    if error_code in _NOT_FOUND_CODES:
        return NotFoundError(f"Resource not found - {full_message}", **details)

    if error_code in _RETRYABLE_CODES:
        return RetryableError(f"Throttled or unavailable - {full_message}", **details)

    if error_code in _CONNECTION_CODES:
        return ConnectionError(f"Authentication/authorization failed - {full_message}", **details)

    logger.warning(f"DynamoDB error code '{error_code}' passed through as StoreError")
    return StoreError(f"DynamoDB operation failed - {full_message}", **details)


def _key_id(key: Dict[str, Dict[str, Any]]) -> str:
    """Readable identifier for a wire-format key, used in error context."""
    return "/".join(str(next(iter(raw.values()))) for raw in key.values())


class TableGateway:
    """
    Thin gateway for DynamoDB table operations.

    Args:
        config: DynamoDB configuration
        table_name: Full name of the DynamoDB table
        client: Optional boto3 DynamoDB client; created lazily from the
            config when omitted
    """

    def __init__(self, config: DynamoDBConfig, table_name: str, client=None):
        self.config = config
        self.table_name = table_name
        self._client = client

    @property
    def client(self):
        """Lazy initialization of the DynamoDB low-level client."""
        if self._client is None:
            try:
                session = boto3.Session(
                    aws_access_key_id=self.config.aws_access_key_id,
                    aws_secret_access_key=self.config.aws_secret_access_key,
                    profile_name=self.config.profile_name,
                    region_name=self.config.region_name
                )

                client_kwargs = {
                    'region_name': self.config.region_name
                }

                if self.config.endpoint_url:
                    client_kwargs['endpoint_url'] = self.config.endpoint_url

                client_kwargs['config'] = Config(
                    retries={'max_attempts': self.config.retries},
                    max_pool_connections=self.config.max_pool_connections,
                    read_timeout=self.config.timeout_seconds,
                    connect_timeout=self.config.timeout_seconds
                )

                self._client = session.client('dynamodb', **client_kwargs)
            except Exception as e:
                logger.error(f"Failed to create DynamoDB client: {e}")
                raise ConnectionError(f"Failed to connect to DynamoDB: {e}", original_error=e) from e
        return self._client

    def get_item(self, key: Dict[str, Dict[str, Any]], **kwargs) -> Optional[Dict[str, Any]]:
        """
        Fetch one item by primary key.

        Returns:
            The raw item, or None when the table has no such item
        """
        try:
            response = self.client.get_item(TableName=self.table_name, Key=key, **kwargs)
        except ClientError as e:
            raise map_dynamodb_error(e, "GetItem", self.table_name, _key_id(key)) from e
        return response.get('Item')

    def put_item(self, item: Dict[str, Dict[str, Any]], **kwargs) -> None:
        """
        Put an item into the table.

        Args:
            item: Wire-format item
            **kwargs: Extra PutItem parameters (ConditionExpression, ...)
        """
        try:
            self.client.put_item(TableName=self.table_name, Item=item, **kwargs)
        except ClientError as e:
            raise map_dynamodb_error(e, "PutItem", self.table_name) from e
        logger.info(f"Put item in {self.table_name}")

    def update_item(
        self,
        key: Dict[str, Dict[str, Any]],
        return_values: str = 'NONE',
        **kwargs
    ) -> Optional[Dict[str, Any]]:
        """
        Update an item.

        Args:
            key: Wire-format primary key
            return_values: What to return after the update
            **kwargs: UpdateExpression, ExpressionAttributeNames/Values, ...

        Returns:
            Raw attributes if return_values != 'NONE'
        """
        try:
            response = self.client.update_item(
                TableName=self.table_name,
                Key=key,
                ReturnValues=return_values,
                **kwargs
            )
        except ClientError as e:
            raise map_dynamodb_error(e, "UpdateItem", self.table_name, _key_id(key)) from e

        logger.info(f"Updated item in {self.table_name}: {_key_id(key)}")
        return response.get('Attributes') if return_values != 'NONE' else None

    def delete_item(
        self,
        key: Dict[str, Dict[str, Any]],
        return_values: str = 'NONE',
        **kwargs
    ) -> Optional[Dict[str, Any]]:
        """
        Delete an item.

        Returns:
            Raw deleted attributes if return_values != 'NONE' (None when
            nothing was deleted)
        """
        try:
            response = self.client.delete_item(
                TableName=self.table_name,
                Key=key,
                ReturnValues=return_values,
                **kwargs
            )
        except ClientError as e:
            raise map_dynamodb_error(e, "DeleteItem", self.table_name, _key_id(key)) from e

        logger.info(f"Deleted item from {self.table_name}: {_key_id(key)}")
        return response.get('Attributes') if return_values != 'NONE' else None

    def scan(self, **kwargs) -> Dict[str, Any]:
        """
        Execute one Scan page.

        Scans read the whole table. Pass ProjectionExpression to limit data
        transfer and Limit to bound each page.

        Returns:
            Raw DynamoDB response (Items, Count, LastEvaluatedKey, ...)
        """
        if 'ProjectionExpression' not in kwargs:
            logger.warning(f"Scan on {self.table_name} without ProjectionExpression - consider adding one")
        try:
            return self.client.scan(TableName=self.table_name, **kwargs)
        except ClientError as e:
            raise map_dynamodb_error(e, "Scan", self.table_name) from e

    def list_tables(
        self,
        limit: Optional[int] = None,
        exclusive_start_table_name: Optional[str] = None
    ) -> Tuple[List[str], Optional[str]]:
        """
        List one page of table names in the account/region.

        Returns:
            Tuple of (table_names, last_evaluated_table_name)
        """
        kwargs: Dict[str, Any] = {}
        if limit:
            kwargs['Limit'] = limit
        if exclusive_start_table_name:
            kwargs['ExclusiveStartTableName'] = exclusive_start_table_name
        try:
            response = self.client.list_tables(**kwargs)
        except ClientError as e:
            raise map_dynamodb_error(e, "ListTables", self.table_name) from e
        return response.get('TableNames', []), response.get('LastEvaluatedTableName')

    def create_table(
        self,
        key_schema: List[Dict[str, str]],
        attribute_definitions: List[Dict[str, str]],
        read_capacity: int,
        write_capacity: int
    ) -> Dict[str, Any]:
        """
        Create this gateway's table with provisioned throughput.

        Returns:
            TableDescription from the CreateTable response
        """
        try:
            response = self.client.create_table(
                TableName=self.table_name,
                KeySchema=key_schema,
                AttributeDefinitions=attribute_definitions,
                ProvisionedThroughput={
                    'ReadCapacityUnits': read_capacity,
                    'WriteCapacityUnits': write_capacity
                }
            )
        except ClientError as e:
            raise map_dynamodb_error(e, "CreateTable", self.table_name) from e

        logger.info(f"Created table {self.table_name}")
        return response.get('TableDescription', {})

    def describe_table(self) -> Dict[str, Any]:
        """Return the table description."""
        try:
            return self.client.describe_table(TableName=self.table_name)['Table']
        except ClientError as e:
            raise map_dynamodb_error(e, "DescribeTable", self.table_name) from e

    def wait_until_exists(self, delay: int = 5, max_attempts: int = 25) -> None:
        """Block until the table is ACTIVE."""
        try:
            self.client.get_waiter('table_exists').wait(
                TableName=self.table_name,
                WaiterConfig={'Delay': delay, 'MaxAttempts': max_attempts}
            )
        except WaiterError as e:
            raise StoreError(
                f"Table {self.table_name} did not become active: {e}",
                operation="DescribeTable",
                table_name=self.table_name,
                original_error=e,
            ) from e


def create_table_gateway(config: DynamoDBConfig, table_name: Optional[str] = None, client=None) -> TableGateway:
    """
    Factory function to create a TableGateway instance.

    Args:
        config: DynamoDB configuration
        table_name: Base table name (defaults to config.table_name); the
            config's prefix and environment are applied
        client: Optional boto3 DynamoDB client to share between gateways

    Returns:
        Configured TableGateway instance
    """
    full_table_name = config.get_table_name(table_name)
    return TableGateway(config, full_table_name, client=client)
