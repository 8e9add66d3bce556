"""
Core infrastructure components for DynamoDB operations.

- TableGateway: Thin wrapper over the boto3 DynamoDB low-level client
- map_dynamodb_error: ClientError -> StoreError mapping
- Factory function for creating gateways
"""

from .table_gateway import TableGateway, create_table_gateway, map_dynamodb_error

__all__ = [
    "TableGateway",
    "create_table_gateway",
    "map_dynamodb_error",
]
