# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
DynamoDB integration module for the dyndocs package.

This module provides the asynchronous DynamoDB client adapter and the
document service that stores JSON documents as DynamoDB items.
"""

from dyndocs.dynamodb.client import DynamoDBClient, StoreClientError
from dyndocs.dynamodb.service import DocumentDynamoDBService

__all__ = [
    "DynamoDBClient",
    "StoreClientError",
    "DocumentDynamoDBService",
]
