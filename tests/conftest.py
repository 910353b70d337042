# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Pytest configuration file for the dyndocs package tests.
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from dyndocs.config import DynamoDBConfig
from dyndocs.dynamodb.client import DynamoDBClient
from dyndocs.dynamodb.service import DocumentDynamoDBService


@pytest.fixture
def local_config():
    return DynamoDBConfig(
        region="us-east-1",
        endpoint="http://localhost:8000",
        access_key_id="local-key",
        secret_access_key="local-secret",
        local=True,
    )


@pytest.fixture
def mock_boto3_client():
    """boto3 dynamodb client stand-in with empty successful responses."""
    client = MagicMock()
    client.get_item.return_value = {}
    client.put_item.return_value = {}
    client.update_item.return_value = {}
    client.delete_item.return_value = {}
    client.query.return_value = {"Items": []}
    client.list_tables.return_value = {"TableNames": []}
    return client


@pytest.fixture
def service(local_config, mock_boto3_client):
    client = DynamoDBClient(config=local_config, dynamodb_client=mock_boto3_client)
    return DocumentDynamoDBService(dynamodb_client=client)


@pytest.fixture
def events(service):
    """Events published by the service fixture, in order."""
    received = []
    service.on("dynamodb", received.append)
    return received


@pytest.fixture
def client_error():
    def _make(code="ResourceNotFoundException", operation="GetItem"):
        return ClientError(
            {"Error": {"Code": code, "Message": f"{code} raised by test"}},
            operation,
        )

    return _make
