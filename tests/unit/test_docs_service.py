# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Unit tests for the document store factory.
"""

from unittest.mock import MagicMock, patch

import pytest
from dyndocs.docs_service import (
    DEFAULT_MODE,
    HOSTED_MODE,
    LOCAL_MODE,
    DocumentStoreFactory,
    create_document_store,
)
from dyndocs.dynamodb import DocumentDynamoDBService


@pytest.mark.unit
class TestDocumentStoreFactory:
    """Tests for the DocumentStoreFactory class."""

    def test_create_from_local_config(self, local_config):
        store = DocumentStoreFactory.create_service(
            config=local_config, dynamodb_client=MagicMock()
        )

        assert isinstance(store, DocumentDynamoDBService)
        assert store.is_local() is True

    @patch("dyndocs.dynamodb.client.boto3")
    def test_create_from_nested_dict(self, mock_boto3):
        store = create_document_store(
            {
                "dynDB": {
                    "endpoint": "http://localhost:8000",
                    "accessKeyId": "key",
                    "secretAccessKey": "secret",
                    "region": "eu-west-1",
                    "local": True,
                }
            }
        )

        assert store.is_local() is True
        mock_boto3.client.assert_called_once_with(
            "dynamodb",
            region_name="eu-west-1",
            endpoint_url="http://localhost:8000",
            aws_access_key_id="key",
            aws_secret_access_key="secret",
        )

    def test_mode_override_to_hosted(self, local_config):
        store = DocumentStoreFactory.create_service(
            mode="HOSTED", config=local_config, dynamodb_client=MagicMock()
        )

        assert store.is_local() is False

    def test_local_mode_without_endpoint(self):
        with pytest.raises(ValueError):
            DocumentStoreFactory.create_service(
                mode="local", config={"region": "us-east-1"}, dynamodb_client=MagicMock()
            )

    def test_unsupported_mode(self, local_config):
        with pytest.raises(ValueError) as exc_info:
            DocumentStoreFactory.create_service(mode="embedded", config=local_config)

        assert "Unsupported document store mode" in str(exc_info.value)

    def test_mode_from_environment(self, monkeypatch):
        monkeypatch.setenv("DYNAMODB_MODE", "local")
        monkeypatch.setenv("DYNAMODB_ENDPOINT", "http://localhost:8000")

        store = DocumentStoreFactory.create_service(dynamodb_client=MagicMock())

        assert store.is_local() is True
        assert DocumentStoreFactory.get_current_mode() == LOCAL_MODE
        assert DocumentStoreFactory.is_local_mode() is True

    def test_default_mode(self, monkeypatch):
        monkeypatch.delenv("DYNAMODB_MODE", raising=False)

        assert DEFAULT_MODE == HOSTED_MODE
        assert DocumentStoreFactory.get_current_mode() == HOSTED_MODE

    def test_each_store_has_its_own_emitter(self, local_config):
        first = create_document_store(local_config, dynamodb_client=MagicMock())
        second = create_document_store(local_config, dynamodb_client=MagicMock())

        assert first.emitter is not second.emitter


@pytest.mark.unit
def test_package_lazy_exports():
    import dyndocs

    assert dyndocs.__version__
    assert dyndocs.create_document_store is create_document_store
    assert dyndocs.EventCategory.READ.value == "Read"
