# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

"""
Document store factory module for the dyndocs package.

This module provides a factory to create document stores based on the
DYNAMODB_MODE environment variable. It switches between a local development
endpoint with explicit credentials and the hosted regional endpoint with
credentials supplied by the execution environment.
"""

import os
import logging
from typing import Any, Dict, Optional, Union

from dyndocs.config import DynamoDBConfig, get_config
from dyndocs.dynamodb import DocumentDynamoDBService, DynamoDBClient

logger = logging.getLogger(__name__)

# Supported store modes
LOCAL_MODE = "local"
HOSTED_MODE = "hosted"
SUPPORTED_MODES = [LOCAL_MODE, HOSTED_MODE]

# Default mode
DEFAULT_MODE = HOSTED_MODE


class DocumentStoreFactory:
    """
    Factory class for creating document stores based on configuration.
    """

    @staticmethod
    def create_service(
        mode: Optional[str] = None,
        config: Optional[Union[DynamoDBConfig, Dict[str, Any]]] = None,
        dynamodb_client: Optional[Any] = None,
    ) -> DocumentDynamoDBService:
        """
        Create a document store for the specified mode.

        Args:
            mode: Optional mode override. If not provided, uses the local flag of
                  the configuration (DYNAMODB_MODE when read from the environment)
            config: Optional DynamoDBConfig or configuration dictionary. If not
                    provided, configuration is read from the environment
            dynamodb_client: Optional pre-configured boto3 dynamodb client

        Returns:
            DocumentDynamoDBService instance

        Raises:
            ValueError: If an unsupported mode is specified

        Examples:
            # Use environment variables (default behavior)
            store = DocumentStoreFactory.create_service()

            # Local development endpoint
            store = DocumentStoreFactory.create_service(
                mode='local',
                config={'endpoint': 'http://localhost:8000', 'region': 'us-east-1'}
            )
        """
        resolved = get_config(config)

        # Determine the mode
        if mode is None:
            mode = LOCAL_MODE if resolved.local else HOSTED_MODE
        else:
            mode = mode.lower()

        # Validate mode
        if mode not in SUPPORTED_MODES:
            raise ValueError(
                f"Unsupported document store mode: '{mode}'. "
                f"Supported modes are: {', '.join(SUPPORTED_MODES)}"
            )

        if (mode == LOCAL_MODE) != resolved.local:
            resolved = DynamoDBConfig(
                region=resolved.region,
                endpoint=resolved.endpoint,
                access_key_id=resolved.access_key_id,
                secret_access_key=resolved.secret_access_key,
                local=mode == LOCAL_MODE,
            )

        logger.info(f"Creating document store with mode: {mode}")

        client = DynamoDBClient(config=resolved, dynamodb_client=dynamodb_client)
        return DocumentDynamoDBService(dynamodb_client=client)

    @staticmethod
    def get_current_mode() -> str:
        """
        Get the current store mode from environment variable.

        Returns:
            Current mode string ('local' or 'hosted')
        """
        return os.environ.get("DYNAMODB_MODE", DEFAULT_MODE).lower()

    @staticmethod
    def is_local_mode() -> bool:
        return DocumentStoreFactory.get_current_mode() == LOCAL_MODE


# Convenience function for creating stores
def create_document_store(
    config: Optional[Union[DynamoDBConfig, Dict[str, Any]]] = None,
    mode: Optional[str] = None,
    **kwargs
) -> DocumentDynamoDBService:
    """
    Convenience function to create a document store.

    This is a shorthand for DocumentStoreFactory.create_service().

    Examples:
        store = create_document_store({'dynDB': {'region': 'eu-west-1'}})
        await store.put_item('req-1', 'flags', {'id': 'k1'}, {'enabled': True})
    """
    return DocumentStoreFactory.create_service(mode=mode, config=config, **kwargs)


__all__ = [
    "DocumentStoreFactory",
    "create_document_store",
    "LOCAL_MODE",
    "HOSTED_MODE",
    "DEFAULT_MODE",
]
