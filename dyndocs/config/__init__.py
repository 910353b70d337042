# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import os
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"

_TRUE_VALUES = ("true", "1", "yes", "on")


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    return bool(value)


@dataclass
class DynamoDBConfig:
    """
    Connection settings for the DynamoDB document store.

    In local (development) mode the store is reached through an explicit
    endpoint with explicit credentials, e.g. DynamoDB Local. In hosted mode
    only the region is passed to boto3; the endpoint and credentials come
    from the execution environment.
    """

    region: str = DEFAULT_REGION
    endpoint: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    local: bool = False

    def __post_init__(self):
        if self.local and not self.endpoint:
            raise ValueError(
                "DynamoDB endpoint must be provided in local mode. "
                "Set DYNAMODB_ENDPOINT or pass endpoint explicitly."
            )

    @classmethod
    def from_env(cls, **overrides) -> "DynamoDBConfig":
        """
        Build a configuration from environment variables

        Args:
            **overrides: Values taking precedence over the environment

        Returns:
            DynamoDBConfig instance
        """
        values = {
            "region": os.environ.get("AWS_REGION", DEFAULT_REGION),
            "endpoint": os.environ.get("DYNAMODB_ENDPOINT"),
            "access_key_id": os.environ.get("DYNAMODB_ACCESS_KEY_ID"),
            "secret_access_key": os.environ.get("DYNAMODB_SECRET_ACCESS_KEY"),
            "local": os.environ.get("DYNAMODB_MODE", "hosted").strip().lower() == "local",
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DynamoDBConfig":
        """
        Build a configuration from a dictionary.

        Accepts either a flat dictionary or one nested under a "dynDB" key,
        with camelCase (accessKeyId) or snake_case (access_key_id) names.
        """
        if not data:
            raise ValueError("Cannot create DynamoDBConfig from empty data")

        section = data.get("dynDB", data)
        return cls(
            region=section.get("region") or DEFAULT_REGION,
            endpoint=section.get("endpoint"),
            access_key_id=section.get("accessKeyId", section.get("access_key_id")),
            secret_access_key=section.get(
                "secretAccessKey", section.get("secret_access_key")
            ),
            local=_as_bool(section.get("local", False)),
        )

    def is_local(self) -> bool:
        return self.local

    def to_client_kwargs(self) -> Dict[str, Any]:
        """
        Keyword arguments for boto3.client("dynamodb", ...)

        Endpoint and credentials are only used in local mode.
        """
        kwargs: Dict[str, Any] = {"region_name": self.region}
        if self.local:
            kwargs["endpoint_url"] = self.endpoint
            kwargs["aws_access_key_id"] = self.access_key_id
            kwargs["aws_secret_access_key"] = self.secret_access_key
        return kwargs


def get_config(config: Optional[Any] = None) -> DynamoDBConfig:
    """
    Resolve a DynamoDBConfig from an instance, a dictionary or the environment

    Args:
        config: DynamoDBConfig, configuration dictionary, or None to read the environment

    Returns:
        DynamoDBConfig instance
    """
    if isinstance(config, DynamoDBConfig):
        return config
    if isinstance(config, dict):
        return DynamoDBConfig.from_dict(config)
    if config is not None:
        raise TypeError(f"Unsupported configuration type: {type(config).__name__}")
    resolved = DynamoDBConfig.from_env()
    logger.info(
        f"Loaded DynamoDB configuration from environment (region={resolved.region}, local={resolved.local})"
    )
    return resolved
