# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

# Use true lazy loading for all submodules
__version__ = "0.1.0"

# Cache for lazy-loaded submodules
_submodules = {}


def __getattr__(name):
    """Lazy load submodules only when accessed"""
    if name in [
        "codec",
        "config",
        "dynamodb",
        "events",
        "metrics",
        "models",
        "utils",
        "docs_service",
    ]:
        if name not in _submodules:
            _submodules[name] = __import__(f"dyndocs.{name}", fromlist=[name])
        return _submodules[name]

    # Handle specific imports from the facade and models
    if name in ["create_document_store", "DocumentStoreFactory"]:
        if "docs_service" not in _submodules:
            _submodules["docs_service"] = __import__(
                "dyndocs.docs_service", fromlist=["docs_service"]
            )
        return getattr(_submodules["docs_service"], name)

    if name in ["DecodeResult", "EventCategory", "OperationEvent"]:
        if "models" not in _submodules:
            _submodules["models"] = __import__("dyndocs.models", fromlist=["models"])
        return getattr(_submodules["models"], name)

    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


# Define what should be available when using "from dyndocs import *"
__all__ = [
    "codec",
    "config",
    "dynamodb",
    "events",
    "metrics",
    "models",
    "utils",
    "docs_service",
    "create_document_store",
    "DocumentStoreFactory",
    "DecodeResult",
    "EventCategory",
    "OperationEvent",
]
