"""aws_clients.py — DynamoDB client construction.

The client is built once by the composition root (startup.py) at cold start
and handed to the store; there is no module-level singleton.
"""
from __future__ import annotations

from typing import Optional

import boto3
from botocore.config import Config

from .config import DYNAMODB_ENDPOINT_URL, DYNAMODB_REGION

__all__ = ["_new_ddb_client"]

# Failures surface to the caller immediately; the pipeline never retries.
_NO_RETRY = Config(retries={"max_attempts": 1, "mode": "standard"})


def _new_ddb_client(region: Optional[str] = None, endpoint_url: Optional[str] = None):
    """Create a low-level DynamoDB client."""
    kwargs = {
        "region_name": region or DYNAMODB_REGION,
        "config": _NO_RETRY,
    }
    endpoint = endpoint_url or DYNAMODB_ENDPOINT_URL
    if endpoint:
        kwargs["endpoint_url"] = endpoint
    return boto3.client("dynamodb", **kwargs)
