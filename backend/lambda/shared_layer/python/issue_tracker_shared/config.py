"""config.py — Environment variables, field limits, logging.

Values are read once at import (Lambda cold start). The composition root in
startup.py passes them on explicitly; nothing else reads the environment.
"""
from __future__ import annotations

import logging
import os

__all__ = [
    "CORS_ORIGIN",
    "DYNAMODB_ENDPOINT_URL",
    "DYNAMODB_REGION",
    "ISSUES_STATUS_INDEX",
    "ISSUES_TABLE_NAME",
    "LOG_LEVEL",
    "MAX_DESCRIPTION_LENGTH",
    "MAX_TITLE_LENGTH",
    "logger",
]


def _first_nonempty_env(*names: str) -> str:
    for name in names:
        value = str(os.environ.get(name, "")).strip()
        if value:
            return value
    return ""


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

ISSUES_TABLE_NAME = os.environ.get("ISSUES_TABLE_NAME", "IssueTrackerTable")
ISSUES_STATUS_INDEX = os.environ.get("ISSUES_STATUS_INDEX", "GSI1")
DYNAMODB_REGION = _first_nonempty_env("DYNAMODB_REGION", "AWS_REGION") or "us-east-1"
DYNAMODB_ENDPOINT_URL = _first_nonempty_env("DYNAMODB_ENDPOINT_URL") or None
CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "*")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

MAX_TITLE_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logger = logging.getLogger()
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
