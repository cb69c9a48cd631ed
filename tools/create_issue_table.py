#!/usr/bin/env python3
"""Provision the Issue Tracker DynamoDB single table.

Creates the table with string PK/SK keys and the GSI1 status index
(GSI1PK = STATUS#<status>, GSI1SK = createdAt) used for status-ordered
listing. On-demand billing. An existing table is reported, not an error.

Examples:
    python3 tools/create_issue_table.py --table IssueTrackerTable --region us-east-1
    python3 tools/create_issue_table.py --endpoint-url http://localhost:8000 --wait
"""

from __future__ import annotations

import argparse
import json
import os
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

DEFAULT_TABLE = os.environ.get("ISSUES_TABLE_NAME", "IssueTrackerTable")
DEFAULT_INDEX = os.environ.get("ISSUES_STATUS_INDEX", "GSI1")
DEFAULT_REGION = os.environ.get("DYNAMODB_REGION") or os.environ.get("AWS_REGION") or "us-east-1"


def _log(tag: str, message: str) -> None:
    print(f"[{tag}] {message}")


def table_definition(table_name: str, index_name: str = DEFAULT_INDEX) -> Dict[str, Any]:
    return {
        "TableName": table_name,
        "BillingMode": "PAY_PER_REQUEST",
        "AttributeDefinitions": [
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
            {"AttributeName": "GSI1PK", "AttributeType": "S"},
            {"AttributeName": "GSI1SK", "AttributeType": "S"},
        ],
        "KeySchema": [
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        "GlobalSecondaryIndexes": [
            {
                "IndexName": index_name,
                "KeySchema": [
                    {"AttributeName": "GSI1PK", "KeyType": "HASH"},
                    {"AttributeName": "GSI1SK", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
    }


def create_table(ddb, table_name: str, index_name: str = DEFAULT_INDEX, *, wait: bool = False) -> bool:
    """Create the table. Returns True if created, False if it already existed."""
    try:
        ddb.create_table(**table_definition(table_name, index_name))
    except ClientError as exc:
        if exc.response.get("Error", {}).get("Code") == "ResourceInUseException":
            _log("INFO", f"Table {table_name} already exists")
            return False
        raise
    _log("INFO", f"Create requested for table {table_name}")
    if wait:
        ddb.get_waiter("table_exists").wait(TableName=table_name)
        _log("INFO", f"Table {table_name} is active")
    return True


def _client(region: str, endpoint_url: Optional[str]):
    kwargs: Dict[str, Any] = {
        "region_name": region,
        "config": Config(retries={"max_attempts": 3, "mode": "standard"}),
    }
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    return boto3.client("dynamodb", **kwargs)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create the Issue Tracker DynamoDB table.")
    parser.add_argument("--table", default=DEFAULT_TABLE)
    parser.add_argument("--index", default=DEFAULT_INDEX)
    parser.add_argument("--region", default=DEFAULT_REGION)
    parser.add_argument("--endpoint-url", default=os.environ.get("DYNAMODB_ENDPOINT_URL", ""))
    parser.add_argument("--wait", action="store_true", help="Block until the table is ACTIVE.")
    parser.add_argument("--dry-run", action="store_true", help="Print the CreateTable request only.")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.dry_run:
        print(json.dumps(table_definition(args.table, args.index), indent=2))
        return 0

    ddb = _client(args.region, args.endpoint_url or None)
    try:
        create_table(ddb, args.table, args.index, wait=args.wait)
    except (ClientError, BotoCoreError) as exc:
        _log("ERROR", f"Failed to create table {args.table}: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
