"""list_issues/lambda_function.py — GET /issues?status=

List issues, optionally only one status (oldest first).

Environment variables:
  ISSUES_TABLE_NAME       default: IssueTrackerTable
  ISSUES_STATUS_INDEX     default: GSI1
  DYNAMODB_REGION         default: $AWS_REGION, then us-east-1
  CORS_ORIGIN             default: *
"""

from __future__ import annotations

from typing import Any, Dict

from issue_tracker_shared.handlers import handle_list
from issue_tracker_shared.startup import build_issue_service

# Built once per cold start.
_SERVICE = build_issue_service()


def lambda_handler(event: Dict, context: Any) -> Dict:
    return handle_list(event, _SERVICE, context)
