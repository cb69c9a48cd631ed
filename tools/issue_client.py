#!/usr/bin/env python3
"""Command-line client for the Issue Tracker API.

Wraps the five HTTP operations and prints the response envelope as JSON.
The base URL comes from --base-url or ISSUE_API_URL.

Examples:
    python3 tools/issue_client.py list --status Open
    python3 tools/issue_client.py create --title Bug --description "Login fails" --priority High
    python3 tools/issue_client.py update <id> --status InProgress
    python3 tools/issue_client.py delete <id>
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Optional

DEFAULT_BASE_URL = os.environ.get("ISSUE_API_URL", "http://localhost:3000")
DEFAULT_TIMEOUT = 30


class IssueApiError(RuntimeError):
    """Transport failure or a non-JSON response."""


class IssueApiClient:
    def __init__(self, base_url: str = DEFAULT_BASE_URL, timeout: int = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def list_issues(self, status: Optional[str] = None) -> Dict[str, Any]:
        query = f"?{urllib.parse.urlencode({'status': status})}" if status else ""
        return self._request("GET", f"/issues{query}")

    def get_issue(self, issue_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/issues/{urllib.parse.quote(issue_id, safe='')}")

    def create_issue(self, title: str, description: str, priority: str) -> Dict[str, Any]:
        payload = {"title": title, "description": description, "priority": priority}
        return self._request("POST", "/issues", payload)

    def update_issue(self, issue_id: str, **fields: Any) -> Dict[str, Any]:
        payload = {k: v for k, v in fields.items() if v is not None}
        return self._request("PUT", f"/issues/{urllib.parse.quote(issue_id, safe='')}", payload)

    def delete_issue(self, issue_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/issues/{urllib.parse.quote(issue_id, safe='')}")

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(
            f"{self.base_url}{path}",
            data=data,
            method=method,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8")
        except urllib.error.HTTPError as exc:
            # Error responses still carry the {success, error} envelope.
            raw = exc.read().decode("utf-8", errors="replace")
            try:
                return json.loads(raw)
            except ValueError:
                raise IssueApiError(f"HTTP {exc.code}: {raw}") from exc
        except urllib.error.URLError as exc:
            raise IssueApiError(f"Request to {self.base_url} failed: {exc.reason}") from exc

        try:
            return json.loads(raw)
        except ValueError as exc:
            raise IssueApiError(f"Non-JSON response: {raw[:200]}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Issue Tracker API client.")
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL)
    parser.add_argument("--timeout", type=int, default=DEFAULT_TIMEOUT)
    sub = parser.add_subparsers(dest="command", required=True)

    p_list = sub.add_parser("list", help="List issues")
    p_list.add_argument("--status", choices=("Open", "InProgress", "Done"))

    p_get = sub.add_parser("get", help="Get one issue")
    p_get.add_argument("id")

    p_create = sub.add_parser("create", help="Create an issue")
    p_create.add_argument("--title", required=True)
    p_create.add_argument("--description", required=True)
    p_create.add_argument("--priority", choices=("Low", "Medium", "High"), default="Medium")

    p_update = sub.add_parser("update", help="Update fields of an issue")
    p_update.add_argument("id")
    p_update.add_argument("--title")
    p_update.add_argument("--description")
    p_update.add_argument("--status", choices=("Open", "InProgress", "Done"))
    p_update.add_argument("--priority", choices=("Low", "Medium", "High"))

    p_delete = sub.add_parser("delete", help="Delete an issue")
    p_delete.add_argument("id")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    client = IssueApiClient(args.base_url, timeout=args.timeout)

    try:
        if args.command == "list":
            result = client.list_issues(args.status)
        elif args.command == "get":
            result = client.get_issue(args.id)
        elif args.command == "create":
            result = client.create_issue(args.title, args.description, args.priority)
        elif args.command == "update":
            result = client.update_issue(
                args.id,
                title=args.title,
                description=args.description,
                status=args.status,
                priority=args.priority,
            )
        else:
            result = client.delete_issue(args.id)
    except IssueApiError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(result, indent=2))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    raise SystemExit(main())
