"""test_lambda_function.py — update_issue Lambda entry point.

Run: python3 -m pytest backend/lambda/update_issue/test_lambda_function.py -v
"""

from __future__ import annotations

import importlib.util
import json
import os
import sys
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "shared_layer", "python"))

_spec = importlib.util.spec_from_file_location(
    "update_issue",
    os.path.join(os.path.dirname(__file__), "lambda_function.py"),
)
update_issue = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(update_issue)

from issue_tracker_shared.models import CreateIssueRequest  # noqa: E402
from issue_tracker_shared.service import IssueService  # noqa: E402
from issue_tracker_shared.store import InMemoryIssueStore  # noqa: E402


class UpdateIssueLambdaTests(unittest.TestCase):
    def setUp(self):
        self.service = IssueService(InMemoryIssueStore())
        patcher = patch.object(update_issue, "_SERVICE", self.service)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.issue = self.service.create_issue(CreateIssueRequest("Bug", "Login fails", "High")).data

    def _event(self, body):
        return {"pathParameters": {"id": self.issue.id}, "body": json.dumps(body)}

    def test_partial_update(self):
        resp = update_issue.lambda_handler(self._event({"title": "Login bug", "status": None}), None)
        self.assertEqual(resp["statusCode"], 200)
        data = json.loads(resp["body"])["data"]
        self.assertEqual(data["title"], "Login bug")
        self.assertEqual(data["status"], "Open")
        self.assertEqual(data["description"], "Login fails")

    def test_invalid_priority(self):
        resp = update_issue.lambda_handler(self._event({"priority": "Urgent"}), None)
        self.assertEqual(resp["statusCode"], 400)
        self.assertEqual(json.loads(resp["body"])["error"]["code"], "VALIDATION_ERROR")

    def test_non_object_body(self):
        event = {"pathParameters": {"id": self.issue.id}, "body": "[1]"}
        resp = update_issue.lambda_handler(event, None)
        self.assertEqual(json.loads(resp["body"])["error"]["code"], "INVALID_BODY")


if __name__ == "__main__":
    unittest.main()
