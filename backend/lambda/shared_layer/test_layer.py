"""test_layer.py — Unit tests for issue_tracker_shared models, validation,
serialization and HTTP helpers.

Run from the repository root:
    python3 -m pytest backend/lambda/shared_layer/test_layer.py -v
"""

from __future__ import annotations

import base64
import datetime as dt
import json
import os
import sys
import unittest
from unittest.mock import patch

# Ensure the layer's python/ directory is importable.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "python"))

from issue_tracker_shared.http_utils import (
    InvalidRequest,
    _error,
    _json_body,
    _path_method,
    _path_param,
    _query_param,
    _response,
    _result_response,
    _status_for_code,
)
from issue_tracker_shared.models import (
    ApiResult,
    CreateIssueRequest,
    ErrorCode,
    Issue,
    IssuePriority,
    IssueStatus,
    UpdateIssueRequest,
)
from issue_tracker_shared.serialization import (
    _deserialize,
    _emit_structured_observability,
    _format_ts,
    _parse_ts,
    _serialize,
)
from issue_tracker_shared.validation import join_violations, validate_create, validate_update

_T0 = dt.datetime(2024, 5, 1, 12, 0, 0, 123456, tzinfo=dt.timezone.utc)


def _issue(**overrides):
    fields = dict(
        id="abc",
        title="Bug",
        description="Login fails",
        status=IssueStatus.OPEN,
        priority=IssuePriority.HIGH,
        created_at=_T0,
        updated_at=_T0,
    )
    fields.update(overrides)
    return Issue(**fields)


class EnumTests(unittest.TestCase):
    def test_parse_canonical_and_case_insensitive(self):
        self.assertIs(IssueStatus.parse("InProgress"), IssueStatus.IN_PROGRESS)
        self.assertIs(IssueStatus.parse("inprogress"), IssueStatus.IN_PROGRESS)
        self.assertIs(IssuePriority.parse(" HIGH "), IssuePriority.HIGH)

    def test_parse_rejects_unknown_values(self):
        for bad in ("Closed", "", None, 1, "In Progress"):
            with self.assertRaises(ValueError):
                IssueStatus.parse(bad)
        with self.assertRaises(ValueError):
            IssuePriority.parse("Urgent")

    def test_parse_accepts_member(self):
        self.assertIs(IssuePriority.parse(IssuePriority.LOW), IssuePriority.LOW)


class ModelTests(unittest.TestCase):
    def test_issue_to_dict_wire_form(self):
        data = _issue().to_dict()
        self.assertEqual(
            data,
            {
                "id": "abc",
                "title": "Bug",
                "description": "Login fails",
                "status": "Open",
                "priority": "High",
                "createdAt": "2024-05-01T12:00:00.123456Z",
                "updatedAt": "2024-05-01T12:00:00.123456Z",
            },
        )

    def test_update_request_null_means_absent(self):
        req = UpdateIssueRequest.from_payload({"title": None, "status": "Done"})
        self.assertIsNone(req.title)
        self.assertTrue(req.has_changes())
        self.assertFalse(UpdateIssueRequest.from_payload({"other": 1}).has_changes())

    def test_result_envelope_success(self):
        body = ApiResult.ok(_issue()).to_dict()
        self.assertTrue(body["success"])
        self.assertEqual(body["data"]["id"], "abc")
        self.assertNotIn("error", body)

    def test_result_envelope_empty_list_is_kept(self):
        self.assertEqual(ApiResult.ok([]).to_dict(), {"success": True, "data": []})

    def test_result_envelope_failure(self):
        body = ApiResult.fail("Issue x not found", ErrorCode.NOT_FOUND).to_dict()
        self.assertEqual(
            body,
            {"success": False, "error": {"message": "Issue x not found", "code": "NOT_FOUND"}},
        )


class CreateValidationTests(unittest.TestCase):
    def test_valid_payload(self):
        req = CreateIssueRequest(title="Bug", description="Login fails", priority="High")
        self.assertEqual(validate_create(req), [])

    def test_boundary_lengths_are_valid(self):
        req = CreateIssueRequest(title="t" * 200, description="d" * 2000, priority="Low")
        self.assertEqual(validate_create(req), [])

    def test_missing_everything_reports_in_field_order(self):
        self.assertEqual(
            validate_create(CreateIssueRequest()),
            [
                "Title is required",
                "Description is required",
                "Invalid priority value. Must be: Low, Medium, or High",
            ],
        )

    def test_blank_title_is_required(self):
        req = CreateIssueRequest(title="   ", description="x", priority="Low")
        self.assertEqual(validate_create(req), ["Title is required"])

    def test_too_long_fields(self):
        req = CreateIssueRequest(title="t" * 201, description="d" * 2001, priority="Medium")
        self.assertEqual(
            validate_create(req),
            [
                "Title must not exceed 200 characters",
                "Description must not exceed 2000 characters",
            ],
        )

    def test_non_string_title(self):
        req = CreateIssueRequest(title=42, description="x", priority="Low")
        self.assertEqual(validate_create(req), ["Title must be a string"])

    def test_join_violations(self):
        self.assertEqual(join_violations(["a", "b"]), "a, b")


class UpdateValidationTests(unittest.TestCase):
    def test_no_fields_is_single_aggregate_violation(self):
        self.assertEqual(
            validate_update(UpdateIssueRequest()),
            ["At least one field must be provided for update"],
        )

    def test_status_only_is_valid(self):
        self.assertEqual(validate_update(UpdateIssueRequest(status="Done")), [])

    def test_each_supplied_field_is_checked_in_order(self):
        req = UpdateIssueRequest(title="", description="d" * 2001, status="Closed", priority="Urgent")
        self.assertEqual(
            validate_update(req),
            [
                "Title cannot be empty",
                "Description must not exceed 2000 characters",
                "Invalid status value. Must be: Open, InProgress, or Done",
                "Invalid priority value. Must be: Low, Medium, or High",
            ],
        )


class SerializationTests(unittest.TestCase):
    def test_serialize_string(self):
        self.assertEqual(_serialize("hello"), {"S": "hello"})

    def test_serialize_float(self):
        self.assertEqual(_serialize(3.14)["N"], "3.14")

    def test_deserialize_item(self):
        item = {"PK": {"S": "ISSUE#abc"}, "Title": {"S": "Bug"}}
        self.assertEqual(_deserialize(item), {"PK": "ISSUE#abc", "Title": "Bug"})

    def test_format_ts_is_fixed_width_utc(self):
        self.assertEqual(_format_ts(_T0), "2024-05-01T12:00:00.123456Z")
        naive = dt.datetime(2024, 5, 1, 12, 0, 0)
        self.assertEqual(_format_ts(naive), "2024-05-01T12:00:00.000000Z")

    def test_format_ts_converts_offsets(self):
        plus_two = dt.timezone(dt.timedelta(hours=2))
        self.assertEqual(
            _format_ts(dt.datetime(2024, 5, 1, 14, 0, 0, tzinfo=plus_two)),
            "2024-05-01T12:00:00.000000Z",
        )

    def test_parse_ts_round_trip(self):
        self.assertEqual(_parse_ts(_format_ts(_T0)), _T0)

    def test_parse_ts_accepts_seven_digit_fraction(self):
        parsed = _parse_ts("2024-05-01T12:00:00.1234567Z")
        self.assertEqual(parsed, _T0)

    def test_parse_ts_accepts_offset_and_no_fraction(self):
        parsed = _parse_ts("2024-05-01T14:00:00+02:00")
        self.assertEqual(parsed, dt.datetime(2024, 5, 1, 12, 0, tzinfo=dt.timezone.utc))

    def test_parse_ts_rejects_garbage(self):
        with self.assertRaises(ValueError):
            _parse_ts("yesterday")

    def test_structured_observability_logs_json(self):
        with self.assertLogs("issue_tracker_shared.serialization", level="INFO") as cm:
            _emit_structured_observability(
                component="issue_api", event="GetIssue", request_id="r1", status_code=404, error_code="NOT_FOUND"
            )
        line = cm.output[0]
        self.assertIn("[OBSERVABILITY]", line)
        payload = json.loads(line.split("[OBSERVABILITY] ", 1)[1])
        self.assertEqual(payload["status_code"], 404)
        self.assertEqual(payload["error_code"], "NOT_FOUND")


class HttpUtilsTests(unittest.TestCase):
    def test_response_format(self):
        resp = _response(200, {"key": "val"})
        self.assertEqual(resp["statusCode"], 200)
        self.assertEqual(resp["headers"]["Content-Type"], "application/json")
        self.assertEqual(resp["headers"]["Access-Control-Allow-Origin"], "*")
        self.assertEqual(json.loads(resp["body"]), {"key": "val"})

    def test_error_format(self):
        resp = _error(400, "Invalid request body", ErrorCode.INVALID_BODY)
        self.assertEqual(resp["statusCode"], 400)
        body = json.loads(resp["body"])
        self.assertFalse(body["success"])
        self.assertEqual(body["error"], {"message": "Invalid request body", "code": "INVALID_BODY"})

    def test_status_for_code(self):
        self.assertEqual(_status_for_code(ErrorCode.NOT_FOUND), 404)
        self.assertEqual(_status_for_code(ErrorCode.VALIDATION_ERROR), 400)
        self.assertEqual(_status_for_code(ErrorCode.INVALID_ID), 400)
        self.assertEqual(_status_for_code(ErrorCode.CREATE_ERROR), 500)
        self.assertEqual(_status_for_code(ErrorCode.LIST_ERROR), 500)
        self.assertEqual(_status_for_code(None), 500)

    def test_result_response_uses_success_status(self):
        resp = _result_response(ApiResult.ok(True), success_status=201)
        self.assertEqual(resp["statusCode"], 201)
        self.assertEqual(json.loads(resp["body"]), {"success": True, "data": True})

    def test_json_body(self):
        self.assertEqual(_json_body({"body": '{"key": "val"}'}), {"key": "val"})

    def test_json_body_base64(self):
        raw = base64.b64encode(b'{"key": "b64"}').decode()
        self.assertEqual(_json_body({"body": raw, "isBase64Encoded": True}), {"key": "b64"})

    def test_json_body_invalid_json(self):
        with self.assertRaises(InvalidRequest) as cm:
            _json_body({"body": "{not json"})
        self.assertEqual(cm.exception.code, ErrorCode.INVALID_JSON)

    def test_json_body_too_deeply_nested_is_invalid_json(self):
        raw = '{"title": "Bug", "extra": ' + "[" * 100000 + "]" * 100000 + "}"
        with self.assertRaises(InvalidRequest) as cm:
            _json_body({"body": raw})
        self.assertEqual(cm.exception.code, ErrorCode.INVALID_JSON)
        self.assertEqual(cm.exception.status_code, 400)

    def test_json_body_missing_null_or_non_object(self):
        for body in (None, "", "null", "[1, 2]", '"text"'):
            with self.assertRaises(InvalidRequest) as cm:
                _json_body({"body": body})
            self.assertEqual(cm.exception.code, ErrorCode.INVALID_BODY, body)

    def test_path_method_v2(self):
        event = {"requestContext": {"http": {"method": "post"}}, "rawPath": "/issues"}
        self.assertEqual(_path_method(event), ("POST", "/issues"))

    def test_path_method_v1(self):
        self.assertEqual(_path_method({"httpMethod": "GET", "path": "/issues/1"}), ("GET", "/issues/1"))

    def test_path_and_query_params(self):
        event = {"pathParameters": {"id": "abc"}, "queryStringParameters": None}
        self.assertEqual(_path_param(event, "id"), "abc")
        self.assertIsNone(_query_param(event, "status"))

    def test_cors_origin_is_configurable(self):
        with patch("issue_tracker_shared.http_utils.CORS_ORIGIN", "https://issues.example.com"):
            resp = _response(200, {})
        self.assertEqual(resp["headers"]["Access-Control-Allow-Origin"], "https://issues.example.com")


if __name__ == "__main__":
    unittest.main()
