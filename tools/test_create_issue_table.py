import importlib.util
import json
import pathlib
import sys
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError


MODULE_PATH = pathlib.Path(__file__).with_name("create_issue_table.py")
SPEC = importlib.util.spec_from_file_location("issue_tracker_create_table_unit", MODULE_PATH)
create_issue_table = importlib.util.module_from_spec(SPEC)
assert SPEC and SPEC.loader
sys.modules[SPEC.name] = create_issue_table
SPEC.loader.exec_module(create_issue_table)


def _client_error(code):
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, "CreateTable")


def test_table_definition_has_status_index():
    definition = create_issue_table.table_definition("Issues", "GSI1")
    assert definition["TableName"] == "Issues"
    assert definition["BillingMode"] == "PAY_PER_REQUEST"
    assert [k["AttributeName"] for k in definition["KeySchema"]] == ["PK", "SK"]
    (gsi,) = definition["GlobalSecondaryIndexes"]
    assert gsi["IndexName"] == "GSI1"
    assert [k["AttributeName"] for k in gsi["KeySchema"]] == ["GSI1PK", "GSI1SK"]
    assert gsi["Projection"] == {"ProjectionType": "ALL"}


def test_create_table_waits_when_asked():
    ddb = MagicMock()
    assert create_issue_table.create_table(ddb, "Issues", wait=True) is True
    ddb.create_table.assert_called_once()
    ddb.get_waiter.assert_called_once_with("table_exists")
    ddb.get_waiter.return_value.wait.assert_called_once_with(TableName="Issues")


def test_existing_table_is_not_an_error():
    ddb = MagicMock()
    ddb.create_table.side_effect = _client_error("ResourceInUseException")
    assert create_issue_table.create_table(ddb, "Issues") is False


def test_other_errors_propagate():
    ddb = MagicMock()
    ddb.create_table.side_effect = _client_error("AccessDeniedException")
    with pytest.raises(ClientError):
        create_issue_table.create_table(ddb, "Issues")


def test_main_dry_run_prints_request(capsys):
    with patch.object(create_issue_table, "_client") as client:
        assert create_issue_table.main(["--table", "Issues", "--dry-run"]) == 0
    client.assert_not_called()
    assert json.loads(capsys.readouterr().out)["TableName"] == "Issues"


def test_main_reports_failure():
    ddb = MagicMock()
    ddb.create_table.side_effect = _client_error("AccessDeniedException")
    with patch.object(create_issue_table, "_client", return_value=ddb):
        assert create_issue_table.main(["--table", "Issues", "--endpoint-url", "http://localhost:8000"]) == 1
