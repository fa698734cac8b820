"""Tests for utils/output.py — JSON/table output routing."""
import json

from freebox_dashboard.models.api import ApiResponse
from freebox_dashboard.utils.output import OutputFormat, print_json, print_output, to_data


# ── to_data ──────────────────────────────────────────────────────────

def test_to_data_model():
    assert to_data(ApiResponse(success=True, result=1)) == {
        "success": True, "result": 1, "error_code": None, "msg": None,
    }


def test_to_data_list_of_models():
    data = to_data([ApiResponse.failure("nodev")])
    assert data[0]["error_code"] == "nodev"


def test_to_data_passthrough():
    assert to_data({"a": 1}) == {"a": 1}


# ── print_json ───────────────────────────────────────────────────────

def test_print_json_dict(capsys):
    print_json({"key": "value"})
    assert json.loads(capsys.readouterr().out) == {"key": "value"}


def test_print_json_model(capsys):
    print_json(ApiResponse.failure("auth_required", "Not logged in"))
    data = json.loads(capsys.readouterr().out)
    assert data["msg"] == "Not logged in"


# ── print_output routing ─────────────────────────────────────────────

def test_print_output_json(capsys):
    print_output([{"id": 1}], OutputFormat.JSON)
    assert json.loads(capsys.readouterr().out) == [{"id": 1}]


def test_print_output_table_goes_to_stderr(capsys):
    print_output([{"name": "plex", "status": "running"}], OutputFormat.TABLE, title="VMs")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "plex" in captured.err


def test_print_output_table_dict(capsys):
    print_output({"model": "ultra", "permissions": {"settings": True}}, OutputFormat.TABLE)
    err = capsys.readouterr().err
    assert "model" in err
    assert "ultra" in err


def test_print_output_table_selected_columns(capsys):
    print_output([{"name": "plex", "secret": "hidden"}], OutputFormat.TABLE, columns=["name"])
    err = capsys.readouterr().err
    assert "plex" in err
    assert "hidden" not in err


def test_print_output_table_empty(capsys):
    print_output([], OutputFormat.TABLE)
    assert "No results." in capsys.readouterr().err
