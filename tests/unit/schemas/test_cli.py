"""
Tests for the command line entry point.
"""

import io
import json
import logging

import pytest

from core.config import settings
from core.logging import StructuredFormatter
from schemas.cli import main


@pytest.fixture
def cli(registry, restore_root_logger):
    """Run the CLI, returning (exit status, stdout, stderr)."""

    def run(capsys, *argv):
        status = main(list(argv))
        captured = capsys.readouterr()
        return status, captured.out, captured.err

    return run


class TestList:
    """Test listing schema names."""

    def test_all_names(self, cli, capsys, registry):
        status, out, _ = cli(capsys, "list")
        assert status == 0
        assert out.splitlines() == registry.names()

    def test_one_entity(self, cli, capsys):
        status, out, _ = cli(capsys, "list", "--entity", "User")
        names = out.splitlines()
        assert status == 0
        assert "UserWhereUniqueInput" in names
        assert "JobWhereInput" not in names

    def test_unknown_entity(self, cli, capsys):
        status, _, err = cli(capsys, "list", "--entity", "Applicant")
        assert status == 2
        assert "Unknown entity: Applicant" in err


class TestValidate:
    """Test validating payloads."""

    def test_valid_file(self, cli, capsys, tmp_path, candidate_create_payload):
        path = tmp_path / "candidate.json"
        path.write_text(json.dumps(candidate_create_payload))
        status, out, _ = cli(capsys, "validate", "CandidateCreateInput", str(path))
        output = json.loads(out)
        assert status == 0
        assert output["ok"] is True
        assert output["data"] == candidate_create_payload
        assert output["issues"] == []

    def test_invalid_from_stdin(self, cli, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO('{"name": "Jane"}'))
        status, out, _ = cli(capsys, "validate", "UserWhereUniqueInput")
        output = json.loads(out)
        assert status == 1
        assert output["ok"] is False
        assert output["issues"][0]["kind"] == "uniqueness_violation"

    def test_generated_values_serialized(self, cli, capsys, tmp_path):
        path = tmp_path / "user.json"
        path.write_text(json.dumps({
            "name": "Jane", "email": "jane@acme.io", "phone": "+14155550123", "password": "s3cretpw",
        }))
        status, out, _ = cli(capsys, "validate", "UserOptionalDefaults", str(path))
        data = json.loads(out)["data"]
        assert status == 0
        assert data["role"] == "USER"
        assert isinstance(data["createdAt"], str)

    def test_unknown_schema(self, cli, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("{}"))
        status, _, err = cli(capsys, "validate", "NoSuchInput")
        assert status == 2
        assert "NoSuchInput" in err

    def test_malformed_json(self, cli, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("{not json"))
        status, _, err = cli(capsys, "validate", "UserWhereInput")
        assert status == 2
        assert "Invalid JSON" in err


class TestLoggingSetup:
    """Test that the CLI configures logging from settings."""

    def test_plain_logs(self, cli, capsys, monkeypatch):
        monkeypatch.setattr(settings, "json_logs", False)
        monkeypatch.setattr(settings, "debug", False)
        monkeypatch.setattr(settings, "log_level", "WARNING")
        cli(capsys, "list", "--entity", "User")
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_json_logs(self, cli, capsys, monkeypatch):
        monkeypatch.setattr(settings, "json_logs", True)
        monkeypatch.setattr(settings, "debug", False)
        monkeypatch.setattr(settings, "log_level", "INFO")
        _, _, err = cli(capsys, "list", "--entity", "User")
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        record = json.loads(err.splitlines()[0])
        assert record["message"] == f"Starting {settings.app_name} in {settings.app_env} environment"

    def test_debug_forces_debug_level(self, cli, capsys, monkeypatch):
        monkeypatch.setattr(settings, "debug", True)
        monkeypatch.setattr(settings, "log_level", "ERROR")
        cli(capsys, "list", "--entity", "User")
        assert logging.getLogger().level == logging.DEBUG
