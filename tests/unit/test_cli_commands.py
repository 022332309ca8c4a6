"""Unit tests for the CLI — command registration and end-to-end record flow."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from provforge.cli.app import app
from provforge.core.sqlite_registry import SqliteRecordRegistry
from provforge.models.records import RecordState

from conftest import MANIFEST_HASH, MERKLE_ROOT

runner = CliRunner(env={"COLUMNS": "200"})


@pytest.fixture
def paths(tmp_dir: Path) -> dict[str, Path]:
    return {"registry": tmp_dir / "registry.db", "audit": tmp_dir / "audit.jsonl"}


def _mint(paths, *extra: str, sender: str = "0xa11ce", merkle_root: str = MERKLE_ROOT.hex()):
    return runner.invoke(
        app,
        [
            "mint",
            "--name", "Test Package",
            "--merkle-root", merkle_root,
            "--package-ref", "package_blob_id",
            "--manifest-hash", MANIFEST_HASH.hex(),
            "--manifest-ref", "manifest_blob_id",
            "--manifest-version", "1.4",
            "--sender", sender,
            "--registry", str(paths["registry"]),
            "--audit-log", str(paths["audit"]),
            *extra,
        ],
    )


class TestCliApp:
    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("mint", "show", "list", "destroy", "lineage"):
            assert command in result.output

    @pytest.mark.parametrize("command", ["mint", "show", "list", "destroy", "lineage"])
    def test_command_help(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0


class TestMintCommand:
    def test_mint_stores_and_audits(self, paths):
        result = _mint(paths)
        assert result.exit_code == 0, result.output

        [record] = SqliteRecordRegistry(paths["registry"]).list_records()
        assert record.content_package_name == "Test Package"
        assert record.merkle_root == MERKLE_ROOT
        assert record.package_storage_blob_ref == b"package_blob_id"
        assert record.manifest_version == "1.4"

        [event] = [json.loads(line) for line in paths["audit"].read_text().splitlines()]
        assert event["record_id"] == record.id
        assert event["minter"] == "0xa11ce"

    def test_short_root_fails(self, paths):
        result = _mint(paths, merkle_root="abcdef")
        assert result.exit_code == 1
        assert "InvalidMerkleRootLength" in result.output
        assert SqliteRecordRegistry(paths["registry"]).list_records() == []
        assert not paths["audit"].exists() or paths["audit"].read_text() == ""

    def test_bad_hex_fails(self, paths):
        result = _mint(paths, merkle_root="zz")
        assert result.exit_code == 2


class TestRecordCommands:
    def test_show_json(self, paths):
        _mint(paths)
        [record] = SqliteRecordRegistry(paths["registry"]).list_records()
        result = runner.invoke(
            app, ["show", record.id, "--json", "--registry", str(paths["registry"])]
        )
        assert result.exit_code == 0
        assert json.loads(result.output)["id"] == record.id

    def test_show_missing(self, paths):
        result = runner.invoke(app, ["show", "0xnope", "--registry", str(paths["registry"])])
        assert result.exit_code == 1

    def test_list(self, paths):
        _mint(paths)
        result = runner.invoke(app, ["list", "--registry", str(paths["registry"])])
        assert result.exit_code == 0
        assert "Test Package" in result.output

    def test_list_empty(self, paths):
        result = runner.invoke(app, ["list", "--registry", str(paths["registry"])])
        assert result.exit_code == 0
        assert "No records" in result.output

    def test_destroy_by_owner(self, paths):
        _mint(paths)
        registry = SqliteRecordRegistry(paths["registry"])
        [record] = registry.list_records()
        result = runner.invoke(
            app,
            [
                "destroy", record.id,
                "--sender", "0xa11ce",
                "--registry", str(paths["registry"]),
                "--audit-log", str(paths["audit"]),
            ],
        )
        assert result.exit_code == 0
        assert registry.get(record.id) is None
        assert registry.state_of(record.id) is RecordState.DESTROYED

    def test_destroy_by_non_owner_refused(self, paths):
        _mint(paths)
        registry = SqliteRecordRegistry(paths["registry"])
        [record] = registry.list_records()
        result = runner.invoke(
            app,
            [
                "destroy", record.id,
                "--sender", "0xmallory",
                "--registry", str(paths["registry"]),
                "--audit-log", str(paths["audit"]),
            ],
        )
        assert result.exit_code == 1
        assert registry.get(record.id) == record

    def test_lineage(self, paths):
        _mint(paths)
        registry = SqliteRecordRegistry(paths["registry"])
        [parent] = registry.list_records()
        _mint(paths, "--parent", parent.id)
        child = next(r for r in registry.list_records() if r.id != parent.id)
        result = runner.invoke(app, ["lineage", child.id, "--registry", str(paths["registry"])])
        assert result.exit_code == 0
        assert parent.id in result.output
        assert child.id in result.output
