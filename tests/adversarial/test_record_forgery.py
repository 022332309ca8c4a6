"""Adversarial tests — forging, mutating and resurrecting provenance records.

These tests verify that:
1. Records cannot be built outside the minting path
2. Minted records cannot be altered or cloned with new field values
3. Corrupted storage rows are rejected on load
4. Destroyed ids cannot be resurrected
"""

from __future__ import annotations

import sqlite3

import pytest
from pydantic import ValidationError

from provforge.core.manager import ProvenanceManager
from provforge.core.registry import RegistryIntegrityError
from provforge.core.sqlite_registry import SqliteRecordRegistry
from provforge.models.records import (
    ProvenanceRecord,
    RecordAuthorityError,
    _from_json,
)


class TestForgery:
    def test_forged_dict_rejected(self, minted):
        payload = minted.model_dump()
        payload["content_package_name"] = "Counterfeit"
        with pytest.raises(RecordAuthorityError):
            ProvenanceRecord(**payload)

    def test_forged_json_with_bad_root_rejected(self, minted):
        """Restoring never bypasses the field invariants."""
        forged = minted.to_json().replace(minted.merkle_root.hex(), "00" * 31)
        with pytest.raises(ValidationError):
            _from_json(forged)

    def test_clone_with_new_id_rejected(self, minted):
        with pytest.raises(RecordAuthorityError):
            minted.model_copy(update={"id": "0xclone"})

    def test_no_public_restore_path(self):
        for name in ("from_json", "from_storage", "restore"):
            assert not hasattr(ProvenanceRecord, name)

    def test_serialized_record_cannot_be_revalidated(self, minted):
        payload = minted.to_json().replace("Test Package", "Anything")
        with pytest.raises(RecordAuthorityError):
            ProvenanceRecord.model_validate_json(payload)

    def test_victim_survives_forged_destroy_attempt(self, registry, make_mint_args):
        manager = ProvenanceManager(registry)
        victim = manager.mint_and_send(**make_mint_args())
        with pytest.raises(RecordAuthorityError):
            forged = ProvenanceRecord.model_validate_json(
                victim.to_json().replace("Test Package", "Anything")
            )
            manager.destroy(forged)
        assert registry.get(victim.id) == victim


class TestStorageTampering:
    """Direct SQLite manipulation to simulate an attacker with DB access."""

    @pytest.fixture
    def stored(self, tmp_dir, make_mint_args):
        registry = SqliteRecordRegistry(tmp_dir / "registry.db")
        record = ProvenanceManager(registry).mint_and_send(**make_mint_args())
        return registry, record

    def _tamper(self, registry, sql, params):
        conn = sqlite3.connect(str(registry.db_path))
        conn.execute(sql, params)
        conn.commit()
        conn.close()

    def test_truncated_root_rejected_on_load(self, stored):
        registry, record = stored
        self._tamper(
            registry,
            "UPDATE records SET merkle_root = ? WHERE record_id = ?",
            (b"\x00\x01\x02", record.id),
        )
        with pytest.raises(ValidationError):
            registry.get(record.id)

    def test_blank_name_rejected_on_load(self, stored):
        registry, record = stored
        self._tamper(
            registry,
            "UPDATE records SET content_package_name = '' WHERE record_id = ?",
            (record.id,),
        )
        with pytest.raises(ValidationError):
            registry.get(record.id)


class TestResurrection:
    def test_destroyed_record_cannot_be_restored(self, tmp_dir, make_mint_args):
        registry = SqliteRecordRegistry(tmp_dir / "registry.db")
        manager = ProvenanceManager(registry)
        record = manager.mint_and_send(**make_mint_args())
        manager.delete(record)
        with pytest.raises(RegistryIntegrityError):
            registry.transfer(record, "0xa11ce")
        assert registry.get(record.id) is None

    def test_foreign_record_cannot_be_stored(self, registry, make_mint_args, tmp_dir):
        other = SqliteRecordRegistry(tmp_dir / "other.db")
        record = ProvenanceManager(other).mint(**make_mint_args())
        with pytest.raises(RegistryIntegrityError):
            registry.transfer(record, "0xa11ce")
