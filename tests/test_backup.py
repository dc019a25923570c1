"""Tests for the backup manager."""

import json
import os
import stat

import pytest

from claudeswitch.backup import BackupManager, decode_backup
from claudeswitch.errors import BackupParseError
from claudeswitch.provider import Provider


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


class TestDecodeBackup:
    def test_current_format(self):
        record = decode_backup({
            "_metadata": {"provider": "anthropic", "created_at": "2025-01-01T00:00:00Z", "version": "0.1.0"},
            "env": {"ANTHROPIC_AUTH_TOKEN": "web"},
        })
        assert record.provider == Provider.ANTHROPIC
        assert record.metadata.created_at == "2025-01-01T00:00:00Z"
        assert record.env == {"ANTHROPIC_AUTH_TOKEN": "web"}

    def test_legacy_format_implies_anthropic(self):
        record = decode_backup({"env": {"ANTHROPIC_AUTH_TOKEN": "old"}})
        assert record.provider == Provider.ANTHROPIC
        assert record.metadata.created_at == ""
        assert record.env == {"ANTHROPIC_AUTH_TOKEN": "old"}

    @pytest.mark.parametrize("provider", ["openai", ""])
    def test_foreign_provider_is_not_anthropic(self, provider):
        record = decode_backup({
            "_metadata": {"provider": provider, "created_at": "t", "version": "v"},
            "env": {"ANTHROPIC_AUTH_TOKEN": "foreign"},
        })
        assert record.provider == Provider.UNKNOWN
        assert record.env == {"ANTHROPIC_AUTH_TOKEN": "foreign"}

    def test_invalid_metadata_does_not_fall_back_to_legacy(self):
        with pytest.raises(BackupParseError):
            decode_backup({"_metadata": {"provider": "anthropic", "created_at": 5}, "env": {"A": "1"}})

    def test_metadata_without_provider_fails(self):
        with pytest.raises(BackupParseError):
            decode_backup({"_metadata": {}, "env": {"A": "1"}})

    def test_unrelated_document_fails(self):
        with pytest.raises(BackupParseError):
            decode_backup({"something": "else"})

    def test_non_object_fails(self):
        with pytest.raises(BackupParseError):
            decode_backup(["env"])


class TestBackupManager:
    def test_no_backup(self, context):
        manager = BackupManager(context)
        assert manager.has_valid_restore_target() == (False, None)
        assert not manager.exists()

    def test_create_backup_stamps_metadata(self, context):
        manager = BackupManager(context)
        record = manager.create_backup({"ANTHROPIC_AUTH_TOKEN": "web"}, Provider.ANTHROPIC)

        assert record.metadata.created_at == "2025-01-02T03:04:05+08:00"
        assert record.metadata.version == context.version

        data = json.loads(context.backup_path.read_text(encoding="utf-8"))
        assert data["_metadata"] == {
            "provider": "anthropic",
            "created_at": "2025-01-02T03:04:05+08:00",
            "version": context.version,
        }
        assert data["env"] == {"ANTHROPIC_AUTH_TOKEN": "web"}

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions expected")
    def test_backup_file_is_owner_only(self, context):
        BackupManager(context).create_backup({"A": "1"}, Provider.ANTHROPIC)
        assert stat.S_IMODE(context.backup_path.stat().st_mode) == 0o600

    def test_valid_anthropic_backup(self, context):
        manager = BackupManager(context)
        manager.create_backup({"ANTHROPIC_AUTH_TOKEN": "web"}, Provider.ANTHROPIC)

        valid, record = manager.has_valid_restore_target()
        assert valid is True
        assert record.env["ANTHROPIC_AUTH_TOKEN"] == "web"

    def test_non_anthropic_backup_is_returned_but_not_valid(self, context):
        manager = BackupManager(context)
        manager.create_backup({"ANTHROPIC_BASE_URL": "https://proxy"}, Provider.CUSTOM)

        valid, record = manager.has_valid_restore_target()
        assert valid is False
        assert record is not None
        assert record.provider == Provider.CUSTOM

    def test_create_backup_overwrites(self, context):
        manager = BackupManager(context)
        manager.create_backup({"ANTHROPIC_AUTH_TOKEN": "first"}, Provider.ANTHROPIC)
        manager.create_backup({"ANTHROPIC_AUTH_TOKEN": "second"}, Provider.ANTHROPIC)

        _, record = manager.has_valid_restore_target()
        assert record.env["ANTHROPIC_AUTH_TOKEN"] == "second"

    def test_legacy_backup_on_disk(self, context):
        _write(context.backup_path, {"env": {"ANTHROPIC_AUTH_TOKEN": "legacy"}})
        valid, record = BackupManager(context).has_valid_restore_target()
        assert valid is True
        assert record.env["ANTHROPIC_AUTH_TOKEN"] == "legacy"

    def test_foreign_backup_is_not_restorable(self, context):
        _write(context.backup_path, {
            "_metadata": {"provider": "openai", "created_at": "t", "version": "v"},
            "env": {"ANTHROPIC_AUTH_TOKEN": "foreign"},
        })
        valid, record = BackupManager(context).has_valid_restore_target()
        assert valid is False
        assert record.provider == Provider.UNKNOWN

    def test_invalid_json_on_disk(self, context):
        context.backup_path.parent.mkdir(parents=True, exist_ok=True)
        context.backup_path.write_text("{broken", encoding="utf-8")
        with pytest.raises(BackupParseError):
            BackupManager(context).has_valid_restore_target()
