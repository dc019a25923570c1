import logging
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from .config import BackupMetadata, BackupRecord, SettingsDocument, SwitchContext
from .errors import BackupParseError, ConfigParseError
from .provider import Provider
from .store import read_json, write_json_atomic

logger = logging.getLogger(__name__)


def _decode_current(data: Any) -> Optional[BackupRecord]:
    if not isinstance(data, dict) or "_metadata" not in data:
        return None
    try:
        return BackupRecord.model_validate(data)
    except ValidationError as e:
        # 带 _metadata 的文件只按新格式解析
        raise BackupParseError(f"Backup metadata is invalid: {e}") from e


def _decode_legacy(data: Any) -> Optional[BackupRecord]:
    # 旧版备份只有 env，没有 _metadata，默认视为 Anthropic
    if not isinstance(data, dict) or "env" not in data:
        return None
    try:
        legacy = SettingsDocument.model_validate(data)
    except ValidationError as e:
        logger.debug("Backup does not match legacy format: %s", e)
        return None
    return BackupRecord(metadata=BackupMetadata(provider=Provider.ANTHROPIC), env=legacy.env)


def decode_backup(data: Any) -> BackupRecord:
    """两步解码：有 _metadata 时只按新格式，否则按旧格式"""
    record = _decode_current(data)
    if record is not None:
        return record

    record = _decode_legacy(data)
    if record is not None:
        logger.info("Loaded legacy backup without metadata, assuming Anthropic")
        return record

    raise BackupParseError("Backup file matches neither the current nor the legacy format")


class BackupManager:
    def __init__(self, context: SwitchContext):
        self.context = context
        self.backup_path = context.backup_path

    def exists(self) -> bool:
        return self.backup_path.exists()

    def load(self) -> Optional[BackupRecord]:
        try:
            data = read_json(self.backup_path)
        except ConfigParseError as e:
            raise BackupParseError(str(e)) from e

        if data is None:
            return None
        return decode_backup(data)

    def has_valid_restore_target(self) -> Tuple[bool, Optional[BackupRecord]]:
        """检查是否存在可用于恢复 Anthropic 的备份

        提供商不是 Anthropic 时仍返回记录本身，方便调用方查看。
        """
        record = self.load()
        if record is None:
            return False, None

        if record.provider != Provider.ANTHROPIC:
            logger.debug("Backup belongs to provider %s, not restorable", record.provider.value)
            return False, record

        return True, record

    def create_backup(self, env: Dict[str, str], provider: Provider) -> BackupRecord:
        """写入带元数据的备份，无条件覆盖已有备份"""
        record = BackupRecord(
            metadata=BackupMetadata(
                provider=provider,
                created_at=self.context.timestamp(),
                version=self.context.version,
            ),
            env=dict(env),
        )
        write_json_atomic(self.backup_path, record.to_document())
        logger.info("Created %s backup at %s", provider.value, self.backup_path)
        return record
