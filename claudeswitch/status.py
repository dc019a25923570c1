import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .backup import BackupManager
from .config import SwitchContext
from .errors import BackupParseError, ConfigIOError
from .provider import (
    AUTH_TOKEN_KEY,
    BASE_URL_KEY,
    HAIKU_MODEL_KEY,
    OPUS_MODEL_KEY,
    SONNET_MODEL_KEY,
    TIMEOUT_KEY,
    Provider,
    detect_provider,
    is_zai_key,
)
from .store import load_config
from .tokens import TokenType, classify_token, mask_token

logger = logging.getLogger(__name__)


class BackupState(str, Enum):
    AVAILABLE = "available"
    OTHER_PROVIDER = "other_provider"
    UNREADABLE = "unreadable"
    MISSING = "missing"


class BackupStatus(BaseModel):
    state: BackupState
    provider: Optional[Provider] = None
    created_at: Optional[str] = None
    token_type: Optional[TokenType] = None


class StatusReport(BaseModel):
    provider: Provider
    base_url: Optional[str] = None
    opus_model: Optional[str] = None
    sonnet_model: Optional[str] = None
    haiku_model: Optional[str] = None
    timeout_ms: Optional[str] = None
    masked_token: Optional[str] = None
    token_type: Optional[TokenType] = None
    other_env_count: int = 0
    backup: BackupStatus
    saved_token: bool = False
    settings_path: str
    backup_path: str


def get_backup_status(context: SwitchContext) -> BackupStatus:
    manager = BackupManager(context)
    try:
        valid, record = manager.has_valid_restore_target()
    except (BackupParseError, ConfigIOError) as e:
        logger.debug("Backup unreadable: %s", e)
        return BackupStatus(state=BackupState.UNREADABLE)

    if record is None:
        return BackupStatus(state=BackupState.MISSING)

    token = record.env.get(AUTH_TOKEN_KEY, "")
    return BackupStatus(
        state=BackupState.AVAILABLE if valid else BackupState.OTHER_PROVIDER,
        provider=record.provider,
        created_at=record.metadata.created_at or None,
        token_type=classify_token(token) if token else None,
    )


def get_status(context: SwitchContext) -> StatusReport:
    """只读地汇总当前配置、备份和已保存token的状态"""
    env = load_config(context.settings_path)
    provider = detect_provider(env)
    token = env.get(AUTH_TOKEN_KEY, "")

    return StatusReport(
        provider=provider,
        base_url=env.get(BASE_URL_KEY) or None,
        opus_model=env.get(OPUS_MODEL_KEY) or None,
        sonnet_model=env.get(SONNET_MODEL_KEY) or None,
        haiku_model=env.get(HAIKU_MODEL_KEY) or None,
        timeout_ms=env.get(TIMEOUT_KEY) or None,
        masked_token=mask_token(token) if token else None,
        token_type=classify_token(token) if token else None,
        other_env_count=sum(1 for key in env if not is_zai_key(key)),
        backup=get_backup_status(context),
        saved_token=context.token_path.exists(),
        settings_path=str(context.settings_path),
        backup_path=str(context.backup_path),
    )
