import logging
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel

from .backup import BackupManager
from .config import SwitchContext
from .credentials import CredentialSource
from .errors import BackupError, BackupParseError, ConfigIOError
from .provider import (
    AUTH_TOKEN_KEY,
    BASE_URL_KEY,
    HAIKU_MODEL_KEY,
    OPUS_MODEL_KEY,
    SONNET_MODEL_KEY,
    TIMEOUT_KEY,
    ZAI_ENV_KEYS,
    Provider,
    detect_provider,
)
from .reporter import Reporter, SilentReporter
from .store import load_config, save_config
from .tokens import validate_for_provider

logger = logging.getLogger(__name__)


class SwitchOutcome(str, Enum):
    SWITCHED = "switched"
    ALREADY_ACTIVE = "already_active"
    DEGRADED = "degraded"


class SwitchResult(BaseModel):
    outcome: SwitchOutcome
    previous_provider: Provider
    provider: Provider
    backup_created: bool = False
    restored_from: Optional[str] = None


class SwitchManager:
    """Anthropic / Z.AI 之间的切换状态机

    状态不单独持久化，每次调用都从磁盘上的 settings 重新推导。
    """

    def __init__(self, context: SwitchContext, reporter: Optional[Reporter] = None,
                 credentials: Optional[CredentialSource] = None):
        self.context = context
        self.reporter = reporter or SilentReporter()
        self.credentials = credentials or CredentialSource(context, self.reporter)
        self.backup_manager = BackupManager(context)

    def load_current(self) -> Dict[str, str]:
        return load_config(self.context.settings_path)

    def build_zai_env(self, token: str) -> Dict[str, str]:
        """构造全新的 Z.AI 配置，不与旧配置合并"""
        preset = self.context.zai
        return {
            AUTH_TOKEN_KEY: token,
            BASE_URL_KEY: preset.base_url,
            TIMEOUT_KEY: preset.timeout_ms,
            OPUS_MODEL_KEY: preset.opus_model,
            SONNET_MODEL_KEY: preset.sonnet_model,
            HAIKU_MODEL_KEY: preset.haiku_model,
        }

    def switch_to_anthropic(self) -> SwitchResult:
        self.reporter.info("Switching to Anthropic API...")

        current = self.load_current()
        provider = detect_provider(current)
        logger.debug("Current provider: %s", provider.value)

        if provider == Provider.ANTHROPIC:
            self.reporter.warning("Already using Anthropic configuration")
            return SwitchResult(outcome=SwitchOutcome.ALREADY_ACTIVE,
                                previous_provider=provider, provider=provider)

        has_backup, backup = self.backup_manager.has_valid_restore_target()

        if not has_backup or backup is None:
            self.reporter.error("No valid Anthropic backup found!")
            self.reporter.warning("Cannot restore Anthropic web login token without backup. "
                                  "You may need to re-login to Claude Code.")
            save_config(self.context.settings_path, {})
            self.reporter.warning("Created empty configuration (re-login required)")
            return SwitchResult(outcome=SwitchOutcome.DEGRADED,
                                previous_provider=provider, provider=Provider.UNKNOWN)

        created_at = backup.metadata.created_at or None
        if created_at:
            self.reporter.info(f"Restoring from backup created at: {created_at}")

        # 备份里残留的 Z.AI 键不能带回 Anthropic 配置
        restored = {key: value for key, value in backup.env.items() if key not in ZAI_ENV_KEYS}
        save_config(self.context.settings_path, restored)

        self.reporter.success("Anthropic configuration restored from backup")
        return SwitchResult(outcome=SwitchOutcome.SWITCHED, previous_provider=provider,
                            provider=detect_provider(restored), restored_from=created_at)

    def _backup_before_zai(self, current: Dict[str, str], provider: Provider) -> bool:
        """按当前提供商决定是否备份，返回是否新建了备份"""
        if provider == Provider.ANTHROPIC and current:
            has_backup, existing = self.backup_manager.has_valid_restore_target()
            if has_backup and existing is not None:
                # 网页登录 token 无法重新生成，保留最早的备份
                self.reporter.info("Existing Anthropic backup found (preserving web login token)")
                if existing.metadata.created_at:
                    self.reporter.info(f"Backed up at: {existing.metadata.created_at}")
                return False

            try:
                self.backup_manager.create_backup(current, Provider.ANTHROPIC)
            except ConfigIOError as e:
                raise BackupError(f"Failed to backup Anthropic config (web login token): {e}") from e
            self.reporter.success("Anthropic configuration backed up (web login token saved)")
            return True

        if provider == Provider.CUSTOM:
            self.reporter.warning("Current config is custom provider - not backing up. "
                                  "Anthropic backup will be preserved if it exists")
            return False

        try:
            has_backup, _ = self.backup_manager.has_valid_restore_target()
        except (BackupParseError, ConfigIOError) as e:
            self.reporter.warning(f"Existing backup could not be read: {e}")
            return False

        if has_backup:
            self.reporter.info("Using existing Anthropic backup")
        else:
            self.reporter.warning("No Anthropic configuration to backup. "
                                  "You may need to re-login when switching back")
        return False

    def switch_to_zai(self) -> SwitchResult:
        self.reporter.info("Switching to Z.AI API...")

        current = self.load_current()
        provider = detect_provider(current)
        logger.debug("Current provider: %s", provider.value)

        if provider == Provider.ZAI:
            self.reporter.warning("Already using Z.AI configuration")
            return SwitchResult(outcome=SwitchOutcome.ALREADY_ACTIVE,
                                previous_provider=provider, provider=provider)

        backup_created = self._backup_before_zai(current, provider)

        token = self.credentials.obtain()

        advisory = validate_for_provider(token, Provider.ZAI)
        if advisory:
            self.reporter.warning(f"Warning: {advisory}")

        save_config(self.context.settings_path, self.build_zai_env(token))

        self.reporter.success("Z.AI configuration applied successfully")
        return SwitchResult(outcome=SwitchOutcome.SWITCHED, previous_provider=provider,
                            provider=Provider.ZAI, backup_created=backup_created)
