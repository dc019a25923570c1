"""
claude-switch - Claude Code API 提供商切换工具

在 Anthropic 和 Z.AI 两套配置之间切换 ~/.claude/settings.json，
切换前自动备份 Anthropic 网页登录 token。
"""

__version__ = "0.1.0"
__author__ = "claude-switch Contributors"
__description__ = "A command-line tool for switching Claude Code between Anthropic and Z.AI"

from .config import SwitchContext, SwitcherConfig, BackupRecord, BackupMetadata
from .provider import Provider, detect_provider, ZAI_ENV_KEYS
from .tokens import TokenType, classify_token, validate_for_provider, mask_token
from .backup import BackupManager
from .switcher import SwitchManager, SwitchResult, SwitchOutcome
from .status import get_status, StatusReport

__all__ = [
    "SwitchContext",
    "SwitcherConfig",
    "BackupRecord",
    "BackupMetadata",
    "Provider",
    "detect_provider",
    "ZAI_ENV_KEYS",
    "TokenType",
    "classify_token",
    "validate_for_provider",
    "mask_token",
    "BackupManager",
    "SwitchManager",
    "SwitchResult",
    "SwitchOutcome",
    "get_status",
    "StatusReport",
]
