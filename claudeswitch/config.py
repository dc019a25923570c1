import os
import platform
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from . import __version__
from .errors import ConfigIOError, ConfigParseError
from .provider import ZAI_MARKER, Provider

SETTINGS_FILE_NAME = "settings.json"
BACKUP_FILE_NAME = "settings.json.backup"
TOKEN_FILE_NAME = ".zai_token"
TOOL_CONFIG_FILE_NAME = "config.yaml"
DEFAULT_TOKEN_ENV_VAR = "ZAI_AUTH_TOKEN"


def _local_now() -> datetime:
    return datetime.now().astimezone()


class SettingsDocument(BaseModel):
    env: Dict[str, str] = Field(default_factory=dict)

    @field_validator("env", mode="before")
    @classmethod
    def _null_env_is_empty(cls, value):
        return {} if value is None else value


class BackupMetadata(BaseModel):
    provider: Provider
    created_at: str = ""
    version: str = ""

    @field_validator("provider", mode="before")
    @classmethod
    def _foreign_provider_is_unknown(cls, value):
        # 其他工具写入的提供商名不可恢复，但不应被当作 Anthropic
        if isinstance(value, str) and value not in {p.value for p in Provider}:
            return Provider.UNKNOWN
        return value


class BackupRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    metadata: BackupMetadata = Field(alias="_metadata")
    env: Dict[str, str] = Field(default_factory=dict)

    @field_validator("env", mode="before")
    @classmethod
    def _null_env_is_empty(cls, value):
        return {} if value is None else value

    @property
    def provider(self) -> Provider:
        return self.metadata.provider

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class ZaiPreset(BaseModel):
    base_url: str = "https://api.z.ai/api/anthropic"
    timeout_ms: str = "3000000"
    opus_model: str = "GLM-4.6"
    sonnet_model: str = "GLM-4.6"
    haiku_model: str = "GLM-4.5-Air"

    @field_validator("base_url")
    @classmethod
    def _must_look_like_zai(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if ZAI_MARKER not in value:
            raise ValueError(f"base_url must contain '{ZAI_MARKER}'")
        return value

    @field_validator("timeout_ms", mode="before")
    @classmethod
    def _timeout_as_string(cls, value):
        if isinstance(value, int):
            return str(value)
        return value


class SwitcherConfig(BaseModel):
    token_env_var: str = DEFAULT_TOKEN_ENV_VAR
    zai: ZaiPreset = Field(default_factory=ZaiPreset)


def get_tool_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    if environ is None:
        environ = os.environ
    if platform.system() == "Windows":
        return Path.home() / "AppData" / "Roaming" / "claude-switch"
    xdg = environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "claude-switch"
    return Path.home() / ".config" / "claude-switch"


def get_claude_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    if environ is None:
        environ = os.environ
    override = environ.get("CLAUDE_CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".claude"


def load_switcher_config(path: Path) -> SwitcherConfig:
    """加载工具自身的 config.yaml，不存在时使用默认值"""
    if not path.exists():
        return SwitcherConfig()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigIOError(f"Failed to read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Failed to parse {path}: {e}") from e

    if data is None:
        return SwitcherConfig()
    if not isinstance(data, dict):
        raise ConfigParseError(f"Invalid config file format: {path}")

    try:
        return SwitcherConfig(**data)
    except ValidationError as e:
        raise ConfigParseError(f"Invalid configuration in {path}: {e}") from e


class SwitchContext(BaseModel):
    """一次调用所需的全部上下文，在进程启动时构造一次后显式传递"""

    config_dir: Path
    version: str = __version__
    token_env_var: str = DEFAULT_TOKEN_ENV_VAR
    zai: ZaiPreset = Field(default_factory=ZaiPreset)
    clock: Callable[[], datetime] = Field(default=_local_now, exclude=True)

    @property
    def settings_path(self) -> Path:
        return self.config_dir / SETTINGS_FILE_NAME

    @property
    def backup_path(self) -> Path:
        return self.config_dir / BACKUP_FILE_NAME

    @property
    def token_path(self) -> Path:
        return self.config_dir / TOKEN_FILE_NAME

    def timestamp(self) -> str:
        return self.clock().isoformat(timespec="seconds")

    @classmethod
    def from_environment(cls, environ: Optional[Mapping[str, str]] = None) -> "SwitchContext":
        if environ is None:
            environ = os.environ
        tool_config = load_switcher_config(get_tool_config_dir(environ) / TOOL_CONFIG_FILE_NAME)
        return cls(
            config_dir=get_claude_config_dir(environ),
            token_env_var=tool_config.token_env_var,
            zai=tool_config.zai,
        )
