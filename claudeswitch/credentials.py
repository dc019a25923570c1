import logging
import os
from typing import Callable, Mapping, Optional

import click

from .config import SwitchContext
from .errors import ConfigIOError, CredentialEmptyError
from .reporter import Reporter
from .store import ensure_parent_dir, open_private

logger = logging.getLogger(__name__)


def _default_prompt() -> str:
    try:
        return click.prompt("Please enter your Z.AI API token", default="",
                            show_default=False, hide_input=True, prompt_suffix="\n> ")
    except click.Abort:
        return ""


def _default_confirm() -> bool:
    try:
        return click.confirm("Save token for future use?", default=False)
    except click.Abort:
        return False


class CredentialSource:
    """按 环境变量 → 已保存的token文件 → 交互输入 的顺序获取 Z.AI 凭据"""

    def __init__(self, context: SwitchContext, reporter: Reporter,
                 environ: Optional[Mapping[str, str]] = None,
                 prompt: Optional[Callable[[], str]] = None,
                 confirm: Optional[Callable[[], bool]] = None):
        self.context = context
        self.reporter = reporter
        self.environ = os.environ if environ is None else environ
        self.prompt = prompt or _default_prompt
        self.confirm = confirm or _default_confirm

    def from_environment(self) -> Optional[str]:
        token = self.environ.get(self.context.token_env_var, "").strip()
        return token or None

    def load_saved(self) -> Optional[str]:
        token_path = self.context.token_path
        try:
            with open(token_path, 'r', encoding='utf-8') as f:
                token = f.read().strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Failed to read saved token %s: %s", token_path, e)
            return None
        return token or None

    def has_saved(self) -> bool:
        return self.context.token_path.exists()

    def save(self, token: str) -> bool:
        """保存凭据供以后使用，失败只给出警告"""
        token_path = self.context.token_path
        try:
            ensure_parent_dir(token_path)
            with open_private(token_path) as f:
                f.write(token)
        except (OSError, ConfigIOError) as e:
            self.reporter.warning(f"Failed to save token: {e}")
            return False

        self.reporter.success("Token saved successfully")
        return True

    def obtain(self) -> str:
        token = self.from_environment()
        if token:
            self.reporter.info(f"Using token from {self.context.token_env_var} environment variable")
            return token

        token = self.load_saved()
        if token:
            self.reporter.info("Using token from saved token file")
            return token

        self.reporter.warning("No API token found")
        token = (self.prompt() or "").strip()
        if not token:
            raise CredentialEmptyError("Token cannot be empty")

        if self.confirm():
            self.save(token)

        return token


def clear_saved_token(context: SwitchContext) -> bool:
    """删除已保存的token文件，不存在时返回False"""
    token_path = context.token_path
    try:
        token_path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise ConfigIOError(f"Failed to remove token: {e}") from e

    logger.info("Removed saved token %s", token_path)
    return True
