import os
import platform
import shutil
from pathlib import Path
from typing import Optional

from .errors import ConfigIOError

ALIASES = {
    "claude-anthropic": "anthropic",
    "claude-zai": "zai",
    "claude-status": "status",
}


class ShellIntegration:
    def __init__(self, executable: str = "claude-switch"):
        self.system = platform.system()
        self.executable = executable
        self.marker_start = "# >>> claude-switch aliases >>>"
        self.marker_end = "# <<< claude-switch aliases <<<"

    def get_shell_type(self) -> str:
        """检测当前shell类型"""
        shell = os.environ.get('SHELL', '')
        if 'zsh' in shell:
            return 'zsh'
        elif 'bash' in shell:
            return 'bash'
        elif 'fish' in shell:
            return 'fish'
        else:
            return 'bash'

    def get_shell_config_path(self) -> Path:
        """获取shell配置文件路径"""
        home = Path.home()
        shell_type = self.get_shell_type()

        if shell_type == 'zsh':
            return home / '.zshrc'
        elif shell_type == 'fish':
            return home / '.config' / 'fish' / 'config.fish'
        else:
            bashrc = home / '.bashrc'
            if bashrc.exists() or self.system == 'Linux':
                return bashrc
            else:
                return home / '.bash_profile'

    def get_alias_block(self) -> str:
        """生成要写入的别名定义，fish 使用不同语法"""
        fish = self.get_shell_type() == 'fish'
        lines = []
        for alias, command in ALIASES.items():
            target = f"{self.executable} {command}"
            if fish:
                lines.append(f"alias {alias} '{target}'")
            else:
                lines.append(f"alias {alias}='{target}'")
        return '\n'.join([self.marker_start] + lines + [self.marker_end])

    def _read(self, config_path: Path) -> Optional[str]:
        if not config_path.exists():
            return None
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            raise ConfigIOError(f"Failed to read {config_path}: {e}") from e

    def _write(self, config_path: Path, content: str) -> None:
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except OSError as e:
            raise ConfigIOError(f"Failed to write {config_path}: {e}") from e

    def is_installed(self) -> bool:
        content = self._read(self.get_shell_config_path())
        return content is not None and self.marker_start in content

    def install(self, force: bool = False) -> bool:
        """写入别名块，已安装且未指定force时返回False"""
        config_path = self.get_shell_config_path()

        if self.is_installed():
            if not force:
                return False
            self.uninstall()

        existing_content = self._read(config_path) or ""
        if existing_content:
            backup_path = config_path.with_name(config_path.name + '.claude-switch.backup')
            shutil.copy2(config_path, backup_path)

        if existing_content and not existing_content.endswith('\n'):
            existing_content += '\n'

        self._write(config_path, existing_content + '\n' + self.get_alias_block() + '\n')
        return True

    def uninstall(self) -> bool:
        """移除别名块，未安装时返回False"""
        config_path = self.get_shell_config_path()
        content = self._read(config_path)
        if content is None or self.marker_start not in content:
            return False

        if self.marker_end not in content:
            raise ConfigIOError(f"Found start marker without end marker in {config_path}")

        new_lines = []
        in_marker_block = False
        for line in content.split('\n'):
            if self.marker_start in line:
                # install 在块前补的空行一并移除
                if new_lines and not new_lines[-1].strip():
                    new_lines.pop()
                in_marker_block = True
                continue
            elif self.marker_end in line:
                in_marker_block = False
                continue

            if not in_marker_block:
                new_lines.append(line)

        self._write(config_path, '\n'.join(new_lines))
        return True
