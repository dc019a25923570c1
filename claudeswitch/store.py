import contextlib
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from .config import SettingsDocument
from .errors import ConfigIOError, ConfigParseError

logger = logging.getLogger(__name__)

DIR_MODE = 0o700
FILE_MODE = 0o600


def read_json(path: Path) -> Optional[Any]:
    """读取并解析JSON文件，文件不存在时返回None"""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = f.read()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise ConfigIOError(f"Failed to read {path}: {e}") from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigParseError(f"Failed to parse {path}: {e}") from e


def ensure_parent_dir(path: Path) -> None:
    parent = path.parent
    if parent.exists():
        return
    try:
        parent.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigIOError(f"Failed to create directory {parent}: {e}") from e
    logger.debug("Created config directory %s", parent)


def open_private(path: Path):
    """以 0600 权限创建文件并返回文本写句柄"""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
    handle = os.fdopen(fd, "w", encoding="utf-8")
    try:
        # 已存在的文件不受 O_CREAT 的权限参数影响
        os.chmod(path, FILE_MODE)
    except OSError:
        handle.close()
        raise
    return handle


def write_json_atomic(path: Path, data: Any) -> None:
    """先写临时文件再原子重命名，保证读者不会看到写了一半的文件"""
    ensure_parent_dir(path)

    temp_path = path.with_name(path.name + ".tmp")
    try:
        content = json.dumps(data, indent=2, ensure_ascii=False)
        with open_private(temp_path) as f:
            f.write(content)
            f.write("\n")
        os.replace(temp_path, path)
    except (OSError, TypeError, ValueError) as e:
        with contextlib.suppress(OSError):
            temp_path.unlink()
        raise ConfigIOError(f"Failed to save {path}: {e}") from e

    logger.debug("Wrote %s atomically", path)


def load_config(path: Path) -> Dict[str, str]:
    """加载settings文件中的env映射，文件不存在时返回空映射"""
    data = read_json(path)
    if data is None:
        logger.debug("Settings file %s not found, using empty configuration", path)
        return {}

    try:
        document = SettingsDocument.model_validate(data)
    except ValidationError as e:
        raise ConfigParseError(f"Failed to parse config {path}: {e}") from e

    return dict(document.env)


def save_config(path: Path, env: Dict[str, str]) -> None:
    document = SettingsDocument(env=env)
    write_json_atomic(path, document.model_dump())
    logger.info("Saved configuration with %d variable(s) to %s", len(env), path)
