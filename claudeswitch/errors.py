class SwitchError(Exception):
    """claude-switch 所有可预期错误的基类"""


class ConfigIOError(SwitchError):
    """文件无法读取/写入，或目录无法创建"""


class ConfigParseError(SwitchError):
    """持久化文档格式错误"""


class BackupParseError(ConfigParseError):
    """备份文件既不是新格式也不是旧格式"""


class BackupError(SwitchError):
    """切换到 Z.AI 时创建备份失败"""


class CredentialEmptyError(SwitchError):
    """需要输入凭据时得到了空值"""
