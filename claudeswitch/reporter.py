from abc import ABC, abstractmethod

from .utils import error_message, info_message, safe_echo, success_message, warning_message

INFO = "info"
SUCCESS = "success"
WARNING = "warning"
ERROR = "error"


class Reporter(ABC):
    """核心逻辑的输出接口，只接收纯文本，不关心格式"""

    @abstractmethod
    def emit(self, level: str, message: str) -> None:
        ...

    def info(self, message: str) -> None:
        self.emit(INFO, message)

    def success(self, message: str) -> None:
        self.emit(SUCCESS, message)

    def warning(self, message: str) -> None:
        self.emit(WARNING, message)

    def error(self, message: str) -> None:
        self.emit(ERROR, message)


class EchoReporter(Reporter):
    _formatters = {
        INFO: info_message,
        SUCCESS: success_message,
        WARNING: warning_message,
        ERROR: error_message,
    }

    def emit(self, level: str, message: str) -> None:
        formatter = self._formatters.get(level, str)
        safe_echo(formatter(message), err=level == ERROR)


class SilentReporter(Reporter):
    def emit(self, level: str, message: str) -> None:
        pass