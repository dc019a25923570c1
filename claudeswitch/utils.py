import platform
import sys

import click


def safe_echo(message: str, **kwargs):
    """在不支持Unicode的终端下安全输出"""
    try:
        click.echo(message, **kwargs)
    except UnicodeEncodeError:
        safe_message = (message.replace('✓', '[OK]').replace('✗', '[X]')
                        .replace('⚠', '[WARN]').replace('ℹ', '[i]')
                        .replace('→', '->').replace('…', '...'))
        click.echo(safe_message, **kwargs)


def colorize(text: str, color: str) -> str:
    """为文本添加颜色（仅在支持的终端中）"""
    if not sys.stdout.isatty():
        return text

    colors = {
        "red": "\033[31m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "blue": "\033[34m",
        "cyan": "\033[36m",
        "reset": "\033[0m",
    }

    if color.lower() in colors:
        return f"{colors[color.lower()]}{text}{colors['reset']}"

    return text


def success_message(text: str) -> str:
    return colorize(f"✓ {text}", "green")


def error_message(text: str) -> str:
    return colorize(f"✗ {text}", "red")


def warning_message(text: str) -> str:
    return colorize(f"⚠ {text}", "yellow")


def info_message(text: str) -> str:
    return colorize(f"ℹ {text}", "cyan")


def platform_tag() -> str:
    """返回形如 linux/x86_64 的平台标识"""
    return f"{platform.system().lower()}/{platform.machine().lower() or 'unknown'}"
