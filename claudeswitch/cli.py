import logging
import sys

import click

from . import __version__
from .config import SwitchContext
from .credentials import CredentialSource, clear_saved_token
from .errors import SwitchError
from .provider import Provider
from .reporter import EchoReporter
from .status import BackupState, StatusReport, get_status
from .switcher import SwitchManager, SwitchOutcome
from .tokens import TokenType, describe_token_type
from .utils import info_message, platform_tag, safe_echo, success_message, warning_message


def _fail(message: str):
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _unexpected(e: Exception):
    click.echo(f"Unexpected error: {e}", err=True)
    sys.exit(1)


def _build_manager(context: SwitchContext) -> SwitchManager:
    reporter = EchoReporter()
    return SwitchManager(context, reporter, CredentialSource(context, reporter))


@click.group()
@click.version_option(version=__version__, prog_name="claude-switch",
                      message=f"%(prog)s v%(version)s ({platform_tag()})")
@click.option('--debug', is_flag=True, help='输出调试日志')
@click.pass_context
def cli(ctx: click.Context, debug: bool):
    """claude-switch - Claude Code API 提供商切换工具

    \b
    在 Anthropic（网页登录token，自动备份）和 Z.AI（API key）之间切换
    ~/.claude/settings.json 的配置。

    \b
    环境变量:
      ZAI_AUTH_TOKEN     Z.AI API key（可选）
      CLAUDE_CONFIG_DIR  Claude 配置目录（默认 ~/.claude）
    """
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if ctx.resilient_parsing:
        return
    try:
        ctx.obj = SwitchContext.from_environment()
    except SwitchError as e:
        _fail(str(e))


def _anthropic_impl(context: SwitchContext):
    try:
        result = _build_manager(context).switch_to_anthropic()
        if result.outcome == SwitchOutcome.ALREADY_ACTIVE:
            safe_echo("  Use 'claude-switch status' to check current settings")
    except SwitchError as e:
        _fail(str(e))
    except Exception as e:
        _unexpected(e)


def _zai_impl(context: SwitchContext):
    try:
        result = _build_manager(context).switch_to_zai()
        if result.outcome == SwitchOutcome.ALREADY_ACTIVE:
            safe_echo("  Use 'claude-switch status' to check current settings")
        else:
            safe_echo("\n  To switch back to Anthropic: claude-switch anthropic")
    except SwitchError as e:
        _fail(str(e))
    except Exception as e:
        _unexpected(e)


@cli.command()
@click.pass_obj
def anthropic(context: SwitchContext):
    """切换到 Anthropic API（从备份恢复网页登录token）"""
    _anthropic_impl(context)


@cli.command()
@click.pass_obj
def zai(context: SwitchContext):
    """切换到 Z.AI API（使用 API key）"""
    _zai_impl(context)


@cli.command(name="a", hidden=True)
@click.pass_obj
def anthropic_short(context: SwitchContext):
    """[别名] 等同于 anthropic"""
    _anthropic_impl(context)


@cli.command(name="z", hidden=True)
@click.pass_obj
def zai_short(context: SwitchContext):
    """[别名] 等同于 zai"""
    _zai_impl(context)


def _render_status(report: StatusReport, verbose: bool):
    safe_echo("Claude Switch Status:")

    if report.provider == Provider.UNKNOWN:
        safe_echo(warning_message("No configuration found (empty or missing)"))
    else:
        safe_echo(f"  Provider: {report.provider.display_name}")
        if report.provider == Provider.ANTHROPIC:
            safe_echo("  Base URL: api.anthropic.com (default)")
        else:
            safe_echo(f"  Base URL: {report.base_url}")

    if report.provider == Provider.ZAI:
        if report.sonnet_model:
            safe_echo(f"  Sonnet Model: {report.sonnet_model}")
        if report.opus_model:
            safe_echo(f"  Opus Model: {report.opus_model}")
        if report.haiku_model:
            safe_echo(f"  Haiku Model: {report.haiku_model}")
        if report.timeout_ms:
            safe_echo(f"  Timeout: {report.timeout_ms} ms")

    if report.masked_token:
        suffix = ""
        if report.token_type == TokenType.API_KEY:
            suffix = " (API key)"
        elif report.token_type == TokenType.WEB_SESSION:
            suffix = " (web token)"
            if report.provider == Provider.ZAI:
                suffix = " (web token - unexpected for Z.AI)"
        safe_echo(f"  Auth Token: {report.masked_token}{suffix}")

    if report.other_env_count:
        safe_echo(f"  Other env vars: {report.other_env_count}")

    backup = report.backup
    if backup.state == BackupState.AVAILABLE:
        safe_echo("  Backup: Available (Anthropic)")
        if backup.created_at:
            safe_echo(f"    Created: {backup.created_at}")
        if backup.token_type is not None:
            safe_echo(f"    Token: {describe_token_type(backup.token_type)}")
    elif backup.state == BackupState.OTHER_PROVIDER:
        safe_echo(f"  Backup: Available ({backup.provider.display_name}, not restorable)")
    elif backup.state == BackupState.UNREADABLE:
        safe_echo(warning_message("Backup: Available (unknown format)"))
    else:
        safe_echo("  Backup: Not found")

    safe_echo(f"  Saved Token: {'Available' if report.saved_token else 'Not found'}")

    if verbose:
        safe_echo(f"  Settings file: {report.settings_path}")
        safe_echo(f"  Backup file: {report.backup_path}")


@cli.command()
@click.option('--json', 'as_json', is_flag=True, help='以JSON格式输出')
@click.option('--verbose', is_flag=True, help='显示配置文件路径')
@click.pass_obj
def status(context: SwitchContext, as_json: bool, verbose: bool):
    """显示当前配置状态"""
    try:
        report = get_status(context)
        if as_json:
            click.echo(report.model_dump_json(indent=2))
        else:
            _render_status(report, verbose)
    except SwitchError as e:
        _fail(str(e))
    except Exception as e:
        _unexpected(e)


@cli.command(name="clear-token")
@click.pass_obj
def clear_token(context: SwitchContext):
    """删除已保存的 Z.AI API token"""
    try:
        if clear_saved_token(context):
            safe_echo(success_message("Saved token removed successfully"))
        else:
            safe_echo(warning_message("No saved token found"))
    except SwitchError as e:
        _fail(str(e))
    except Exception as e:
        _unexpected(e)


@cli.command()
@click.option('--force', is_flag=True, help='强制重新安装，即使已经安装')
def install(force: bool):
    """安装 shell 别名（claude-anthropic / claude-zai / claude-status）"""
    try:
        from .shell_integration import ShellIntegration

        integration = ShellIntegration()
        if not integration.install(force=force):
            safe_echo(warning_message(f"Aliases already exist in {integration.get_shell_config_path()}"))
            safe_echo("  Use --force to reinstall")
            return

        safe_echo(success_message(f"Aliases added to {integration.get_shell_config_path()}"))
        safe_echo(info_message(f"Reload your shell: source {integration.get_shell_config_path()}"))
    except SwitchError as e:
        _fail(str(e))
    except Exception as e:
        _unexpected(e)


@cli.command()
def uninstall():
    """移除 shell 别名"""
    try:
        from .shell_integration import ShellIntegration

        integration = ShellIntegration()
        if integration.uninstall():
            safe_echo(success_message(f"Aliases removed from {integration.get_shell_config_path()}"))
        else:
            click.echo("claude-switch aliases are not installed")
    except SwitchError as e:
        _fail(str(e))
    except Exception as e:
        _unexpected(e)


def main():
    """主入口点"""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nOperation cancelled by user", err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
