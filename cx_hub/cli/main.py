# cx_hub/cli/main.py
"""cx-hub CLI 的主入口点。"""

from typing import Annotated

import typer
from pydantic import ValidationError
from pydantic_settings import SettingsError
from rich.console import Console

import cx_hub
from cx_hub.cli.page import page_command, title_command
from cx_hub.cli.state import State
from cx_hub.cli.translate import providers_command, translate_command
from cx_hub.config import CxHubConfig
from cx_hub.exceptions import ConfigurationError
from cx_hub.logging_config import setup_logging
from cx_hub.mt.registry import discover_providers

app = typer.Typer(
    name="cx-hub",
    help="🌐 cx-hub: 维基内容翻译网关，统一多家机器翻译服务并加载、切分源页面。",
    add_completion=False,
    no_args_is_help=True,
)

app.command("providers")(providers_command)
app.command("translate")(translate_command)
app.command("page")(page_command)
app.command("title")(title_command)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"cx-hub [bold cyan]v{cx_hub.__version__}[/bold cyan]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="显示版本信息并退出。",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """在任何子命令执行前加载配置、配置日志并发现提供方。"""
    try:
        config = CxHubConfig()
        setup_logging(log_level=config.logging.level, log_format=config.logging.format)
        discover_providers()
        ctx.obj = State(config=config)
    except (ValidationError, SettingsError, ConfigurationError) as e:
        console.print("[bold red]❌ 启动失败：配置无效。[/bold red]")
        console.print(f"[dim]{e}[/dim]")
        raise typer.Exit(code=1) from e
    except ValueError as e:
        # 未知的日志级别
        console.print("[bold red]❌ 启动失败：无法初始化日志。[/bold red]")
        console.print(f"[dim]{e}[/dim]")
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
