# cx_hub/cli/translate.py
"""列出提供方与直接调用机器翻译的命令。"""

import asyncio
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from cx_hub.cli.state import State
from cx_hub.exceptions import CxHubError
from cx_hub.mt.base import ContentType
from cx_hub.mt.registry import create_mt_client, discover_providers
from cx_hub.utils import validate_lang_codes

console = Console()


def providers_command() -> None:
    """列出所有已注册的翻译提供方及其能力。"""
    table = Table(title="翻译提供方")
    table.add_column("ID", style="cyan")
    table.add_column("字符上限", justify="right")
    table.add_column("原生 HTML")
    table.add_column("需要凭据")

    for name, provider_cls in sorted(discover_providers().items()):
        table.add_row(
            name,
            str(provider_cls.CONTENT_LIMIT),
            "✔" if provider_cls.SUPPORTS_HTML else "-",
            ", ".join(provider_cls.REQUIRED_CREDENTIALS) or "-",
        )
    console.print(table)


async def _async_translate(
    state: State,
    provider: str,
    source_lang: str,
    target_lang: str,
    content: str,
    content_type: ContentType,
) -> str:
    async with create_mt_client(provider, state.config) as client:
        return await client.translate(source_lang, target_lang, content, content_type)


def translate_command(
    ctx: typer.Context,
    content: Annotated[str, typer.Argument(help="要翻译的文本或 HTML。")],
    source_lang: Annotated[str, typer.Option("--source-lang", "-s", help="源语言代码。")],
    target_lang: Annotated[str, typer.Option("--target", "-t", help="目标语言代码。")],
    provider: Annotated[
        str | None, typer.Option("--provider", "-p", help="提供方 ID，默认取配置。")
    ] = None,
    html: Annotated[bool, typer.Option("--html", help="按 HTML 翻译。")] = False,
) -> None:
    """使用指定的提供方翻译一段内容。"""
    try:
        validate_lang_codes([source_lang, target_lang])
    except ValueError as e:
        console.print(f"[bold red]❌ 语言代码错误: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    state: State = ctx.obj
    provider_name = provider or state.config.default_provider
    content_type = ContentType.HTML if html else ContentType.TEXT
    try:
        translated = asyncio.run(
            _async_translate(
                state, provider_name, source_lang, target_lang, content, content_type
            )
        )
    except CxHubError as e:
        console.print(f"[bold red]❌ 翻译失败: {e}[/bold red]")
        raise typer.Exit(code=1) from e
    console.print(translated, markup=False, highlight=False)
