# cx_hub/cli/page.py
"""加载源页面与适配标题的命令。"""

import asyncio
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from cx_hub.adaptation import TitleAdaptation
from cx_hub.cli.state import State
from cx_hub.exceptions import CxHubError
from cx_hub.mt.registry import create_mt_client
from cx_hub.utils import validate_lang_codes
from cx_hub.wiki.page_loader import PageLoader, PageResult

console = Console()


def _check_languages(*codes: str | None) -> None:
    try:
        validate_lang_codes([c for c in codes if c])
    except ValueError as e:
        console.print(f"[bold red]❌ 语言代码错误: {e}[/bold red]")
        raise typer.Exit(code=1) from e


async def _async_get_page(
    loader: PageLoader, title: str, revision: str | None, wrap_sections: bool
) -> PageResult:
    try:
        return await loader.get_page(title, revision, wrap_sections)
    finally:
        await loader.close()


def page_command(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="源页面标题。")],
    source_lang: Annotated[str, typer.Option("--source-lang", "-s", help="源语言代码。")],
    target_lang: Annotated[
        str | None, typer.Option("--target", "-t", help="目标语言代码，用于分类适配。")
    ] = None,
    revision: Annotated[
        str | None, typer.Option("--revision", "-r", help="页面修订号。")
    ] = None,
    wrap_sections: Annotated[
        bool, typer.Option("--wrap-sections", help="把顶层元素包装为区块。")
    ] = False,
    show_content: Annotated[
        bool, typer.Option("--content", help="输出切分后的 HTML。")
    ] = False,
) -> None:
    """加载并切分一个源页面。"""
    _check_languages(source_lang, target_lang)
    state: State = ctx.obj
    try:
        loader = PageLoader(state.config, source_lang, target_lang)
        result = asyncio.run(_async_get_page(loader, title, revision, wrap_sections))
    except CxHubError as e:
        console.print(f"[bold red]❌ 页面加载失败: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    console.print(
        f"[bold green]✅ {title}[/bold green] 修订号 [cyan]{result.revision}[/cyan]，"
        f"共 {result.segments} 个句子。"
    )
    if result.categories:
        table = Table(title="分类")
        table.add_column("源分类", style="cyan")
        table.add_column("目标分类")
        for name, adaptation in result.categories.items():
            table.add_row(name, adaptation.target_name or "[dim]-[/dim]")
        console.print(table)
    if show_content:
        console.print(result.content, markup=False, highlight=False)


async def _async_fetch_title(
    loader: PageLoader, state: State, title: str, provider: str
) -> TitleAdaptation | None:
    try:
        async with create_mt_client(provider, state.config) as client:
            return await loader.fetch_target_title(title, client)
    finally:
        await loader.close()


def title_command(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="源页面标题。")],
    source_lang: Annotated[str, typer.Option("--source-lang", "-s", help="源语言代码。")],
    target_lang: Annotated[str, typer.Option("--target", "-t", help="目标语言代码。")],
    provider: Annotated[
        str | None, typer.Option("--provider", "-p", help="回退使用的提供方 ID。")
    ] = None,
) -> None:
    """查找页面标题在目标语言中的对应标题。"""
    _check_languages(source_lang, target_lang)
    state: State = ctx.obj
    try:
        loader = PageLoader(state.config, source_lang, target_lang)
        adaptation = asyncio.run(
            _async_fetch_title(
                loader, state, title, provider or state.config.default_provider
            )
        )
    except CxHubError as e:
        console.print(f"[bold red]❌ 标题适配失败: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    if adaptation is None:
        console.print(f"[yellow]⚠️ '{title}' 没有对应的知识库条目。[/yellow]")
        return
    console.print(adaptation.target_title, markup=False, highlight=False)
