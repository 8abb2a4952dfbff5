# locale_hub/cli.py
"""Locale-Hub CLI 的主入口点。"""

import json
from pathlib import Path
from typing import Annotated, Any, Optional

import structlog
import typer
from rich.console import Console
from rich.table import Table

import locale_hub
from locale_hub.config import LocaleHubConfig
from locale_hub.exceptions import LocaleHubError, MissingTranslationError
from locale_hub.fallback import build_fallback_chain, get_translation, validate_required
from locale_hub.logging_config import setup_logging
from locale_hub.resolver import parse_accept_language
from locale_hub.utils import split_csv
from locale_hub.validator import LocaleValidator

log = structlog.get_logger("locale_hub.cli")
console = Console()

app = typer.Typer(
    name="locale-hub",
    help="🌐 Locale-Hub: 翻译解析引擎的命令行工具。",
    add_completion=False,
    no_args_is_help=True,
)


class State:
    """在子命令之间传递的运行时状态。"""

    def __init__(self, config: LocaleHubConfig) -> None:
        self.config = config


def version_callback(value: bool) -> None:
    if value:
        console.print(f"Locale-Hub [bold cyan]v{locale_hub.__version__}[/bold cyan]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="显示版本信息并退出。",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """主回调函数，在任何子命令执行前加载配置并初始化日志。"""
    try:
        config = LocaleHubConfig()
        setup_logging(log_level=config.logging.level, log_format=config.logging.format)
        ctx.obj = State(config=config)
    except Exception as e:
        console.print("[bold red]❌ 启动失败：无法加载配置或初始化日志。[/bold red]")
        console.print(f"[dim]{e}[/dim]")
        raise typer.Exit(code=1) from e


def _load_document(path: Path) -> dict[str, Any]:
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[bold red]❌ 无法读取翻译文件：[/bold red]{e}")
        raise typer.Exit(code=1) from e
    if not isinstance(document, dict):
        console.print("[bold red]❌ 翻译文件的顶层必须是一个对象。[/bold red]")
        raise typer.Exit(code=1)
    return document


def _validator(ctx: typer.Context, supported: list[str]) -> LocaleValidator:
    if supported:
        return LocaleValidator(split_csv(supported))
    return ctx.obj.config.build_validator()


@app.command()
def negotiate(
    ctx: typer.Context,
    header: Annotated[str, typer.Argument(help="Accept-Language 头的值，例如 'es;q=0.5,en;q=0.9'")],
    supported: Annotated[
        list[str], typer.Option("--supported", "-s", help="受支持的 locale（可重复或逗号分隔）")
    ] = [],
) -> None:
    """解析一个 Accept-Language 头并选出第一个受支持的 locale。"""
    validator = _validator(ctx, supported)
    parsed = parse_accept_language(header)

    table = Table(title="Accept-Language")
    table.add_column("Locale", style="cyan")
    table.add_column("Quality", justify="right")
    table.add_column("Supported")
    chosen = None
    for tag, quality in parsed:
        ok = validator.is_supported(tag)
        if ok and chosen is None:
            chosen = tag
        table.add_row(str(tag), f"{quality:.2f}", "✅" if ok else "❌")
    console.print(table)

    if chosen is None:
        console.print("[yellow]没有匹配的受支持 locale。[/yellow]")
        raise typer.Exit(code=1)
    console.print(f"选择的 locale: [bold green]{chosen}[/bold green]")


@app.command()
def chain(
    locale: Annotated[str, typer.Argument(help="请求的 locale")],
    fallback: Annotated[Optional[str], typer.Option("--fallback", "-f", help="回退 locale")] = None,
    available: Annotated[
        list[str], typer.Option("--available", "-a", help="可用的 locale（可重复或逗号分隔）")
    ] = [],
) -> None:
    """打印给定 locale 的回退链。"""
    result = build_fallback_chain(locale, fallback, split_csv(available))
    console.print(" → ".join(str(item) for item in result))


@app.command()
def check(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="JSON 文件：{记录: {字段: {locale: 值}}}")],
    required: Annotated[
        list[str], typer.Option("--required", "-r", help="必填 locale（可重复或逗号分隔）")
    ] = [],
    strict: Annotated[bool, typer.Option("--strict", help="存在缺失翻译时以退出码 1 结束")] = False,
) -> None:
    """检查翻译文件中每个字段的必填 locale 是否齐备。"""
    document = _load_document(path)
    required_locales = split_csv(required) or ctx.obj.config.required_locales
    if not required_locales:
        console.print("[bold red]❌ 请通过 --required 或 LH_REQUIRED_LOCALES 指定必填 locale。[/bold red]")
        raise typer.Exit(code=1)

    table = Table(title="缺失的翻译")
    table.add_column("Record", style="cyan")
    table.add_column("Field")
    table.add_column("Missing", style="red")
    problems = 0
    try:
        for record, fields in document.items():
            if not isinstance(fields, dict):
                continue
            for field, translations in fields.items():
                missing = validate_required(translations, required_locales)
                if missing:
                    problems += 1
                    table.add_row(str(record), str(field), ", ".join(map(str, missing)))
    except LocaleHubError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(code=1) from e

    if problems == 0:
        console.print("[bold green]✅ 所有必填翻译均已齐备。[/bold green]")
        return

    console.print(table)
    log.info("发现缺失的翻译", fields=problems)
    if strict:
        raise typer.Exit(code=1)


@app.command()
def resolve(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="JSON 文件：{记录: {字段: {locale: 值}}}")],
    record: Annotated[str, typer.Argument(help="记录标识")],
    field: Annotated[str, typer.Argument(help="字段名")],
    locale: Annotated[str, typer.Option("--locale", "-l", help="请求的 locale")] = "en",
    fallback: Annotated[Optional[str], typer.Option("--fallback", "-f", help="回退 locale")] = None,
    default: Annotated[Optional[str], typer.Option("--default", "-d", help="缺失时的默认值")] = None,
) -> None:
    """沿回退链解析某条记录某个字段的翻译。"""
    document = _load_document(path)
    fields = document.get(record)
    translations = fields.get(field) if isinstance(fields, dict) else None
    try:
        value = get_translation(
            translations,
            locale,
            fallback=fallback or ctx.obj.config.fallback_locale,
            default=default,
            raise_on_missing=True,
        )
    except MissingTranslationError as e:
        console.print(f"[bold red]❌ {e}[/bold red]")
        raise typer.Exit(code=1) from e
    console.print(value)
