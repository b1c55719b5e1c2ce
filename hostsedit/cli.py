"""
命令行入口

以 addhost / rmhost 的名称调用时，参数分别按 "add ..." / "rm ..." 处理。
"""

import functools
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape

from hostsedit import __version__
from hostsedit.app import HostsEditor
from hostsedit.config import Config
from hostsedit.errors import DuplicateEntry, HostsError
from hostsedit.installer import Installer

ALIAS_VERBS = {"addhost": "add", "rmhost": "rm"}

console = Console(soft_wrap=True, highlight=False)


def print_error(message: str) -> None:
    console.print(f"\n[bold red]错误:[/] {escape(message)}\n")


def print_entries(entries: List[Tuple[int, str]]) -> None:
    console.print("\n[bold cyan]当前 hosts 条目:[/]\n")
    for position, line in entries:
        console.print(f"[bold yellow]{position}.[/] [bold green]→[/] {escape(line)}")


def handle_errors(func):
    """把 HostsError 转换为错误提示和退出码 1"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except HostsError as e:
            print_error(str(e))
            click.get_current_context().exit(1)

    return wrapper


@click.group(invoke_without_command=True, context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--file", "hosts_file", default=None, metavar="PATH",
              help="要编辑的 hosts 文件 (默认: $HOSTS_FILE 或 /etc/hosts)")
@click.option("-l", "--list", "show_list", is_flag=True, help="列出所有条目")
@click.version_option(__version__, "-v", "--version", prog_name="hosts",
                      message="%(prog)s v%(version)s - 管理你的 hosts 文件")
@click.pass_context
def cli(ctx: click.Context, hosts_file: Optional[str], show_list: bool):
    """管理 hosts 文件条目：添加、删除、列出、搜索，修改前自动备份。"""
    try:
        config = Config.from_env()
        if hosts_file:
            config.hosts_file_path = hosts_file
        ctx.obj = HostsEditor(config)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if ctx.invoked_subcommand is None:
        if show_list:
            print_entries(ctx.obj.list_entries())
            return
        click.echo(ctx.get_help())
        ctx.exit(1)


@cli.command()
@click.argument("address")
@click.argument("domains", nargs=-1)
@click.pass_obj
@handle_errors
def add(editor: HostsEditor, address: str, domains: Tuple[str, ...]):
    """添加条目: add <ip> <domain> [<domain> ...]"""
    try:
        entry = editor.add(address, ' '.join(domains))
    except DuplicateEntry as e:
        console.print(f"\n[bold yellow]警告:[/] {escape(str(e))}")
        print_entries(editor.list_entries())
        click.get_current_context().exit(1)

    console.print(
        f"\n[bold green]成功:[/] 已添加 {escape(entry.domains_field)} ({escape(entry.address)})"
    )
    print_entries(editor.list_entries())


@cli.command()
@click.argument("target")
@click.pass_obj
@handle_errors
def rm(editor: HostsEditor, target: str):
    """删除条目: rm <ip|domain|id>（纯数字按 ID 处理）"""
    result = editor.remove(target)

    if result.kind == 'position':
        console.print(
            f"\n[bold green]成功:[/] 已删除 ID '{escape(target)}' ({escape(result.removed[0])})"
        )
    else:
        console.print(
            f"\n[bold green]成功:[/] 已删除匹配 '{escape(target)}' 的 {len(result.removed)} 条条目"
        )
    print_entries(editor.list_entries())


@cli.command(name="list")
@click.pass_obj
@handle_errors
def list_command(editor: HostsEditor):
    """列出所有条目"""
    print_entries(editor.list_entries())


@cli.command()
@click.argument("query", default="")
@click.pass_obj
@handle_errors
def search(editor: HostsEditor, query: str):
    """搜索条目（不区分大小写）"""
    console.print(f"\n[bold cyan]匹配 '{escape(query)}' 的条目:[/]\n")
    for line in editor.search(query):
        console.print(f"[bold green]→[/] {escape(line)}")


@cli.command()
@click.argument("path")
@click.pass_obj
@handle_errors
def batch(editor: HostsEditor, path: str):
    """从文件批量添加条目，每行格式: <ip> <domain> [<domain> ...]"""
    result = editor.batch(path)

    for line, reason in result.failures:
        console.print(f"[bold red]失败:[/] {escape(line)} ({escape(reason)})")

    console.print("\n[bold green]批量操作完成:[/]")
    console.print(f"成功: {result.success}")
    console.print(f"失败: {result.failed}\n")


@cli.command()
@click.pass_obj
@handle_errors
def install(editor: HostsEditor):
    """安装到系统目录，并创建 addhost / rmhost 命令"""
    installer = Installer(editor.config, editor.logger)
    if not installer.install():
        console.print(f"[bold yellow]hosts 已安装在 {installer.target}，请使用 'update' 升级。[/]\n")
        return

    console.print("[bold green]安装成功:[/]")
    console.print(f" - hosts -> {installer.target}")
    for alias in installer.alias_paths:
        console.print(f" - {alias.name} 命令")


@cli.command()
@click.pass_obj
@handle_errors
def update(editor: HostsEditor):
    """从 UPDATE_URL 下载并替换已安装的 hosts 命令。

    默认地址是上游的 hosts.sh 脚本，它不支持 --file 等选项；
    要更新为本工具的新版本，请把 UPDATE_URL 指向本项目的发布文件。
    """
    installer = Installer(editor.config, editor.logger)
    console.print(f"正在从 {escape(editor.config.update_url)} 下载...")
    installer.update()
    console.print("[bold green]更新成功[/]\n")


@cli.command()
@click.pass_obj
@handle_errors
def uninstall(editor: HostsEditor):
    """从系统中删除命令及其别名"""
    installer = Installer(editor.config, editor.logger)
    if not installer.uninstall():
        console.print("[bold yellow]hosts 尚未安装[/]\n")
        return
    console.print("[bold green]已卸载所有命令[/]\n")


def _split_global_options(args: List[str]) -> Tuple[List[str], List[str]]:
    """把开头的 --file 选项与其余参数分开"""
    index = 0
    while index < len(args):
        if args[index] == "--file":
            index += 2
        elif args[index].startswith("--file="):
            index += 1
        else:
            break
    return args[:index], args[index:]


def main(argv: Optional[List[str]] = None, prog_name: Optional[str] = None) -> int:
    """
    命令行主入口

    参数:
        argv: 命令行参数（不含程序名），默认为 sys.argv[1:]
        prog_name: 程序名，默认为 sys.argv[0] 的文件名

    返回:
        退出码: 0 成功，1 任何失败
    """
    args = list(sys.argv[1:] if argv is None else argv)
    prog_name = prog_name or Path(sys.argv[0]).name

    verb = ALIAS_VERBS.get(prog_name)
    if verb is not None:
        options, rest = _split_global_options(args)
        if not rest:
            # addhost 不带参数显示帮助，rmhost 不带参数列出条目，都以失败退出
            _invoke(options + (["list"] if verb == "rm" else ["--help"]), prog_name)
            return 1
        if rest[0] not in cli.commands and not rest[0].startswith("-"):
            args = options + [verb] + rest

    return _invoke(args, prog_name)


def _invoke(args: List[str], prog_name: str) -> int:
    try:
        rv = cli.main(args=args, prog_name=prog_name, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return 1
    except click.Abort:
        return 1
    return rv if isinstance(rv, int) else 0
