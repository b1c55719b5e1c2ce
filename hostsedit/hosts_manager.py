"""
Hosts 文件条目管理模块，支持原子性更新
"""

import logging
import os
import re
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Tuple

from hostsedit.backup import BackupManager
from hostsedit.errors import DuplicateEntry, NotFound, PermissionDenied, WriteFailed
from hostsedit.models import HostEntry, HostsFile, is_blank, is_comment


class EntryStore:
    """
    读取、索引和修改 hosts 文件中的条目

    每个操作都重新读取文件，不在调用之间缓存内容。
    所有修改都经过 edit() 事务：先备份，再用临时文件 + 重命名原子性替换原文件。
    """

    def __init__(
        self,
        hosts_path: Path,
        backup_manager: BackupManager,
        logger: logging.Logger
    ):
        """
        初始化条目存储

        参数:
            hosts_path: hosts 文件路径
            backup_manager: 修改前用于创建备份的管理器
            logger: 日志记录器实例
        """
        self.hosts_path = Path(hosts_path)
        self.backup_manager = backup_manager
        self.logger = logger

    def read(self) -> HostsFile:
        """
        读取并解析 hosts 文件

        返回:
            HostsFile 对象；文件不存在时返回空文件

        异常:
            PermissionDenied: 没有读取权限
        """
        try:
            with open(self.hosts_path, 'r', encoding='utf-8', errors='surrogateescape', newline='') as f:
                text = f.read()
        except FileNotFoundError:
            self.logger.warning(f"Hosts 文件不存在: {self.hosts_path}")
            return HostsFile()
        except PermissionError as e:
            self.logger.error(f"读取 hosts 文件权限被拒绝: {self.hosts_path}")
            raise PermissionDenied(f"无法读取 {self.hosts_path}: 权限被拒绝") from e

        return HostsFile.parse(text)

    def _write(self, hosts_file: HostsFile) -> None:
        """
        原子性写入 hosts 文件，保留原文件的权限位

        异常:
            PermissionDenied: 没有写入权限
            WriteFailed: 文件系统操作失败
        """
        try:
            # 写入临时文件（同一目录）
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self.hosts_path.parent,
                prefix='.hosts.tmp.',
                text=True
            )
        except PermissionError as e:
            self.logger.error(f"写入 hosts 文件权限被拒绝: {self.hosts_path}")
            raise PermissionDenied(f"无法写入 {self.hosts_path}: 权限被拒绝") from e
        except OSError as e:
            raise WriteFailed(f"无法创建临时文件: {e}") from e

        try:
            with os.fdopen(temp_fd, 'w', encoding='utf-8', errors='surrogateescape', newline='') as f:
                f.write(hosts_file.render())

            if self.hosts_path.exists():
                shutil.copymode(self.hosts_path, temp_path)
            else:
                os.chmod(temp_path, BackupManager.MODE)

            # 原子性替换（同一文件系统内有效）
            os.replace(temp_path, self.hosts_path)

        except OSError as e:
            # 出错时清理临时文件
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            self.logger.error(f"更新 hosts 文件失败: {e}")
            raise WriteFailed(f"写入 {self.hosts_path} 失败: {e}") from e

    @contextmanager
    def edit(self) -> Iterator[HostsFile]:
        """
        修改事务：读取 -> 调用方修改 -> 备份 -> 原子写入

        代码块内抛出的异常会在备份和写入之前中止事务；
        内容未变化时既不备份也不写入。

        异常:
            BackupFailed: 备份失败，原文件不会被修改
            WriteFailed: 写入失败
        """
        hosts_file = self.read()
        original = list(hosts_file.lines)

        yield hosts_file

        if hosts_file.lines == original:
            self.logger.debug("内容未变化，跳过写入")
            return

        if self.hosts_path.exists():
            self.backup_manager.snapshot()
        else:
            self.logger.warning(f"Hosts 文件不存在，跳过备份: {self.hosts_path}")
        self._write(hosts_file)

    def list_entries(self) -> List[Tuple[int, str]]:
        """
        列出所有条目（跳过注释行和空行）

        返回:
            (位置, 行内容) 列表，位置从 1 开始；每次调用都重新编号
        """
        return self.read().numbered_entries()

    def find_by_position(self, position: int) -> HostEntry:
        """
        按位置查找条目

        异常:
            NotFound: 位置超出范围或该行无法解析为条目
        """
        hosts_file = self.read()
        index = hosts_file.index_of_position(position)
        entry = HostEntry.from_line(hosts_file.lines[index]) if index is not None else None
        if entry is None:
            raise NotFound(f"无效的 ID: {position}")
        return entry

    def exists(self, address: str, domain: str) -> bool:
        """
        检查是否已有以该地址开头、并在其后包含该域名的行

        域名按子串匹配，因此 "a.test" 也会匹配 "aa.test"。
        """
        return self._contains(self.read(), address, domain)

    @staticmethod
    def _contains(hosts_file: HostsFile, address: str, domain: str) -> bool:
        pattern = re.compile(rf'^{re.escape(address)}\s.*{re.escape(domain)}')
        return any(pattern.search(line) for line in hosts_file.lines)

    def append(self, address: str, domain: str) -> HostEntry:
        """
        在文件末尾添加新条目

        异常:
            DuplicateEntry: 条目已存在
        """
        with self.edit() as hosts_file:
            entry = self.append_to(hosts_file, address, domain)

        self.logger.info(f"已添加条目: {entry.to_hosts_line()}")
        return entry

    def append_to(self, hosts_file: HostsFile, address: str, domain: str) -> HostEntry:
        """
        在已打开的事务缓冲区末尾添加条目，用于在一次事务中添加多条

        参数:
            hosts_file: edit() 产出的缓冲区
            address: IP 地址
            domain: 以空格分隔的域名

        异常:
            DuplicateEntry: 缓冲区中已有该条目
        """
        if self._contains(hosts_file, address, domain):
            raise DuplicateEntry(f"条目已存在: {address} {domain}")

        entry = HostEntry(address=address, domains=tuple(domain.split()))
        hosts_file.lines.append(entry.to_hosts_line())
        return entry

    def delete_by_position(self, position: int) -> HostEntry:
        """
        删除指定位置的条目，其他行保持不变

        异常:
            NotFound: 位置无效
        """
        with self.edit() as hosts_file:
            index = hosts_file.index_of_position(position)
            entry = HostEntry.from_line(hosts_file.lines[index]) if index is not None else None
            if entry is None:
                raise NotFound(f"无效的 ID: {position}")
            del hosts_file.lines[index]

        self.logger.info(f"已删除 ID {position}: {entry.to_hosts_line()}")
        return entry

    def delete_by_address(self, address: str) -> List[str]:
        """
        删除第一个字段与地址完全相同的所有条目

        返回:
            被删除的行

        异常:
            NotFound: 没有匹配的条目
        """
        return self._delete_where(
            lambda line: line.split()[0] == address,
            f"没有地址为 {address} 的条目"
        )

    def delete_by_domain(self, domain: str) -> List[str]:
        """
        删除去掉行尾空白后以该域名结尾的所有条目

        按子串匹配：删除 "ipv6.test" 也会删除 "a.ipv6.test" 的条目。

        异常:
            NotFound: 没有匹配的条目
        """
        return self._delete_where(
            lambda line: line.rstrip().endswith(domain),
            f"没有匹配 {domain} 的条目"
        )

    def _delete_where(self, predicate, not_found_message: str) -> List[str]:
        removed: List[str] = []

        with self.edit() as hosts_file:
            kept = []
            for line in hosts_file.lines:
                if not is_comment(line) and not is_blank(line) and predicate(line):
                    removed.append(line)
                else:
                    kept.append(line)

            if not removed:
                raise NotFound(not_found_message)
            hosts_file.lines[:] = kept

        self.logger.info(f"已删除 {len(removed)} 条条目")
        return removed

    def search(self, query: str) -> List[str]:
        """
        不区分大小写地搜索条目（跳过注释行和空行）

        返回:
            匹配的行内容列表
        """
        needle = query.lower()
        return [
            line for _, line in self.read().numbered_entries()
            if needle in line.lower()
        ]
