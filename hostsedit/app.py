"""
hostsedit 主应用模块
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple

from hostsedit.backup import BackupManager
from hostsedit.config import Config
from hostsedit.errors import (
    EmptyField,
    FileNotFound,
    HostsError,
    InvalidAddress,
    InvalidDomain,
    PermissionDenied,
)
from hostsedit.hosts_manager import EntryStore
from hostsedit.models import HostEntry
from hostsedit.validators import AddressValidator, DomainValidator


@dataclass
class RemovalResult:
    """
    一次删除操作的结果

    属性:
        target: 用户给出的删除目标
        kind: 目标的解释方式: "position"、"address" 或 "domain"
        removed: 被删除的行
    """

    target: str
    kind: str
    removed: List[str] = field(default_factory=list)


@dataclass
class BatchResult:
    """批量添加的统计结果，failures 为 (行内容, 错误信息) 列表"""

    success: int = 0
    failed: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)


class HostsEditor:
    """
    主应用控制器，协调所有组件

    - 校验用户输入（地址、域名、空字段）
    - 在任何修改之前检查权限
    - 按 ID > 地址 > 域名 的优先级解释删除目标
    - 逐行执行批量添加并统计结果
    """

    def __init__(self, config: Config):
        """
        初始化应用

        参数:
            config: 应用配置

        异常:
            ValueError: 如果配置无效
        """
        self.config = config
        self.config.validate()

        self.logger = self._setup_logging()

        self.hosts_path = Path(config.hosts_file_path)
        self.backup_manager = BackupManager(
            self.hosts_path,
            self.logger,
            Path(config.backup_dir) if config.backup_dir else None
        )
        self.store = EntryStore(self.hosts_path, self.backup_manager, self.logger)

    def _setup_logging(self) -> logging.Logger:
        """
        配置日志系统

        日志写入 stderr，不与命令输出混在一起。

        返回:
            配置好的日志记录器实例
        """
        logger = logging.getLogger('hostsedit')
        logger.setLevel(self.config.log_level)

        # 避免重复的处理器
        if logger.handlers:
            return logger

        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(self.config.log_level)

        # 格式: 时间戳 - 名称 - 级别 - 消息
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)

        logger.addHandler(handler)
        return logger

    def check_permissions(self) -> None:
        """
        检查是否有修改 hosts 文件所需的权限

        需要 hosts 文件可写，以及所在目录可写（临时文件和备份都放在那里）。

        异常:
            PermissionDenied: 权限不足
        """
        targets = [self.hosts_path.parent, self.backup_manager.backup_dir]
        if self.hosts_path.exists():
            targets.insert(0, self.hosts_path)

        for target in targets:
            if not os.access(target, os.W_OK):
                self.logger.error(f"没有写入权限: {target}")
                raise PermissionDenied(
                    f"修改 {self.hosts_path} 需要管理员权限 (无法写入 {target})"
                )

    def add(self, address: str, domains: str) -> HostEntry:
        """
        添加条目

        参数:
            address: IP 地址
            domains: 一个或多个以空白分隔的域名

        异常:
            EmptyField, InvalidAddress, InvalidDomain: 输入无效
            PermissionDenied: 权限不足
            DuplicateEntry: 条目已存在
            BackupFailed, WriteFailed: 文件操作失败
        """
        self.check_permissions()
        domains = self._validate_entry(address, domains)
        return self.store.append(address, domains)

    @staticmethod
    def _validate_entry(address: str, domains: str) -> str:
        """校验地址和域名，返回合并空白后的域名字段"""
        domains = ' '.join(domains.split())

        if not domains:
            raise EmptyField("域名不能为空")
        if not address:
            raise EmptyField("IP 地址不能为空")
        if not AddressValidator.validate(address):
            raise InvalidAddress(f"无效的 IP 地址格式: {address!r}")
        if not DomainValidator.validate(domains):
            raise InvalidDomain(f"无效的域名格式: {domains!r}")

        return domains

    @staticmethod
    def classify_target(target: str) -> str:
        """
        判断删除目标的类型

        纯数字视为 ID，其次是合法的 IP 地址，其余都按域名处理。
        因此全数字的域名无法按名称删除，只能按 ID 或地址删除。
        """
        if target.isascii() and target.isdigit():
            return 'position'
        if AddressValidator.validate(target):
            return 'address'
        return 'domain'

    def remove(self, target: str) -> RemovalResult:
        """
        按 ID、地址或域名删除条目

        异常:
            EmptyField: 目标为空
            PermissionDenied: 权限不足
            NotFound: 没有匹配的条目
            InvalidAddress: ID 对应的行地址无效
        """
        if not target:
            raise EmptyField("删除目标不能为空")

        self.check_permissions()

        kind = self.classify_target(target)
        result = RemovalResult(target=target, kind=kind)

        if kind == 'position':
            entry = self.store.find_by_position(int(target))
            if not AddressValidator.validate(entry.address):
                raise InvalidAddress(f"无效的条目格式: {entry.to_hosts_line()}")
            self.store.delete_by_position(int(target))
            result.removed.append(entry.to_hosts_line())
        elif kind == 'address':
            result.removed.extend(self.store.delete_by_address(target))
        else:
            result.removed.extend(self.store.delete_by_domain(target))

        return result

    def list_entries(self) -> List[Tuple[int, str]]:
        return self.store.list_entries()

    def search(self, query: str) -> List[str]:
        return self.store.search(query)

    def batch(self, path: str) -> BatchResult:
        """
        从文件批量添加条目

        文件每行格式为 "<IP> <域名> [<域名> ...]"，注释行和空行被跳过。
        每行独立尝试，失败不会中止后续行。无法解码的字节按替换字符读入，
        该行会因地址或域名无效而计为失败。

        所有成功的行在同一个事务中写入：整个批量操作只创建一次备份，
        备份内容就是批量操作之前的文件。

        异常:
            FileNotFound: 文件不存在或无法读取
            PermissionDenied: 权限不足
            BackupFailed, WriteFailed: 写入失败，本次批量添加全部不生效
        """
        source = Path(path)
        if not source.is_file():
            raise FileNotFound(f"文件不存在: {path}")

        self.check_permissions()

        try:
            with open(source, 'r', encoding='utf-8', errors='replace') as f:
                raw_lines = f.read().splitlines()
        except PermissionError as e:
            raise PermissionDenied(f"无法读取 {path}: 权限被拒绝") from e
        except OSError as e:
            raise FileNotFound(f"无法读取 {path}: {e}") from e

        result = BatchResult()
        with self.store.edit() as hosts_file:
            for raw_line in raw_lines:
                line = raw_line.strip()
                if not line or line.startswith('#'):
                    continue

                fields = line.split()
                address, domains = fields[0], ' '.join(fields[1:])

                try:
                    domains = self._validate_entry(address, domains)
                    self.store.append_to(hosts_file, address, domains)
                    result.success += 1
                except HostsError as e:
                    # 单行失败不影响其他行
                    self.logger.warning(f"批量添加失败: {line}: {e}")
                    result.failed += 1
                    result.failures.append((line, str(e)))

        self.logger.info(f"批量添加完成: 成功 {result.success}，失败 {result.failed}")
        return result
