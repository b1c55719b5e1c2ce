"""
hosts 文件备份模块
"""

import logging
import os
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from hostsedit.errors import BackupFailed


class BackupManager:
    """
    在每次修改前为 hosts 文件创建带时间戳的完整副本

    备份文件名格式: <hosts 文件名>.<YYYYmmdd_HHMMSS>.bak
    时间戳精确到秒，同一秒内的多次备份会互相覆盖。
    备份不会被自动清理。
    """

    TIMESTAMP_FORMAT = '%Y%m%d_%H%M%S'
    MODE = 0o644

    def __init__(
        self,
        hosts_path: Path,
        logger: logging.Logger,
        backup_dir: Optional[Path] = None
    ):
        """
        初始化备份管理器

        参数:
            hosts_path: hosts 文件路径
            logger: 日志记录器实例
            backup_dir: 备份目录，默认与 hosts 文件同目录
        """
        self.hosts_path = Path(hosts_path)
        self.backup_dir = Path(backup_dir) if backup_dir else self.hosts_path.parent
        self.logger = logger

    def backup_path_for(self, moment: datetime) -> Path:
        timestamp = moment.strftime(self.TIMESTAMP_FORMAT)
        return self.backup_dir / f"{self.hosts_path.name}.{timestamp}.bak"

    def snapshot(self) -> Path:
        """
        逐字节复制当前 hosts 文件

        返回:
            备份文件路径

        异常:
            BackupFailed: 无法创建备份（调用方必须中止修改）
        """
        backup_path = self.backup_path_for(datetime.now())

        try:
            shutil.copyfile(self.hosts_path, backup_path)
            os.chmod(backup_path, self.MODE)
        except OSError as e:
            self.logger.error(f"创建备份失败: {e}")
            raise BackupFailed(f"无法创建备份 {backup_path}: {e}") from e

        self.logger.info(f"已创建备份: {backup_path}")
        return backup_path

    def list_backups(self):
        """按文件名（即时间顺序）返回已有的备份文件"""
        pattern = f"{self.hosts_path.name}.*.bak"
        return sorted(self.backup_dir.glob(pattern))
