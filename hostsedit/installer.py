"""
安装、更新和卸载命令行工具
"""

import logging
import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import List, Optional

import requests

from hostsedit.config import Config
from hostsedit.errors import InstallError, PermissionDenied

COMMAND_NAME = "hosts"
ALIASES = ("addhost", "rmhost")


class Installer:
    """
    把当前可执行文件安装到系统目录，并创建 addhost / rmhost 别名

    更新时先下载到同目录的临时文件，成功后才原子性替换旧文件。
    """

    MODE = 0o755

    def __init__(self, config: Config, logger: logging.Logger):
        """
        初始化安装器

        参数:
            config: 应用配置
            logger: 日志记录器实例
        """
        self.config = config
        self.logger = logger
        self.install_dir = Path(config.install_dir)
        self.target = self.install_dir / COMMAND_NAME

    @property
    def alias_paths(self) -> List[Path]:
        return [self.install_dir / alias for alias in ALIASES]

    def is_installed(self) -> bool:
        return self.target.exists()

    def _check_permissions(self) -> None:
        if not os.access(self.install_dir, os.W_OK):
            self.logger.error(f"没有写入权限: {self.install_dir}")
            raise PermissionDenied(f"需要管理员权限才能写入 {self.install_dir}")

    def install(self, source: Optional[Path] = None) -> bool:
        """
        安装命令

        参数:
            source: 要安装的可执行文件，默认为当前运行的程序

        返回:
            新安装返回 True，已经安装过返回 False

        异常:
            PermissionDenied: 安装目录不可写
            InstallError: 复制或创建别名失败
        """
        self._check_permissions()

        if self.is_installed():
            self.logger.info(f"已安装: {self.target}")
            return False

        source = Path(source or sys.argv[0]).resolve()
        try:
            shutil.copyfile(source, self.target)
            os.chmod(self.target, self.MODE)
            for alias in self.alias_paths:
                if alias.is_symlink() or alias.exists():
                    alias.unlink()
                alias.symlink_to(self.target)
        except OSError as e:
            self.logger.error(f"安装失败: {e}")
            raise InstallError(f"安装到 {self.target} 失败: {e}") from e

        self.logger.info(f"已安装 {source} -> {self.target}")
        return True

    def update(self) -> Path:
        """
        下载最新版本并替换已安装的命令

        返回:
            更新后的可执行文件路径

        异常:
            InstallError: 未安装、下载失败或替换失败（旧文件保持不变）
            PermissionDenied: 安装目录不可写
        """
        if not self.is_installed():
            raise InstallError(f"{COMMAND_NAME} 尚未安装，请先执行 install")

        self._check_permissions()

        try:
            response = requests.get(self.config.update_url, timeout=self.config.update_timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            self.logger.error(f"下载更新失败: {e}")
            raise InstallError(f"从 {self.config.update_url} 下载更新失败: {e}") from e

        temp_fd, temp_path = tempfile.mkstemp(dir=self.install_dir, prefix=f'.{COMMAND_NAME}.tmp.')
        try:
            with os.fdopen(temp_fd, 'wb') as f:
                f.write(response.content)
            os.chmod(temp_path, self.MODE)
            os.replace(temp_path, self.target)
        except OSError as e:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            self.logger.error(f"替换可执行文件失败: {e}")
            raise InstallError(f"更新 {self.target} 失败: {e}") from e

        self.logger.info(f"已更新 {self.target}")
        return self.target

    def uninstall(self) -> bool:
        """
        删除命令及其别名

        返回:
            删除了文件返回 True，未安装返回 False
        """
        if not self.is_installed():
            return False

        self._check_permissions()

        for path in [self.target] + self.alias_paths:
            try:
                if path.is_symlink() or path.exists():
                    path.unlink()
            except OSError as e:
                raise InstallError(f"删除 {path} 失败: {e}") from e

        self.logger.info(f"已卸载 {self.target}")
        return True
