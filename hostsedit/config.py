"""
配置管理模块，支持环境变量和 .env 文件
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# 上游 shell 版本的地址，可用 UPDATE_URL 改为本工具的发布文件
DEFAULT_UPDATE_URL = "https://raw.githubusercontent.com/ErvisTusha/hosts/main/hosts.sh"


@dataclass
class Config:
    """应用配置类，从环境变量加载配置"""

    hosts_file_path: str = "/etc/hosts"
    backup_dir: Optional[str] = None
    log_level: str = "WARNING"
    install_dir: str = "/usr/local/bin"
    update_url: str = DEFAULT_UPDATE_URL
    update_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "Config":
        """
        从环境变量加载配置，当前目录下的 .env 文件会先被加载（不覆盖已有变量）

        环境变量说明:
            HOSTS_FILE: hosts 文件路径 (默认: /etc/hosts)
            BACKUP_DIR: 备份目录 (默认: hosts 文件所在目录)
            LOG_LEVEL: 日志级别 (默认: WARNING)
            INSTALL_DIR: 安装目录 (默认: /usr/local/bin)
            UPDATE_URL: 更新下载地址
            UPDATE_TIMEOUT: 下载超时秒数 (默认: 30)

        异常:
            ValueError: UPDATE_TIMEOUT 不是数字
        """
        load_dotenv()

        timeout = os.getenv("UPDATE_TIMEOUT", "30")
        try:
            update_timeout = float(timeout)
        except ValueError as e:
            raise ValueError(f"无效的 UPDATE_TIMEOUT: {timeout}. 必须是正数秒数") from e

        return cls(
            hosts_file_path=os.getenv("HOSTS_FILE", "/etc/hosts"),
            backup_dir=os.getenv("BACKUP_DIR") or None,
            log_level=os.getenv("LOG_LEVEL", "WARNING").upper(),
            install_dir=os.getenv("INSTALL_DIR", "/usr/local/bin"),
            update_url=os.getenv("UPDATE_URL", DEFAULT_UPDATE_URL),
            update_timeout=update_timeout
        )

    def validate(self) -> None:
        """验证配置是否有效"""
        valid_log_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level not in valid_log_levels:
            raise ValueError(
                f"无效的 LOG_LEVEL: {self.log_level}. "
                f"必须是以下之一: {', '.join(sorted(valid_log_levels))}"
            )
        if self.update_timeout <= 0:
            raise ValueError(f"无效的 UPDATE_TIMEOUT: {self.update_timeout}")
