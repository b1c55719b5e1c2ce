"""
hostsedit - 管理 hosts 文件条目的命令行工具
"""

__version__ = "1.0.0"
__author__ = "hostsedit Project"

from hostsedit.app import HostsEditor
from hostsedit.config import Config
from hostsedit.models import HostEntry, HostsFile

__all__ = ["HostsEditor", "Config", "HostEntry", "HostsFile"]
