"""
hostsedit 异常定义
"""


class HostsError(Exception):
    """所有 hostsedit 错误的基类，命令行层捕获后以状态码 1 退出"""


class InvalidAddress(HostsError):
    """IP 地址格式无效"""


class InvalidDomain(HostsError):
    """域名格式无效"""


class EmptyField(HostsError):
    """必填字段为空"""


class DuplicateEntry(HostsError):
    """条目已存在"""


class NotFound(HostsError):
    """无效的 ID 或没有匹配的条目"""


class PermissionDenied(HostsError):
    """没有修改 hosts 文件所需的权限"""


class BackupFailed(HostsError):
    """无法创建备份，修改被中止"""


class WriteFailed(HostsError):
    """写入 hosts 文件失败"""


class FileNotFound(HostsError):
    """批量导入的源文件不存在"""


class InstallError(HostsError):
    """安装、更新或卸载失败"""
