"""
hostsedit 数据模型
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


def is_comment(line: str) -> bool:
    return line.lstrip().startswith('#')


def is_blank(line: str) -> bool:
    return not line.strip()


@dataclass(frozen=True)
class HostEntry:
    """
    代表 hosts 文件中的单个条目

    属性:
        address: IPv4 或 IPv6 地址
        domains: 共享该地址的一个或多个主机名
    """

    address: str
    domains: Tuple[str, ...]

    @classmethod
    def from_line(cls, line: str) -> Optional["HostEntry"]:
        """
        从 hosts 文件行解析条目

        行内 "#" 之后的内容视为注释。

        参数:
            line: hosts 文件中的一行

        返回:
            HostEntry 对象；注释行、空行或缺少域名的行返回 None
        """
        content = line.split('#', 1)[0]
        fields = content.split()
        if len(fields) < 2:
            return None
        return cls(address=fields[0], domains=tuple(fields[1:]))

    @property
    def domains_field(self) -> str:
        return ' '.join(self.domains)

    def to_hosts_line(self) -> str:
        """
        转换为 hosts 文件行格式

        格式: <IP> <主机名> [<主机名> ...]

        返回:
            格式化的 hosts 文件行
        """
        return f"{self.address} {self.domains_field}"

    def __str__(self) -> str:
        return f"{self.domains_field} -> {self.address}"


@dataclass
class HostsFile:
    """
    hosts 文件的内存表示：按顺序排列的行

    注释行和空行原样保留；其余每一行都是一个条目行。
    条目的位置（ID）从 1 开始，只在当前读取的内容中有效。
    """

    lines: List[str] = field(default_factory=list)

    @classmethod
    def parse(cls, text: str) -> "HostsFile":
        # 只按 "\n" 拆分，行尾的 "\r" 随行保留
        lines = text.split('\n')
        if lines[-1] == '':
            lines.pop()
        return cls(lines=lines)

    def render(self) -> str:
        if not self.lines:
            return ''
        return '\n'.join(self.lines) + '\n'

    def entry_indexes(self) -> List[int]:
        """返回所有条目行在 lines 中的下标，按文件顺序排列"""
        return [
            index for index, line in enumerate(self.lines)
            if not is_comment(line) and not is_blank(line)
        ]

    def numbered_entries(self) -> List[Tuple[int, str]]:
        """返回 (位置, 去除首尾空白的行) 列表，位置从 1 开始"""
        return [
            (position, self.lines[index].strip())
            for position, index in enumerate(self.entry_indexes(), start=1)
        ]

    def index_of_position(self, position: int) -> Optional[int]:
        indexes = self.entry_indexes()
        if 1 <= position <= len(indexes):
            return indexes[position - 1]
        return None
