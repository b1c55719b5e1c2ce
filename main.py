#!/usr/bin/env python3
"""
hostsedit - 主入口点

管理 hosts 文件条目。以 addhost / rmhost 的名称调用时作为 add / rm 的快捷方式。
"""

import sys
from pathlib import Path

# 将当前目录添加到路径以导入 hostsedit 模块
sys.path.insert(0, str(Path(__file__).parent))

from hostsedit.cli import main


if __name__ == '__main__':
    sys.exit(main())
