"""
IP 地址与域名的格式校验模块

只做词法校验，不检查地址的可达性或用途（回环、组播等）。
"""

import re


class AddressValidator:
    """
    校验 IPv4 / IPv6 地址字面量

    包含冒号的字符串按 IPv6 规则校验，否则按 IPv4 规则校验。
    """

    IPV4_PATTERN = re.compile(r'([0-9]{1,3}\.){3}[0-9]{1,3}')
    LEADING_ZERO = re.compile(r'^0[0-9]+$')
    HEXTET = re.compile(r'[0-9a-fA-F]{1,4}')

    @classmethod
    def validate(cls, address: str) -> bool:
        """
        校验地址格式

        参数:
            address: 待校验的地址字符串

        返回:
            格式有效返回 True，否则返回 False
        """
        if ':' in address:
            return cls.validate_ipv6(address)
        return cls.validate_ipv4(address)

    @classmethod
    def validate_ipv4(cls, address: str) -> bool:
        """四段十进制，每段 0-255，不允许前导零（单独的 "0" 除外）"""
        if not cls.IPV4_PATTERN.fullmatch(address):
            return False

        for segment in address.split('.'):
            if int(segment) > 255 or cls.LEADING_ZERO.match(segment):
                return False
        return True

    @classmethod
    def validate_ipv6(cls, address: str) -> bool:
        """
        完整的 8 组形式，或带一个 "::" 压缩的形式（前置、后置、中间），以及单独的 "::"
        """
        if address.count('::') > 1:
            return False

        if '::' in address:
            head, tail = address.split('::')
            head_groups = head.split(':') if head else []
            tail_groups = tail.split(':') if tail else []
            # "::" 至少代表一组零
            if len(head_groups) + len(tail_groups) > 7:
                return False
            groups = head_groups + tail_groups
        else:
            groups = address.split(':')
            if len(groups) != 8:
                return False

        return all(cls.HEXTET.fullmatch(group) for group in groups)


class DomainValidator:
    """
    校验一个或多个以空白分隔的域名

    同一行中多个域名共享一个地址，因此每个域名都必须独立通过校验。
    """

    LABEL = r'[a-zA-Z0-9]([a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?'
    DOMAIN_PATTERN = re.compile(rf'{LABEL}(\.{LABEL})*')
    INVALID_CHARS = re.compile(r'[^a-zA-Z0-9.-]')

    MIN_LENGTH = 2
    MAX_LENGTH = 255

    @classmethod
    def validate(cls, domains_field: str) -> bool:
        """
        校验域名字段

        参数:
            domains_field: 以空白分隔的域名列表

        返回:
            全部域名有效返回 True；任一无效或字段为空返回 False
        """
        tokens = domains_field.split()
        if not tokens:
            return False
        return all(cls.validate_domain(token) for token in tokens)

    @classmethod
    def validate_domain(cls, domain: str) -> bool:
        if not cls.MIN_LENGTH <= len(domain) <= cls.MAX_LENGTH:
            return False
        if cls.INVALID_CHARS.search(domain):
            return False
        return cls.DOMAIN_PATTERN.fullmatch(domain) is not None
