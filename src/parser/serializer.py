"""
配置字符串序列化

将 ConfigStore 渲染为规范形式的配置字符串：键小写、按插入顺序、
以 `;` 连接，仅在必要时为值加引号。
"""

import math
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum, Flag
from typing import Any
from uuid import UUID

from .store import ConfigStore
from .tokenizer import ENTRY_SEPARATOR, KEY_VALUE_SEPARATOR, QUOTE


def format_value(value: Any) -> str:
    """
    获取值的规范文本形式

    Args:
        value: 原始文本或已类型化的值

    Returns:
        规范文本（未加引号）
    """
    if isinstance(value, str):
        return value
    if isinstance(value, Enum):
        return _format_enum(value)
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            return str(value)
        text = format(value.normalize(), "f")
        return "0" if text in ("-0", "0") else text
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _format_enum(member: Enum) -> str:
    name = member.name
    if name and "|" not in name:
        return name
    if isinstance(member, Flag):
        # 没有单独名称的组合值按单比特成员拆分，便于重新解析
        names = [
            flag.name
            for flag in type(member).__members__.values()
            if flag.value and flag.value & (flag.value - 1) == 0 and flag in member
        ]
        if names:
            return ",".join(names)
    return str(member.value)


def needs_quoting(text: str) -> bool:
    """值包含分隔符、引号或空白时需要加引号"""
    return any(
        char in (ENTRY_SEPARATOR, KEY_VALUE_SEPARATOR, QUOTE) or char.isspace()
        for char in text
    )


def quote_value(text: str) -> str:
    """按需为值加双引号，内部的双引号写为两个双引号"""
    if not needs_quoting(text):
        return text
    return QUOTE + text.replace(QUOTE, QUOTE * 2) + QUOTE


def render(store: ConfigStore) -> str:
    """渲染规范配置字符串，空存储返回空字符串"""
    return ENTRY_SEPARATOR.join(
        f"{key}{KEY_VALUE_SEPARATOR}{quote_value(format_value(value))}"
        for key, value in store.items()
    )
