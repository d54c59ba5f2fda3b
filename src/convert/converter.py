"""
配置值类型转换

将存储中的原始值转换为请求的目标类型，包括：
- 基本类型 (str/int/float/bool/Decimal)
- 标识符 (UUID) 与日期时间 (ISO 8601)
- 枚举（按名称，不区分大小写；Flag 枚举支持逗号分隔的组合）
- Optional[X] / X | None 可空包装
"""

import re
import types
import typing
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum, Flag
from typing import Any, Callable, Dict, Optional, Tuple
from uuid import UUID

from loguru import logger

from ..core.errors import ValueFormatError
from ..parser.serializer import format_value


_UNION_TYPES = tuple(t for t in (typing.Union, getattr(types, "UnionType", None)) if t is not None)


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"'{text}' 不是有效的布尔值 (true/false)")


# 仅接受 ASCII 数字，不接受下划线分组或其他文字的数字
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_REAL_PATTERN = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[+-]?(?:nan|inf|infinity)",
    re.IGNORECASE,
)


def _parse_int(text: str) -> int:
    stripped = text.strip()
    if not _INT_PATTERN.fullmatch(stripped):
        raise ValueError(f"'{text}' 不是有效的十进制整数")
    return int(stripped, 10)


def _parse_real(number_type: type) -> Callable[[str], Any]:
    def parse(text: str) -> Any:
        stripped = text.strip()
        if not _REAL_PATTERN.fullmatch(stripped):
            raise ValueError(f"'{text}' 不是有效的十进制数")
        return number_type(stripped)
    return parse


def _parse_str(text: str) -> str:
    return text


# 文本解析器与零值，按类型注册
_PARSERS: Dict[type, Callable[[str], Any]] = {
    str: _parse_str,
    bool: _parse_bool,
    int: _parse_int,
    float: _parse_real(float),
    Decimal: _parse_real(Decimal),
    UUID: lambda text: UUID(text.strip()),
    datetime: lambda text: datetime.fromisoformat(text.strip()),
    date: lambda text: date.fromisoformat(text.strip()),
    time: lambda text: time.fromisoformat(text.strip()),
}

_DEFAULTS: Dict[type, Callable[[], Any]] = {
    str: str,
    bool: bool,
    int: int,
    float: float,
    Decimal: Decimal,
    UUID: lambda: UUID(int=0),
    datetime: lambda: datetime.min,
    date: lambda: date.min,
    time: lambda: time.min,
}


def register_converter(target_type: type, parser: Callable[[str], Any],
                       default: Optional[Callable[[], Any]] = None) -> None:
    """
    注册自定义类型的文本解析器

    Args:
        target_type: 目标类型（子类同样适用）
        parser: 将规范文本转换为目标类型的函数，失败时应抛出异常
        default: 返回零值的工厂函数，未提供时零值为 None
    """
    _PARSERS[target_type] = parser
    if default is not None:
        _DEFAULTS[target_type] = default
    logger.debug(f"注册类型转换器: {target_type!r}")


def unwrap_optional(target_type: Any) -> Tuple[Any, bool]:
    """
    拆解 Optional[X]

    Returns:
        (内部类型, 是否可空)
    """
    if typing.get_origin(target_type) in _UNION_TYPES:
        args = typing.get_args(target_type)
        inner = [arg for arg in args if arg is not type(None)]
        if len(inner) == 1 and len(args) == 2:
            return inner[0], True
    return target_type, False


def _lookup(registry: Dict[type, Callable], target_type: Any) -> Optional[Callable]:
    for base in getattr(target_type, "__mro__", ()):
        if base in registry:
            return registry[base]
    return None


def _is_enum_type(target_type: Any) -> bool:
    return isinstance(target_type, type) and issubclass(target_type, Enum)


def default_value(target_type: Any) -> Any:
    """获取目标类型的零值，可空类型返回 None"""
    inner, optional = unwrap_optional(target_type)
    if optional:
        return None
    if _is_enum_type(inner):
        try:
            return inner(0)
        except ValueError:
            return next(iter(inner), None)
    factory = _lookup(_DEFAULTS, inner)
    return factory() if factory is not None else None


def _is_instance(value: Any, target_type: Any) -> bool:
    if target_type is Any or target_type is object:
        return True
    if not isinstance(target_type, type):
        return False
    if isinstance(value, bool) and target_type is int:
        return False
    return isinstance(value, target_type)


def _find_member(enum_type: type, name: str) -> Enum:
    members = enum_type.__members__
    if name in members:
        return members[name]
    lowered = name.lower()
    for member_name, member in members.items():
        if member_name.lower() == lowered:
            return member
    if _INT_PATTERN.fullmatch(name):
        return enum_type(int(name))
    raise ValueError(f"'{name}' 不是 {enum_type.__name__} 的成员")


def parse_enum(text: str, enum_type: type) -> Enum:
    """
    按名称解析枚举值

    Flag 枚举支持逗号分隔的多个名称，结果按位或组合，
    如 `One,Two` 等于 `Three = One | Two`。
    """
    names = [part.strip() for part in text.split(",")]
    if any(not name for name in names):
        raise ValueError(f"'{text}' 包含空的枚举名称")
    if len(names) > 1 and not issubclass(enum_type, Flag):
        raise ValueError(f"{enum_type.__name__} 不是 Flag 枚举，不能组合多个值")

    result = _find_member(enum_type, names[0])
    for name in names[1:]:
        result = result | _find_member(enum_type, name)
    return result


def convert(value: Any, target_type: Any, key: Optional[str] = None) -> Any:
    """
    将原始值转换为目标类型

    Args:
        value: 原始值（文本或已类型化的值），None 表示未定义
        target_type: 目标类型，可以是 Optional[X]
        key: 字段名，仅用于错误信息

    Returns:
        转换后的值；未定义时返回目标类型的零值

    Raises:
        ValueFormatError: 没有可用的转换，或文本无法解析为目标类型
    """
    inner, optional = unwrap_optional(target_type)
    if value is None:
        return None if optional else default_value(inner)

    if _is_instance(value, inner):
        return value

    if _is_enum_type(inner):
        parser = lambda text: parse_enum(text, inner)  # noqa: E731
    else:
        parser = _lookup(_PARSERS, inner)
    if parser is None:
        raise ValueFormatError(key, value, target_type)

    try:
        return parser(format_value(value))
    except Exception as e:
        logger.debug(f"字段 {key} 的值 {value!r} 转换失败: {e}")
        raise ValueFormatError(key, value, target_type, reason=str(e)) from e
