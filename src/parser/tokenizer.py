"""
配置字符串词法解析

将 `key=value;key2="quoted;value"` 形式的文本解析为有序的键值对：
- 以 `;` 分隔条目，双引号包裹的值内部的 `;` 视为普通字符
- 每个条目按第一个 `=` 拆分为键和值，两者均去除首尾空白
- 引号值内部的 `""` 表示一个字面量双引号
- 值为空的条目表示该键未定义
"""

from typing import Iterator, Optional, Tuple

from loguru import logger

from ..core.errors import ConfigSyntaxError
from .store import ConfigStore


ENTRY_SEPARATOR = ";"
KEY_VALUE_SEPARATOR = "="
QUOTE = '"'


def tokenize(text: Optional[str]) -> Iterator[Tuple[str, str]]:
    """
    逐条产出配置字符串中的 (键, 值) 对

    值为空的条目也会产出（值为空字符串），由调用方决定如何处理。

    Args:
        text: 配置字符串

    Raises:
        ConfigSyntaxError: 引号值未闭合或闭合引号后存在多余字符
    """
    if not text:
        return

    length = len(text)
    pos = 0
    while pos < length:
        end = pos
        while end < length and text[end] not in (ENTRY_SEPARATOR, KEY_VALUE_SEPARATOR):
            end += 1
        key = text[pos:end].strip()

        if end >= length or text[end] == ENTRY_SEPARATOR:
            # 没有 `=` 的条目视为空值
            if key:
                yield key, ""
            pos = end + 1
            continue

        value, pos = _read_value(text, end + 1)
        if not key:
            if value:
                logger.warning(f"忽略缺少键名的配置项: {value!r}")
            continue
        yield key, value


def _read_value(text: str, pos: int) -> Tuple[str, int]:
    """读取一个值，返回 (值, 下一个条目的起始位置)"""
    length = len(text)
    while pos < length and text[pos].isspace():
        pos += 1

    if pos >= length or text[pos] != QUOTE:
        end = text.find(ENTRY_SEPARATOR, pos)
        if end < 0:
            end = length
        return text[pos:end].strip(), end + 1

    start = pos
    pos += 1
    chars = []
    while True:
        if pos >= length:
            raise ConfigSyntaxError("引号值未闭合", position=start)
        char = text[pos]
        if char == QUOTE:
            if pos + 1 < length and text[pos + 1] == QUOTE:
                chars.append(QUOTE)
                pos += 2
                continue
            pos += 1
            break
        chars.append(char)
        pos += 1

    while pos < length and text[pos] != ENTRY_SEPARATOR:
        if not text[pos].isspace():
            raise ConfigSyntaxError("闭合引号后存在多余字符", position=pos)
        pos += 1
    return "".join(chars), pos + 1


def parse(text: Optional[str]) -> ConfigStore:
    """
    解析配置字符串为 ConfigStore

    后出现的同名键覆盖先前的值（位置不变），空值会删除已存在的键。

    Args:
        text: 配置字符串，None 视为空字符串

    Returns:
        解析后的配置项存储
    """
    store = ConfigStore()
    for key, value in tokenize(text):
        store[key] = value
    logger.debug(f"配置字符串解析完成，共 {len(store)} 项")
    return store
