"""
配置项存储

有序、大小写不敏感的键值存储：
- 键统一规范化为去除首尾空白后的小写形式
- 覆盖已有键时保留其首次写入的位置
- 写入空值（None、空字符串或仅含空白的字符串）等同于删除该键
"""

from collections.abc import MutableMapping
from typing import Any, Dict, Iterator, Optional


INVALID_KEY_CHARS = (";", "=")


def fold_key(key: Any) -> Optional[str]:
    """查找时使用的键折叠，非字符串键返回 None"""
    if not isinstance(key, str):
        return None
    return key.strip().lower()


def is_blank(value: Any) -> bool:
    """判断值是否视为未定义"""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


class ConfigStore(MutableMapping):
    """有序的大小写不敏感配置项存储"""

    def __init__(self, entries=None):
        self._entries: Dict[str, Any] = {}
        if entries is not None:
            items = entries.items() if hasattr(entries, "items") else entries
            for key, value in items:
                self[key] = value

    @staticmethod
    def normalize_key(key: Any) -> str:
        """
        规范化并校验写入用的键

        Args:
            key: 原始键

        Returns:
            规范化后的小写键

        Raises:
            TypeError: 键不是字符串
            ValueError: 键为空或包含无法序列化的字符
        """
        if not isinstance(key, str):
            raise TypeError(f"配置键必须是字符串: {key!r}")
        canonical = key.strip().lower()
        if not canonical:
            raise ValueError("配置键不能为空")
        for char in INVALID_KEY_CHARS:
            if char in canonical:
                raise ValueError(f"配置键不能包含 '{char}': {key!r}")
        return canonical

    def __getitem__(self, key: str) -> Any:
        folded = fold_key(key)
        if folded is None or folded not in self._entries:
            raise KeyError(key)
        return self._entries[folded]

    def __setitem__(self, key: str, value: Any) -> None:
        canonical = self.normalize_key(key)
        if is_blank(value):
            self._entries.pop(canonical, None)
        else:
            self._entries[canonical] = value

    def __delitem__(self, key: str) -> None:
        folded = fold_key(key)
        if folded is None or folded not in self._entries:
            raise KeyError(key)
        del self._entries[folded]

    def __contains__(self, key: object) -> bool:
        return fold_key(key) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def discard(self, key: str) -> None:
        """删除键，不存在时忽略"""
        folded = fold_key(key)
        if folded is not None:
            self._entries.pop(folded, None)

    def __repr__(self) -> str:
        return f"ConfigStore({self._entries!r})"
