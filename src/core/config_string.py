"""
配置字符串解析器

以连接字符串的形式（`key=value;key2="value;with;separators"`）读写任意配置，
并支持类型转换和 dataclass 模型映射。
"""

from dataclasses import fields as dataclass_fields, is_dataclass
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple, TypeVar, Union

from loguru import logger

from ..binding.binder import bind
from ..convert.converter import convert
from ..parser.serializer import format_value, render
from ..parser.store import ConfigStore
from ..parser.tokenizer import parse
from .errors import ConfigSyntaxError, MissingKeyError


T = TypeVar("T")


class ConfigString:
    """配置字符串解析器"""

    def __init__(self, config_string: Optional[str] = None):
        """
        初始化配置字符串解析器

        Args:
            config_string: 包含键值设置的配置字符串，None 表示空配置

        Raises:
            ConfigSyntaxError: 配置字符串格式错误
        """
        self._store: ConfigStore = parse(config_string)

    # ------------------------------------------------------------------
    # 属性
    # ------------------------------------------------------------------
    @property
    def count(self) -> int:
        """配置项数量"""
        return len(self._store)

    @property
    def keys(self) -> List[str]:
        """规范化（小写）的配置键"""
        return list(self._store)

    @property
    def config_string(self) -> str:
        """规范化的配置字符串"""
        return render(self._store)

    def __len__(self) -> int:
        return len(self._store)

    def __getitem__(self, key: str) -> Any:
        return self._store.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self._store[key] = value

    def __delitem__(self, key: str) -> None:
        self.remove(key)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return self.entries()

    def __str__(self) -> str:
        return self.config_string

    def __repr__(self) -> str:
        return f"ConfigString({self.config_string!r})"

    # ------------------------------------------------------------------
    # 读取
    # ------------------------------------------------------------------
    def contains_key(self, key: str) -> bool:
        """配置字符串是否包含指定键"""
        return key in self._store

    def entries(self) -> Iterator[Tuple[str, Any]]:
        """按插入顺序产出 (键, 值)"""
        for key, value in self._store.items():
            yield key, value

    def get(self, key: str, required: bool = True) -> Any:
        """
        获取原始值

        Args:
            key: 配置键（不区分大小写）
            required: 未定义时是否抛出异常

        Returns:
            原始值，未定义且非必需时返回 None

        Raises:
            MissingKeyError: 键未定义且 required 为 True
        """
        if key not in self._store:
            if required:
                raise MissingKeyError(
                    [key],
                    f"配置字符串中不包含键 '{key}' 的值。有效的键: '{', '.join(self._store)}'."
                )
            return None
        return self._store[key]

    def get_as(self, key: str, value_type: Any, required: bool = True) -> Any:
        """
        获取并转换为指定类型的值

        Args:
            key: 配置键（不区分大小写）
            value_type: 目标类型，可以是 Optional[X]
            required: 未定义时是否抛出异常

        Returns:
            转换后的值，未定义且非必需时返回类型零值

        Raises:
            MissingKeyError: 键未定义且 required 为 True
            ValueFormatError: 值无法转换为目标类型
        """
        return convert(self.get(key, required), value_type, key=key)

    def assert_required_keys(self, keys: Iterable[str]) -> None:
        """
        断言指定的键均已定义

        Raises:
            MissingKeyError: 列出所有未定义的键
        """
        missing = [key for key in keys if key not in self._store]
        if missing:
            raise MissingKeyError(missing)

    def map_to(self, model: Union[T, type]) -> T:
        """
        将配置映射到 dataclass 模型

        Args:
            model: 模型类型（创建新实例）或已有实例

        Raises:
            MissingKeyError: 必需字段未定义（列出全部）
            ValueFormatError: 值无法转换为字段类型
        """
        return bind(self._store, model)

    def equivalent_to(self, other: Optional[str]) -> bool:
        """
        判断是否与另一个配置字符串等价

        键不区分大小写、与顺序无关；值区分大小写。
        无法解析的配置字符串与任何配置都不等价。
        """
        try:
            other_store = parse(other)
        except ConfigSyntaxError as e:
            logger.debug(f"比较对象不是有效的配置字符串: {e}")
            return False
        return _canonical_pairs(self._store) == _canonical_pairs(other_store)

    # ------------------------------------------------------------------
    # 写入
    # ------------------------------------------------------------------
    def add(self, key: str, value: Any) -> None:
        """
        添加配置项并重新规范化

        Args:
            key: 配置键
            value: 配置值，空值会删除该键
        """
        self._store[key] = value
        self._normalize()

    def add_from(self, values: Any) -> None:
        """
        批量添加配置项

        Args:
            values: 映射、dataclass 实例或普通对象（使用其公开属性）
        """
        for key, value in _public_fields(values):
            self.add(key, value)

    def remove(self, key: str) -> None:
        """删除配置项，不存在时忽略"""
        self._store.discard(key)

    def clear(self) -> None:
        """清空配置"""
        self._store.clear()

    def _normalize(self) -> None:
        # 重新解析规范字符串，使存储的值与序列化结果一致
        self._store = parse(render(self._store))


def _canonical_pairs(store: ConfigStore) -> dict:
    return {key: format_value(value) for key, value in store.items()}


def _public_fields(values: Any) -> Iterable[Tuple[str, Any]]:
    if isinstance(values, Mapping):
        return list(values.items())
    if is_dataclass(values) and not isinstance(values, type):
        return [(field.name, getattr(values, field.name)) for field in dataclass_fields(values)]
    return [(name, value) for name, value in vars(values).items() if not name.startswith("_")]
