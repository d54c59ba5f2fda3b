"""
模型绑定

将配置项映射到 dataclass 模型：
1. 按显示名称或字段名匹配配置键（显示名称优先）
2. 一次性报告所有缺失的必需字段
3. 全部转换成功后才写入模型，不会出现部分绑定
"""

from typing import Any, Dict, List, Optional, Tuple, TypeVar, Union

from loguru import logger

from ..convert.converter import convert, default_value
from ..core.errors import MissingKeyError
from ..parser.store import ConfigStore
from .fields import FieldDescriptor, describe_model, is_frozen


ModelT = TypeVar("ModelT")


def resolve_key(store: ConfigStore, field: FieldDescriptor) -> Optional[str]:
    """获取字段对应的配置键，未定义时返回 None"""
    if field.display_name in store:
        return field.display_name
    if field.name in store:
        return field.name
    return None


def collect_values(store: ConfigStore, fields: Tuple[FieldDescriptor, ...]) -> Dict[str, Any]:
    """
    校验必需字段并转换所有已定义字段的值

    Raises:
        MissingKeyError: 存在未定义的必需字段（列出全部）
        ValueFormatError: 某个值无法转换为字段类型
    """
    keys = {field.name: resolve_key(store, field) for field in fields}

    missing = [field.display_name for field in fields if field.required and keys[field.name] is None]
    if missing:
        raise MissingKeyError(missing)

    values: Dict[str, Any] = {}
    for field in fields:
        key = keys[field.name]
        if key is None:
            continue
        values[field.name] = convert(store[key], field.value_type, key=key)
    return values


def bind(store: ConfigStore, model: Union[ModelT, type]) -> ModelT:
    """
    将配置项绑定到模型

    Args:
        store: 配置项存储
        model: dataclass 类型（将创建新实例）或已有实例

    Returns:
        绑定后的模型

    Raises:
        TypeError: 模型不是 dataclass，或实例为冻结 dataclass
        MissingKeyError: 必需字段未定义
        ValueFormatError: 值无法转换为字段类型
    """
    model_type = model if isinstance(model, type) else type(model)
    fields = describe_model(model_type)

    if not isinstance(model, type) and is_frozen(model_type):
        raise TypeError(f"冻结的 dataclass 实例不可写: {model_type.__name__}")

    values = collect_values(store, fields)
    logger.debug(f"绑定模型 {model_type.__name__}: {len(values)}/{len(fields)} 个字段已定义")

    if isinstance(model, type):
        return _construct(model_type, fields, values)

    for name, value in values.items():
        setattr(model, name, value)
    return model


def _construct(model_type: type, fields: Tuple[FieldDescriptor, ...], values: Dict[str, Any]):
    kwargs: Dict[str, Any] = {}
    late: List[Tuple[str, Any]] = []
    for field in fields:
        if field.name in values:
            if field.init:
                kwargs[field.name] = values[field.name]
            else:
                late.append((field.name, values[field.name]))
        elif field.init and not field.has_default:
            kwargs[field.name] = default_value(field.value_type)

    instance = model_type(**kwargs)
    for name, value in late:
        object.__setattr__(instance, name, value)
    return instance
