"""
模型字段描述

通过 dataclass 字段元数据声明绑定规则（显示名称、是否必需），
并按模型类型缓存字段描述。
"""

import dataclasses
import typing
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional, Tuple


DISPLAY_NAME = "display_name"
REQUIRED = "required"


def config_field(default: Any = dataclasses.MISSING, *, display_name: Optional[str] = None,
                 required: bool = False, default_factory: Any = dataclasses.MISSING, **kwargs):
    """
    声明可绑定的 dataclass 字段

    Args:
        default: 字段默认值
        display_name: 匹配配置键时优先使用的显示名称
        required: 配置字符串中是否必须定义该字段
        default_factory: 默认值工厂
        **kwargs: 传递给 dataclasses.field 的其他参数
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[REQUIRED] = required
    if display_name is not None:
        metadata[DISPLAY_NAME] = display_name
    return dataclasses.field(default=default, default_factory=default_factory,
                             metadata=metadata, **kwargs)


@dataclass(frozen=True)
class FieldDescriptor:
    """模型字段描述"""
    name: str
    display_name: str
    required: bool
    value_type: Any
    init: bool = True
    has_default: bool = False


@lru_cache(maxsize=None)
def describe_model(model_type: type) -> Tuple[FieldDescriptor, ...]:
    """
    获取模型的可写字段描述（按声明顺序）

    Args:
        model_type: dataclass 类型

    Raises:
        TypeError: 模型不是 dataclass
    """
    if not (isinstance(model_type, type) and dataclasses.is_dataclass(model_type)):
        raise TypeError(f"只能绑定到 dataclass 模型: {model_type!r}")

    hints = typing.get_type_hints(model_type)
    descriptors = []
    for field in dataclasses.fields(model_type):
        descriptors.append(FieldDescriptor(
            name=field.name,
            display_name=field.metadata.get(DISPLAY_NAME) or field.name,
            required=bool(field.metadata.get(REQUIRED, False)),
            value_type=hints.get(field.name, Any),
            init=field.init,
            has_default=(field.default is not dataclasses.MISSING
                         or field.default_factory is not dataclasses.MISSING),
        ))
    return tuple(descriptors)


def is_frozen(model_type: type) -> bool:
    params = getattr(model_type, "__dataclass_params__", None)
    return bool(params and params.frozen)
