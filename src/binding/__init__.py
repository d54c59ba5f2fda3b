"""
模型绑定模块

提供配置项到 dataclass 模型的映射功能。
"""

from .fields import FieldDescriptor, config_field, describe_model
from .binder import bind

__all__ = ['FieldDescriptor', 'config_field', 'describe_model', 'bind']
