"""
类型转换模块

提供配置值到目标类型的转换功能。
"""

from .converter import convert, default_value, register_converter, unwrap_optional

__all__ = ['convert', 'default_value', 'register_converter', 'unwrap_optional']
