"""
配置字符串解析模块

提供配置字符串的词法解析、有序存储和规范化序列化功能。
"""

from .store import ConfigStore
from .tokenizer import parse, tokenize
from .serializer import format_value, quote_value, render

__all__ = ['ConfigStore', 'parse', 'tokenize', 'format_value', 'quote_value', 'render']
