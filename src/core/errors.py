"""
配置字符串异常定义

所有异常都继承自 ConfigStringError，便于调用方统一捕获：
- MissingKeyError: 必需的键（或模型字段）未定义
- ValueFormatError: 已定义的值无法转换为目标类型
- ConfigSyntaxError: 配置字符串本身格式错误（如引号未闭合）
"""

from typing import Any, Iterable, List, Optional


class ConfigStringError(Exception):
    """配置字符串相关异常的基类"""
    pass


class MissingKeyError(ConfigStringError, KeyError):
    """必需的键未定义"""

    def __init__(self, missing_keys: Iterable[str], message: Optional[str] = None):
        self.missing_keys: List[str] = list(missing_keys)
        if message is None:
            message = f"配置字符串无效，以下字段必须定义: {', '.join(self.missing_keys)}."
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError 默认会给消息加引号
        return self.message


class ValueFormatError(ConfigStringError, ValueError):
    """值无法转换为请求的类型"""

    def __init__(self, key: Optional[str], value: Any, target_type: Any, reason: Optional[str] = None):
        self.key = key
        self.value = value
        self.target_type = target_type
        self.reason = reason

        type_name = type_display_name(target_type)
        if reason:
            message = f"值 '{value}' 无法解析为类型 {type_name} (字段 {key}): {reason}"
        else:
            message = f"值 '{value}' 无法转换为类型 {type_name} (字段 {key})，两种类型之间没有可用的转换。"
        super().__init__(message)


class ConfigSyntaxError(ConfigStringError, ValueError):
    """配置字符串格式错误"""

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"{message} (位置 {position})")


def type_display_name(target_type: Any) -> str:
    """获取类型的完整显示名称"""
    module = getattr(target_type, "__module__", None)
    name = getattr(target_type, "__qualname__", None)
    if name is None:
        return repr(target_type).replace("typing.", "")
    if module in (None, "builtins"):
        return name
    return f"{module}.{name}"
