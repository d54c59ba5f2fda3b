"""
配置管理模块

提供命令行工具配置的加载、验证和管理功能。
"""

from .manager import LoggingConfig, OutputConfig, SettingsManager

__all__ = ['LoggingConfig', 'OutputConfig', 'SettingsManager']
