"""
命令行工具配置管理器

负责加载、验证和管理命令行工具的配置，包括：
- 日志配置（级别、控制台与文件输出）
- 输出配置（展示格式、键排序）
- 以配置字符串形式给出的临时覆盖项
"""

from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger

from ..binding.fields import config_field
from ..core.config_string import ConfigString


LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
OUTPUT_FORMATS = ("table", "json", "text")


@dataclass
class LoggingConfig:
    """日志配置数据类"""
    level: str = config_field("WARNING", display_name="log level")

    # 控制台日志
    console_enabled: bool = config_field(True, display_name="log console")
    console_colored: bool = config_field(True, display_name="log colored")

    # 文件日志
    file_enabled: bool = config_field(False, display_name="log file")
    file_path: str = config_field("data/logs/configstring.log", display_name="log path")
    rotation: str = "10 MB"
    retention: str = "30 days"


@dataclass
class OutputConfig:
    """输出配置数据类"""
    format: str = config_field("table", display_name="output format")
    sort_keys: bool = config_field(False, display_name="sort keys")
    title: str = config_field("配置项", display_name="output title")


class SettingsManager:
    """命令行工具配置管理器"""

    def __init__(self, config_dir: str = "config"):
        """
        初始化配置管理器

        Args:
            config_dir: 配置文件目录路径
        """
        self.config_dir = Path(config_dir)
        self.settings_file = self.config_dir / "settings.yaml"

        self._settings: Dict[str, Any] = {}

        self.logging: Optional[LoggingConfig] = None
        self.output: Optional[OutputConfig] = None

        self.load_settings()

    def load_settings(self) -> None:
        """加载设置配置文件，文件不存在时使用默认值"""
        if not self.settings_file.exists():
            logger.debug(f"设置配置文件不存在，使用默认配置: {self.settings_file}")
            self._settings = {}
            self._parse_settings()
            return

        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                self._settings = yaml.safe_load(f) or {}

            self._parse_settings()
            logger.debug(f"设置配置加载成功: {self.settings_file}")

        except Exception as e:
            logger.error(f"加载设置配置失败: {e}")
            raise

    def _parse_settings(self) -> None:
        """解析设置配置"""
        defaults = LoggingConfig()
        logging_config = self._settings.get('logging', {}) or {}
        console_config = logging_config.get('console', {}) or {}
        file_config = logging_config.get('file', {}) or {}

        self.logging = LoggingConfig(
            level=str(logging_config.get('level', defaults.level)).upper(),
            console_enabled=console_config.get('enabled', defaults.console_enabled),
            console_colored=console_config.get('colored', defaults.console_colored),
            file_enabled=file_config.get('enabled', defaults.file_enabled),
            file_path=file_config.get('path', defaults.file_path),
            rotation=file_config.get('rotation', defaults.rotation),
            retention=file_config.get('retention', defaults.retention)
        )

        output_defaults = OutputConfig()
        output_config = self._settings.get('output', {}) or {}
        self.output = OutputConfig(
            format=output_config.get('format', output_defaults.format),
            sort_keys=output_config.get('sort_keys', output_defaults.sort_keys),
            title=output_config.get('title', output_defaults.title)
        )

    def apply_overrides(self, overrides: Optional[str]) -> None:
        """
        应用配置字符串形式的覆盖项

        Args:
            overrides: 如 `log level=DEBUG;output format=json`
        """
        if not overrides:
            return

        parsed = ConfigString(overrides)
        # 两部分都绑定成功后才替换当前配置
        logging_config = parsed.map_to(replace(self.logging))
        output_config = parsed.map_to(replace(self.output))
        logging_config.level = logging_config.level.upper()
        self.logging = logging_config
        self.output = output_config
        logger.debug(f"已应用配置覆盖项: {parsed.config_string}")

    def validate_config(self) -> Dict[str, List[str]]:
        """验证配置的完整性和正确性"""
        errors = {
            'logging': [],
            'output': []
        }

        if not self.logging:
            errors['logging'].append("日志配置缺失")
        elif self.logging.level not in LOG_LEVELS:
            errors['logging'].append(f"未知的日志级别: {self.logging.level}")

        if not self.output:
            errors['output'].append("输出配置缺失")
        elif self.output.format not in OUTPUT_FORMATS:
            errors['output'].append(f"未知的输出格式: {self.output.format}")

        return errors

    def get_config_summary(self) -> Dict[str, Any]:
        """获取配置摘要信息"""
        return {
            'settings_file': str(self.settings_file),
            'loaded_from_file': self.settings_file.exists(),
            'logging': asdict(self.logging) if self.logging else {},
            'output': asdict(self.output) if self.output else {}
        }

    def reload_config(self) -> None:
        """重新加载配置"""
        logger.info("重新加载配置文件...")
        self.load_settings()
        logger.info("配置文件重新加载完成")

    def __str__(self) -> str:
        """返回配置管理器的字符串表示"""
        return (f"SettingsManager("
                f"file={self.settings_file}, "
                f"level={self.logging.level if self.logging else 'N/A'}, "
                f"format={self.output.format if self.output else 'N/A'})")

    def __repr__(self) -> str:
        """返回配置管理器的详细表示"""
        return self.__str__()
