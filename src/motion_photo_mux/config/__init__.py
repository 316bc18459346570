"""設定模組。"""

from .manager import ConfigManager, parse_case_mode

__all__ = ["ConfigManager", "parse_case_mode"]
