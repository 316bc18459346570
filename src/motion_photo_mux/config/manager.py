"""設定管理器。"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from . import defaults
from .schema import validate_config


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _get_nested(config: dict[str, Any], key: str, default: Any = None) -> Any:
    current: Any = config
    for part in key.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def _set_nested(config: dict[str, Any], key: str, value: Any) -> None:
    current = config
    parts = key.split(".")
    for part in parts[:-1]:
        current = current.setdefault(part, {})
    current[parts[-1]] = value


CASE_MODES: dict[str, Union[bool, str]] = {"auto": "auto", "true": True, "false": False}


def parse_case_mode(text: str) -> Union[bool, str]:
    """把命令列的 auto/true/false 轉為 ``pairing.case_sensitive`` 的值。"""
    try:
        return CASE_MODES[text.strip().lower()]
    except KeyError:
        raise ValueError(f"無效的大小寫模式: {text}") from None


def _load_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"設定檔最外層必須是物件: {path}")
    return data


class ConfigManager:
    """三層設定管理：預設、使用者檔案、執行期覆寫。

    明確指定的設定檔不存在時拋出 ``FileNotFoundError``，不會默默改用預設值。
    """

    def __init__(self, user_config_path: Optional[Path] = None) -> None:
        self._defaults = copy.deepcopy(defaults.DEFAULT_CONFIG)
        self._user = self._load_user_config(user_config_path) if user_config_path else {}
        self._runtime: dict[str, Any] = {}
        self._config = _deep_merge(self._defaults, self._user)

    def _load_user_config(self, path: Path) -> dict[str, Any]:
        if not path.is_file():
            raise FileNotFoundError(f"找不到設定檔: {path}")
        return _load_json(path)

    def get(self, key: str, default: Any = None) -> Any:
        return _get_nested(self._config, key, default)

    def set(self, key: str, value: Any) -> None:
        _set_nested(self._runtime, key, value)
        self._config = _deep_merge(_deep_merge(self._defaults, self._user), self._runtime)

    def apply_overrides(self, overrides: Mapping[str, Any]) -> None:
        """套用命令列覆寫；值為 None 的項目代表未指定，略過。"""
        for key, value in overrides.items():
            if value is not None:
                self.set(key, value)

    def extensions(self, kind: str) -> set[str]:
        """``file_extensions.<kind>`` 的小寫集合，比對副檔名時不分大小寫。"""
        return {str(item).lower() for item in self.get(f"file_extensions.{kind}", [])}

    def validate_config(self) -> list[str]:
        return validate_config(self._config)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    def save_user_config(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as handle:
            json.dump(self._config, handle, ensure_ascii=False, indent=2)
