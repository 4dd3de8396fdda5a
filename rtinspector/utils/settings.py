#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
设置管理模块
处理显示限制、日志级别和窗口状态等用户设置的保存与加载
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union
from PySide6.QtCore import QSettings, QStandardPaths, QObject, Signal


DEFAULT_SETTINGS: Dict[str, Any] = {
    'log_level': 'INFO',
    'last_directory': '',
    'display/value_limit': 100,
    'display/sequence_limit': 150,
    'display/binary_min_length': 50,
    'display/binary_ratio': 0.3,
}


class SettingsManager(QObject):
    """设置管理器

    负责应用程序设置的保存、加载和管理。
    默认使用 QSettings，use_json=True 时保存为 JSON 文件。
    """

    setting_changed = Signal(str, object)  # 键名, 新值

    def __init__(self,
                 app_name: str = "RTInspector",
                 org_name: str = "RTInspector Project",
                 use_json: bool = False,
                 config_dir: Optional[Union[str, Path]] = None,
                 parent: Optional[QObject] = None) -> None:
        """初始化设置管理器

        Args:
            app_name: 应用程序名称
            org_name: 组织名称
            use_json: 是否使用JSON格式存储（否则使用Qt的原生格式）
            config_dir: JSON 文件所在目录，默认为系统配置目录
            parent: 父对象
        """
        super().__init__(parent)
        self.app_name = app_name
        self.org_name = org_name
        self.use_json = use_json

        if use_json:
            if config_dir is None:
                config_dir = QStandardPaths.writableLocation(QStandardPaths.AppConfigLocation)
            self.config_dir = Path(config_dir)
            self.config_dir.mkdir(parents=True, exist_ok=True)
            self.config_file = self.config_dir / f"{app_name.lower()}_settings.json"
            self._settings_data: Dict[str, Any] = {}
            self._load_json_settings()
        else:
            self.qt_settings = QSettings(org_name, app_name)

    def _load_json_settings(self) -> None:
        """从JSON文件加载设置"""
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    self._settings_data = json.load(f)
            else:
                self._settings_data = {}
        except (OSError, ValueError) as e:
            print(f"加载设置文件失败: {e}")
            self._settings_data = {}

    def _save_json_settings(self) -> None:
        """保存设置到JSON文件"""
        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self._settings_data, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError) as e:
            print(f"保存设置文件失败: {e}")

    def get_setting(self, key: str, default_value: Any = None) -> Any:
        """获取设置值

        未设置时依次使用 default_value 和 DEFAULT_SETTINGS 中的值
        """
        if default_value is None:
            default_value = DEFAULT_SETTINGS.get(key)
        if self.use_json:
            return self._settings_data.get(key, default_value)
        return self.qt_settings.value(key, default_value)

    def set_setting(self, key: str, value: Any) -> None:
        """设置值"""
        if self.use_json:
            self._settings_data[key] = value
            self._save_json_settings()
        else:
            self.qt_settings.setValue(key, value)
            self.qt_settings.sync()
        self.setting_changed.emit(key, value)

    def has_setting(self, key: str) -> bool:
        if self.use_json:
            return key in self._settings_data
        return self.qt_settings.contains(key)

    def remove_setting(self, key: str) -> None:
        if self.use_json:
            if key in self._settings_data:
                del self._settings_data[key]
                self._save_json_settings()
        else:
            self.qt_settings.remove(key)

    def apply_defaults(self) -> None:
        """写入尚未存在的默认设置"""
        for key, value in DEFAULT_SETTINGS.items():
            if not self.has_setting(key):
                self.set_setting(key, value)

    def save_settings(self) -> None:
        """保存设置（对于Qt设置这是同步操作）"""
        if self.use_json:
            self._save_json_settings()
        else:
            self.qt_settings.sync()


# 全局设置管理器实例
_settings_manager: Optional[SettingsManager] = None


def get_settings_manager() -> SettingsManager:
    """获取全局设置管理器实例"""
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager
