"""
配置统一访问管理器

职责：提供配置的统一访问接口，管理配置的读写、校验与变更通知

初始化顺序：Phase 1.1，依赖 Logger，注册到 ServiceLocator

使用方式：
    config_manager = ConfigManager()
    config_manager.load_config()

    # 读取配置
    threshold = config_manager.get(CONFIG_HIT_THRESHOLD, 10)

    # 写入配置（自动触发变更通知）
    config_manager.set(CONFIG_WINDOW_GEOMETRY, [0, 0, 1280, 800])

    # 记录最近打开的项目
    config_manager.add_recent_project("/path/to/project")
"""

import json
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from .settings import (
    GLOBAL_CONFIG_FILE,
    DEFAULT_CONFIG,
    CONFIG_HIT_THRESHOLD,
    CONFIG_LAYOUT_DEBOUNCE_MS,
    CONFIG_RECENT_PROJECTS,
    CONFIG_SHOW_GRID,
    MAX_RECENT_PROJECTS,
)


class ConfigManager:
    """
    配置统一访问管理器

    提供配置的统一读写接口，禁止其他模块直接解析 config.json
    """

    def __init__(self, config_file: Optional[Path] = None):
        """
        初始化配置管理器

        Args:
            config_file: 配置文件路径，默认使用 GLOBAL_CONFIG_FILE

        注意：遵循延迟获取原则，不在 __init__ 中获取 ServiceLocator 服务
        """
        self._config: Dict[str, Any] = {}
        self._config_file = Path(config_file) if config_file else GLOBAL_CONFIG_FILE
        self._lock = Lock()
        self._change_handlers: Dict[str, List[Callable]] = {}
        self._loaded = False

        # 延迟获取的服务引用
        self._event_bus = None
        self._logger = None

    # ============================================================
    # 延迟获取服务
    # ============================================================

    @property
    def event_bus(self):
        """延迟获取 EventBus 服务"""
        if self._event_bus is None:
            try:
                from shared.service_locator import ServiceLocator
                from shared.service_names import SVC_EVENT_BUS
                self._event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
            except Exception:
                self._event_bus = None
        return self._event_bus

    @property
    def logger(self):
        """延迟获取日志器"""
        if self._logger is None:
            try:
                from infrastructure.utils.logger import get_logger
                self._logger = get_logger("config_manager")
            except Exception:
                pass
        return self._logger

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    # ============================================================
    # 核心功能
    # ============================================================

    def load_config(self) -> bool:
        """
        加载配置文件

        缺失字段使用 settings.py 默认值

        Returns:
            bool: 加载是否成功
        """
        with self._lock:
            try:
                self._config_file.parent.mkdir(parents=True, exist_ok=True)

                if self._config_file.exists():
                    with open(self._config_file, "r", encoding="utf-8") as f:
                        loaded_config = json.load(f)
                    self._config = {**DEFAULT_CONFIG, **loaded_config}
                else:
                    self._config = DEFAULT_CONFIG.copy()
                    self._save_config_internal()

                self._loaded = True
                self._log_info("配置加载成功")
                return True

            except json.JSONDecodeError as e:
                self._log_error(f"配置文件 JSON 解析失败: {e}")
                self._config = DEFAULT_CONFIG.copy()
                self._loaded = True
                return False

            except OSError as e:
                self._log_error(f"配置加载失败: {e}")
                self._config = DEFAULT_CONFIG.copy()
                self._loaded = True
                return False

    def save_config(self) -> bool:
        """
        保存配置到文件

        Returns:
            bool: 保存是否成功
        """
        with self._lock:
            return self._save_config_internal()

    def _save_config_internal(self) -> bool:
        """内部保存方法（不加锁）"""
        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)
            self._log_debug("配置保存成功")
            return True
        except (OSError, TypeError) as e:
            self._log_error(f"配置保存失败: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        统一配置读取接口

        Args:
            key: 配置键名
            default: 默认值（如果配置中没有该键）

        Returns:
            配置值
        """
        with self._lock:
            value = self._config.get(key)
            return default if value is None else value

    def set(self, key: str, value: Any, save: bool = True) -> None:
        """
        统一配置写入接口

        自动触发变更通知

        Args:
            key: 配置键名
            value: 配置值
            save: 是否立即保存到文件
        """
        with self._lock:
            old_value = self._config.get(key)
            self._config[key] = value
            if save:
                self._save_config_internal()

        # 锁外通知，避免死锁
        if old_value != value:
            self._notify_change(key, old_value, value)

    def get_all(self) -> Dict[str, Any]:
        """获取所有配置的副本"""
        with self._lock:
            return self._config.copy()

    # ============================================================
    # 最近项目
    # ============================================================

    def get_recent_projects(self) -> List[str]:
        """获取最近打开的项目路径（最新在前）"""
        recent = self.get(CONFIG_RECENT_PROJECTS, [])
        return list(recent) if isinstance(recent, list) else []

    def add_recent_project(self, path: str) -> None:
        """
        记录最近打开的项目

        Args:
            path: 项目路径，已存在时移动到最前
        """
        if not path:
            return
        recent = [p for p in self.get_recent_projects() if p != path]
        recent.insert(0, path)
        self.set(CONFIG_RECENT_PROJECTS, recent[:MAX_RECENT_PROJECTS])

    # ============================================================
    # 配置校验
    # ============================================================

    def validate_config(self) -> tuple[bool, List[str]]:
        """
        校验配置有效性

        Returns:
            (是否有效, 错误信息列表)
        """
        errors = []

        with self._lock:
            threshold = self._config.get(CONFIG_HIT_THRESHOLD)
            if not isinstance(threshold, (int, float)) or threshold <= 0:
                errors.append(f"边缘点击容差必须大于 0，当前值: {threshold}")

            debounce = self._config.get(CONFIG_LAYOUT_DEBOUNCE_MS)
            if not isinstance(debounce, int) or debounce < 0:
                errors.append(f"布局保存防抖间隔必须为非负整数，当前值: {debounce}")

            show_grid = self._config.get(CONFIG_SHOW_GRID)
            if not isinstance(show_grid, bool):
                errors.append(f"show_grid 必须为布尔值，当前值: {show_grid}")

        return len(errors) == 0, errors

    # ============================================================
    # 变更通知机制
    # ============================================================

    def subscribe_change(self, key: str, handler: Callable[[str, Any, Any], None]) -> None:
        """
        订阅特定配置项变更

        Args:
            key: 配置键名
            handler: 回调函数，签名为 handler(key, old_value, new_value)
        """
        with self._lock:
            self._change_handlers.setdefault(key, []).append(handler)

    def unsubscribe_change(self, key: str, handler: Callable) -> None:
        """取消订阅配置项变更"""
        with self._lock:
            if key in self._change_handlers:
                try:
                    self._change_handlers[key].remove(handler)
                except ValueError:
                    pass

    def _notify_change(self, key: str, old_value: Any, new_value: Any) -> None:
        """通知配置变更"""
        for handler in list(self._change_handlers.get(key, [])):
            try:
                handler(key, old_value, new_value)
            except Exception as e:
                self._log_error(f"配置变更回调执行失败: {e}")

        if self.event_bus:
            from shared.event_types import EVENT_CONFIG_CHANGED
            self.event_bus.publish(EVENT_CONFIG_CHANGED, {
                "key": key,
                "old_value": old_value,
                "new_value": new_value,
            }, source="config_manager")

    # ============================================================
    # 日志辅助
    # ============================================================

    def _log_debug(self, message: str) -> None:
        if self.logger:
            self.logger.debug(message)

    def _log_info(self, message: str) -> None:
        if self.logger:
            self.logger.info(message)

    def _log_error(self, message: str) -> None:
        if self.logger:
            self.logger.error(message)


# ============================================================
# 模块导出
# ============================================================

__all__ = ["ConfigManager"]
