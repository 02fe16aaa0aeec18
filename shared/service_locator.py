# Service Locator - Dependency Injection Container
"""
服务定位器 - 轻量级依赖注入容器

职责：
- 管理服务实例的注册与获取
- 提供全局唯一的服务访问点

初始化顺序：
- Phase 0.2，Logger 之后可用
- 后续各 Phase 逐步注册服务

使用示例：
    from shared.service_locator import ServiceLocator
    from shared.service_names import SVC_PROJECT_STORE

    # 注册服务（启动时）
    ServiceLocator.register(SVC_PROJECT_STORE, store)

    # 延迟获取模式
    class TabBar:
        def __init__(self):
            self._store = None

        @property
        def store(self):
            if self._store is None:
                self._store = ServiceLocator.get_optional(SVC_PROJECT_STORE)
            return self._store
"""

from typing import Any, Dict, List, Optional


class ServiceNotFoundError(Exception):
    """服务未找到异常"""

    def __init__(self, service_name: str, message: str = None):
        self.service_name = service_name
        if message is None:
            message = (
                f"服务 '{service_name}' 未注册。\n"
                f"可能的原因：\n"
                f"  1. 服务尚未初始化（检查 bootstrap 初始化顺序）\n"
                f"  2. 服务名拼写错误（使用 service_names.py 中的常量）"
            )
        super().__init__(message)


class ServiceLocator:
    """
    服务定位器

    类级注册表，启动阶段注册，运行时只读。测试通过 clear() 复位。
    """

    _services: Dict[str, Any] = {}

    @classmethod
    def register(cls, name: str, service: Any) -> None:
        """
        注册服务实例

        Args:
            name: 服务名（使用 service_names.py 中的常量）
            service: 服务实例

        Raises:
            ValueError: 服务名为空或服务实例为 None
        """
        if not name:
            raise ValueError("服务名不能为空")
        if service is None:
            raise ValueError(f"服务实例不能为 None: {name}")

        cls._services[name] = service

    @classmethod
    def get(cls, name: str) -> Any:
        """
        获取服务实例

        Raises:
            ServiceNotFoundError: 服务未注册
        """
        if name not in cls._services:
            raise ServiceNotFoundError(name)
        return cls._services[name]

    @classmethod
    def get_optional(cls, name: str) -> Optional[Any]:
        """获取服务实例，不存在时返回 None"""
        return cls._services.get(name)

    @classmethod
    def has(cls, name: str) -> bool:
        return name in cls._services

    @classmethod
    def unregister(cls, name: str) -> None:
        cls._services.pop(name, None)

    @classmethod
    def clear(cls) -> None:
        """
        清空所有注册的服务

        仅用于测试场景。
        """
        cls._services.clear()

    @classmethod
    def get_all_names(cls) -> List[str]:
        return list(cls._services.keys())


# ============================================================
# 模块导出
# ============================================================

__all__ = [
    "ServiceLocator",
    "ServiceNotFoundError",
]
