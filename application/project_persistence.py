# Project Persistence - Sequenced Project Load/Save
"""
项目持久化服务

职责：
- 在 asyncio 事件循环上发起项目加载/保存，阻塞 I/O 卸载到线程池
- 按项目 ID 串行化保存（每个项目一把 asyncio.Lock）
- 关闭项目排在该项目进行中的保存之后

时序约定：
- 保存内容在请求时同步快照，之后的编辑不会混入本次保存
- 保存完成时携带快照时的 revision 调用 mark_saved，
  若保存期间又有编辑，项目保持"已修改"
- 持久化失败以 SaveResult/LoadResult 返回，不抛出异常，不自动重试

初始化顺序：
- Phase 3.3，依赖 ProjectStateStore、ProjectRepository，注册为 SVC_PROJECT_PERSISTENCE

使用示例：
    persistence = ProjectPersistenceService(store, repository)

    result = await persistence.save_project(project_id, "/path/to/project")
    if not result.success:
        show_error(result.error_message)

    closed = await persistence.close_project(project_id)
"""

import asyncio
import time
from typing import Dict, Optional

from application.project_state_store import Project, ProjectStateStore
from infrastructure.persistence.project_repository import ProjectRepository
from infrastructure.utils.logger import log_performance
from shared.event_types import EVENT_PROJECT_SAVE_FAILED
from shared.models.persistence_result import LoadResult, SaveResult


class ProjectPersistenceService:
    """
    项目持久化服务

    Args:
        store: 项目状态仓库
        repository: 项目文件仓库
        event_bus: 事件总线，缺省时从 ServiceLocator 延迟获取
    """

    def __init__(
        self,
        store: ProjectStateStore,
        repository: Optional[ProjectRepository] = None,
        event_bus=None,
    ):
        self._store = store
        self._repository = repository or ProjectRepository()
        self._event_bus = event_bus
        self._locks: Dict[int, asyncio.Lock] = {}
        self._pending: Dict[int, int] = {}
        self._logger = None

    @property
    def event_bus(self):
        """延迟获取 EventBus"""
        if self._event_bus is None:
            try:
                from shared.service_locator import ServiceLocator
                from shared.service_names import SVC_EVENT_BUS
                self._event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
            except Exception:
                pass
        return self._event_bus

    @property
    def logger(self):
        if self._logger is None:
            try:
                from infrastructure.utils.logger import get_logger
                self._logger = get_logger("project_persistence")
            except Exception:
                pass
        return self._logger

    # ============================================================
    # 状态查询
    # ============================================================

    def is_saving(self, project_id: int) -> bool:
        """该项目是否有进行中或排队中的保存"""
        return self._pending.get(project_id, 0) > 0

    def _lock_for(self, project_id: int) -> asyncio.Lock:
        lock = self._locks.get(project_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[project_id] = lock
        return lock

    # ============================================================
    # 保存
    # ============================================================

    async def save_project(self, project_id: Optional[int] = None,
                           path: Optional[str] = None) -> SaveResult:
        """
        保存项目

        Args:
            project_id: 项目 ID，缺省为活动项目
            path: 保存路径，缺省使用项目已有路径

        Returns:
            SaveResult: 保存结果
        """
        if project_id is None:
            project_id = self._store.active_project_id
        project = self._store.get_project(project_id) if project_id is not None else None
        if project is None:
            if self.logger:
                self.logger.warning(f"保存失败，项目不存在: {project_id}")
            return SaveResult.failed("", f"项目不存在: {project_id}")

        target = path or project.path
        if not target:
            return SaveResult.path_empty()

        # 请求时快照：之后的编辑不属于本次保存
        snapshot = self._store.snapshot_for(project.id)
        revision = project.revision
        name = project.name
        created_at = project.created_at

        self._pending[project.id] = self._pending.get(project.id, 0) + 1
        try:
            async with self._lock_for(project.id):
                # 排队期间项目可能已被关闭
                if self._store.get_project(project.id) is None:
                    if self.logger:
                        self.logger.warning(f"项目已关闭，放弃保存: {name}")
                    return SaveResult.failed(str(target), f"项目已关闭: {name}")
                start = time.perf_counter()
                result = await asyncio.to_thread(
                    self._repository.save_project,
                    target,
                    name,
                    snapshot.to_dict(),
                    created_at,
                )
                log_performance("save_project", (time.perf_counter() - start) * 1000)
        finally:
            self._release_pending(project.id)

        if result.success:
            if self._store.get_project(project.id) is not None:
                self._store.mark_saved(project.id, path=str(target), revision=revision)
            if self.logger:
                self.logger.info(f"项目已保存: {name} -> {target}")
        else:
            if self.logger:
                self.logger.error(f"项目保存失败: {name} - {result.error_message}")
            self._publish_failure(project, result.error_message)
        return result

    # ============================================================
    # 加载
    # ============================================================

    async def load_project(self, path: str) -> LoadResult:
        """
        加载项目并加入已打开项目

        Returns:
            LoadResult: 成功时 data 为新建的 Project
        """
        result = await asyncio.to_thread(self._repository.load_project, path)
        if not result.success:
            if self.logger:
                self.logger.error(f"项目加载失败: {path} - {result.error_message}")
            return result

        try:
            project = self._store.add_existing_project(result.data, path=str(path))
        except (ValueError, TypeError) as e:
            if self.logger:
                self.logger.error(f"项目内容无法解析: {path} - {e}")
            return LoadResult.parse_error(result.file_path or str(path), f"项目内容无法解析: {e}")
        self._add_recent(str(path))
        return LoadResult.ok(project, result.file_path)

    # ============================================================
    # 关闭
    # ============================================================

    async def close_project(self, project_id: int, force: bool = False) -> bool:
        """
        关闭项目，排在该项目进行中的保存之后执行

        Returns:
            bool: 是否已关闭
        """
        async with self._lock_for(project_id):
            closed = self._store.close(project_id, force=force)
        # 仍有保存在等待这把锁时保留它，等待者会在拿到锁后发现项目已关闭
        if closed and not self.is_saving(project_id):
            self._locks.pop(project_id, None)
        return closed

    # ============================================================
    # 内部方法
    # ============================================================

    def _release_pending(self, project_id: int) -> None:
        remaining = self._pending.get(project_id, 0) - 1
        if remaining > 0:
            self._pending[project_id] = remaining
        else:
            self._pending.pop(project_id, None)

    def _publish_failure(self, project: Project, message: str) -> None:
        if self.event_bus:
            self.event_bus.publish(EVENT_PROJECT_SAVE_FAILED, {
                "project_id": project.id,
                "message": message,
            }, source="project_persistence")

    def _add_recent(self, path: str) -> None:
        try:
            from shared.service_locator import ServiceLocator
            from shared.service_names import SVC_CONFIG_MANAGER
            config_manager = ServiceLocator.get_optional(SVC_CONFIG_MANAGER)
        except Exception:
            config_manager = None
        if config_manager is not None:
            config_manager.add_recent_project(path)


__all__ = ["ProjectPersistenceService"]
