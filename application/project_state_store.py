# Project State Store - Open Projects and Active Canvas
"""
项目状态仓库

职责：
- 独占管理已打开项目集合与活动项目指针
- 切换/新建/关闭项目时对活动画布做快照与恢复
- 维护每个项目的 isModified / isSaved 标志与撤回栈

快照纪律：
- 切出项目前，将活动画布（元件、连线、视口）深拷贝进该项目的 canvas_snapshot
- 切入项目时，将目标项目快照的深拷贝写入活动画布并触发重绘
- 活动项目的 canvas_snapshot 在下次切出前只是过期镜像，读取请使用 snapshot_for()

错误处理：
- 切换/关闭不存在的项目属于调用方错误：记录警告并返回 False，不抛出异常

初始化顺序：
- Phase 3.2，依赖 EventBus，注册为 SVC_PROJECT_STORE

使用示例：
    store = ProjectStateStore(canvas, confirm_close=ask_user, request_redraw=view.update)
    project = store.create_project()
    store.switch_to(project.id)
    store.close(project.id)
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from domain.canvas.canvas_commands import CommandHistory
from domain.canvas.canvas_state import CanvasSnapshot, CanvasState
from domain.canvas.viewport_transform import Viewport
from infrastructure.config.settings import DEFAULT_PROJECT_NAME_PREFIX
from shared.event_types import (
    EVENT_PROJECT_CLOSED,
    EVENT_PROJECT_CREATED,
    EVENT_PROJECT_MODIFIED,
    EVENT_PROJECT_RENAMED,
    EVENT_PROJECT_SAVED,
    EVENT_PROJECT_SWITCHED,
)


# ============================================================
# 项目数据类
# ============================================================

@dataclass
class Project:
    """
    已打开的项目

    Attributes:
        id: 项目 ID（单调递增计数器，从 1 开始）
        name: 项目名称
        path: 项目路径，未保存过的新项目为 None
        is_modified: 是否有未保存的修改
        is_saved: 是否曾保存到磁盘（或从磁盘加载）
        canvas_snapshot: 项目不活动时的画布快照
        created_at: 创建时间（ISO 格式）
        history: 项目自己的撤回栈
        revision: 编辑计数，每次修改递增，用于判断保存期间是否又有编辑
    """

    id: int
    name: str
    path: Optional[str] = None
    is_modified: bool = False
    is_saved: bool = False
    canvas_snapshot: CanvasSnapshot = field(default_factory=CanvasSnapshot)
    created_at: str = field(default_factory=lambda: datetime.now().isoformat(timespec="seconds"))
    history: CommandHistory = field(default_factory=CommandHistory)
    revision: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """项目元信息（不含画布内容）"""
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "is_modified": self.is_modified,
            "is_saved": self.is_saved,
            "created_at": self.created_at,
        }


# ============================================================
# 项目状态仓库
# ============================================================

class ProjectStateStore:
    """
    项目状态仓库

    Args:
        canvas: 活动画布（与渲染器、交互共享的唯一实例）
        confirm_close: 关闭已修改项目时的确认回调，参数为 Project，返回是否继续；
                       缺省时已修改项目无法关闭
        request_redraw: 画布内容被替换后的重绘回调
        event_bus: 事件总线，缺省时从 ServiceLocator 延迟获取
    """

    def __init__(
        self,
        canvas: CanvasState,
        confirm_close: Optional[Callable[[Project], bool]] = None,
        request_redraw: Optional[Callable[[], None]] = None,
        event_bus=None,
    ):
        self._canvas = canvas
        self._confirm_close = confirm_close
        self._request_redraw = request_redraw
        self._event_bus = event_bus

        self._projects: List[Project] = []
        self._active_id: Optional[int] = None
        self._next_id = 1

        self._logger = None

    # ============================================================
    # 延迟获取服务
    # ============================================================

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
        """延迟获取日志器"""
        if self._logger is None:
            try:
                from infrastructure.utils.logger import get_logger
                self._logger = get_logger("project_state_store")
            except Exception:
                pass
        return self._logger

    def set_confirm_close(self, callback: Optional[Callable[[Project], bool]]) -> None:
        self._confirm_close = callback

    def set_redraw_callback(self, callback: Optional[Callable[[], None]]) -> None:
        self._request_redraw = callback

    # ============================================================
    # 状态访问
    # ============================================================

    @property
    def canvas(self) -> CanvasState:
        return self._canvas

    @property
    def active_project_id(self) -> Optional[int]:
        return self._active_id

    @property
    def active_project(self) -> Optional[Project]:
        if self._active_id is None:
            return None
        return self.get_project(self._active_id)

    @property
    def projects(self) -> List[Project]:
        """已打开项目列表（按打开顺序，返回列表副本）"""
        return list(self._projects)

    def get_project(self, project_id: int) -> Optional[Project]:
        for project in self._projects:
            if project.id == project_id:
                return project
        return None

    def is_modified(self, project_id: Optional[int] = None) -> bool:
        project = self._resolve(project_id)
        return project.is_modified if project else False

    def is_saved(self, project_id: Optional[int] = None) -> bool:
        project = self._resolve(project_id)
        return project.is_saved if project else False

    @property
    def viewport(self) -> Viewport:
        """活动画布当前视口的副本"""
        return self._canvas.transform.snapshot()

    def has_unsaved_projects(self) -> bool:
        return any(project.is_modified for project in self._projects)

    def history_for(self, project_id: Optional[int] = None) -> Optional[CommandHistory]:
        project = self._resolve(project_id)
        return project.history if project else None

    def snapshot_for(self, project_id: int) -> Optional[CanvasSnapshot]:
        """
        获取项目画布内容的独立副本

        活动项目直接取自活动画布，其余项目取自各自的快照。
        """
        project = self.get_project(project_id)
        if project is None:
            return None
        if project.id == self._active_id:
            return self._canvas.take_snapshot()
        return project.canvas_snapshot.copy()

    # ============================================================
    # 创建与加载
    # ============================================================

    def create_project(self, name: Optional[str] = None) -> Project:
        """
        新建空项目并切换到它

        新项目使用左下角锚定的默认视口。
        """
        project = self._allocate(name)
        project.canvas_snapshot = CanvasSnapshot(viewport=self._canvas.default_viewport())
        self._append_and_activate(project)
        self._publish(EVENT_PROJECT_CREATED, {
            "project_id": project.id,
            "name": project.name,
            "is_saved": False,
        })
        return project

    def add_existing_project(
        self,
        loaded_data: Dict[str, Any],
        path: Optional[str] = None,
    ) -> Project:
        """
        添加从磁盘加载的项目并切换到它

        Args:
            loaded_data: 项目文件内容 {projectName?, createdAt?, components, connections, viewport?}
            path: 项目路径，缺省时取 loaded_data["path"]
        """
        loaded_data = loaded_data or {}
        # 先完成转换：内容无法解析时抛出 ValueError/TypeError，仓库状态不变
        snapshot = CanvasSnapshot.from_dict(
            copy.deepcopy(loaded_data), self._canvas.default_viewport()
        )
        project = self._allocate(loaded_data.get("projectName"))
        project.path = path or loaded_data.get("path")
        project.is_saved = True
        if loaded_data.get("createdAt"):
            project.created_at = str(loaded_data["createdAt"])
        project.canvas_snapshot = snapshot
        self._append_and_activate(project)
        self._publish(EVENT_PROJECT_CREATED, {
            "project_id": project.id,
            "name": project.name,
            "is_saved": True,
            "path": project.path,
        })
        return project

    # ============================================================
    # 切换
    # ============================================================

    def switch_to(self, project_id: int) -> bool:
        """
        切换活动项目

        Returns:
            bool: 是否发生了切换（目标已是活动项目或不存在时返回 False）
        """
        if project_id == self._active_id:
            return False

        target = self.get_project(project_id)
        if target is None:
            if self.logger:
                self.logger.warning(f"切换失败，项目不存在: {project_id}")
            return False

        previous_id = self._active_id
        self._capture_active()
        self._active_id = target.id
        self._canvas.load_snapshot(target.canvas_snapshot)
        self._redraw()

        if self.logger:
            self.logger.debug(f"切换项目: {previous_id} -> {target.id}")
        self._publish(EVENT_PROJECT_SWITCHED, {
            "project_id": target.id,
            "previous_id": previous_id,
            "name": target.name,
        })
        return True

    # ============================================================
    # 关闭
    # ============================================================

    def close(self, project_id: int, force: bool = False) -> bool:
        """
        关闭项目

        已修改的项目需经 confirm_close 确认，取消时不做任何改动。
        关闭活动项目后激活剩余的第一个项目，没有剩余项目时清空画布。

        Args:
            project_id: 项目 ID
            force: 跳过确认（确认已由调用方完成时使用）

        Returns:
            bool: 是否已关闭
        """
        project = self.get_project(project_id)
        if project is None:
            if self.logger:
                self.logger.warning(f"关闭失败，项目不存在: {project_id}")
            return False

        if project.is_modified and not force:
            if self._confirm_close is None or not self._confirm_close(project):
                if self.logger:
                    self.logger.info(f"取消关闭项目: {project.name}")
                return False

        was_active = project.id == self._active_id
        self._projects.remove(project)

        if was_active:
            self._active_id = None
            if self._projects:
                successor = self._projects[0]
                self._active_id = successor.id
                self._canvas.load_snapshot(successor.canvas_snapshot)
            else:
                self._canvas.clear()
            self._redraw()

        if self.logger:
            self.logger.info(f"项目已关闭: {project.name} (活动项目: {self._active_id})")
        self._publish(EVENT_PROJECT_CLOSED, {
            "project_id": project.id,
            "active_id": self._active_id,
        })
        if was_active and self._active_id is not None:
            self._publish(EVENT_PROJECT_SWITCHED, {
                "project_id": self._active_id,
                "previous_id": project.id,
                "name": self.active_project.name,
            })
        return True

    # ============================================================
    # 标志维护
    # ============================================================

    def mark_modified(self, project_id: Optional[int] = None) -> bool:
        """
        标记项目已修改（缺省为活动项目）

        每次调用都会递增 revision；仅在 False -> True 时发布事件。
        """
        project = self._resolve(project_id)
        if project is None:
            if self.logger:
                self.logger.warning(f"标记修改失败，项目不存在: {project_id}")
            return False

        project.revision += 1
        if project.is_modified:
            return True
        project.is_modified = True
        self._publish(EVENT_PROJECT_MODIFIED, {"project_id": project.id, "is_modified": True})
        return True

    def mark_saved(
        self,
        project_id: Optional[int] = None,
        path: Optional[str] = None,
        revision: Optional[int] = None,
    ) -> bool:
        """
        标记项目已保存

        Args:
            project_id: 项目 ID，缺省为活动项目
            path: 保存路径，给出时更新项目路径
            revision: 保存内容对应的编辑计数；保存期间又有编辑时保留 is_modified
        """
        project = self._resolve(project_id)
        if project is None:
            if self.logger:
                self.logger.warning(f"标记保存失败，项目不存在: {project_id}")
            return False

        if path:
            project.path = str(path)
        project.is_saved = True
        if revision is None or revision == project.revision:
            project.is_modified = False

        self._publish(EVENT_PROJECT_SAVED, {
            "project_id": project.id,
            "path": project.path,
            "is_modified": project.is_modified,
        })
        return True

    def rename_project(self, project_id: int, name: str) -> bool:
        project = self.get_project(project_id)
        name = (name or "").strip()
        if project is None or not name:
            if self.logger:
                self.logger.warning(f"重命名失败: project={project_id}, name={name!r}")
            return False
        if project.name == name:
            return False
        project.name = name
        self._publish(EVENT_PROJECT_RENAMED, {"project_id": project.id, "name": name})
        self.mark_modified(project.id)
        return True

    def set_project_path(self, project_id: int, path: str) -> bool:
        """记录"另存为"后的路径，并标记已保存"""
        return self.mark_saved(project_id, path=path)

    # ============================================================
    # 内部方法
    # ============================================================

    def _resolve(self, project_id: Optional[int]) -> Optional[Project]:
        if project_id is None:
            return self.active_project
        return self.get_project(project_id)

    def _allocate(self, name: Optional[str]) -> Project:
        project_id = self._next_id
        self._next_id += 1
        return Project(id=project_id, name=name or f"{DEFAULT_PROJECT_NAME_PREFIX}{project_id}")

    def _capture_active(self) -> None:
        """把活动画布深拷贝进活动项目的快照"""
        active = self.active_project
        if active is not None:
            active.canvas_snapshot = self._canvas.take_snapshot()

    def _append_and_activate(self, project: Project) -> None:
        previous_id = self._active_id
        self._capture_active()
        self._projects.append(project)
        self._active_id = project.id
        self._canvas.load_snapshot(project.canvas_snapshot)
        self._redraw()
        if self.logger:
            self.logger.info(f"打开项目: {project.name} (id={project.id})")
        self._publish(EVENT_PROJECT_SWITCHED, {
            "project_id": project.id,
            "previous_id": previous_id,
            "name": project.name,
        })

    def _redraw(self) -> None:
        if self._request_redraw is not None:
            self._request_redraw()

    def _publish(self, event_type: str, data: Dict[str, Any]) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, data, source="project_state_store")


__all__ = [
    "Project",
    "ProjectStateStore",
]
