# Project Tabs - Open Project Tab Bar
"""
已打开项目标签栏

职责：
- 每个已打开项目一个标签，标签数据为项目 ID
- 订阅项目事件，同步标签的新增、移除、选中、标题与未保存标记
- 用户切换标签时调用 ProjectStateStore.switch_to
- 用户关闭标签时确认未保存修改，再经持久化服务关闭（排在进行中的保存之后）

事件订阅：
- EVENT_PROJECT_CREATED / CLOSED / SWITCHED / MODIFIED / SAVED / RENAMED
"""

from typing import Optional

from PyQt6.QtWidgets import QMessageBox, QTabBar, QWidget

from resources.theme import TAB_MODIFIED_MARK
from shared.event_types import (
    EVENT_PROJECT_CLOSED,
    EVENT_PROJECT_CREATED,
    EVENT_PROJECT_MODIFIED,
    EVENT_PROJECT_RENAMED,
    EVENT_PROJECT_SAVED,
    EVENT_PROJECT_SWITCHED,
)


class ProjectTabBar(QTabBar):
    """
    项目标签栏

    Args:
        store: 项目状态仓库
        persistence: 项目持久化服务，缺省时直接由仓库关闭
        event_bus: 事件总线，缺省时从 ServiceLocator 延迟获取
    """

    def __init__(self, store, persistence=None, event_bus=None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._store = store
        self._persistence = persistence
        self._event_bus = event_bus
        self._syncing = False
        self._logger = None

        self.setTabsClosable(True)
        self.setMovable(False)
        self.setExpanding(False)
        self.setDocumentMode(True)

        self.currentChanged.connect(self._on_current_changed)
        self.tabCloseRequested.connect(self.request_close)

        self._subscribe_events()
        self.sync_from_store()

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
                self._logger = get_logger("project_tabs")
            except Exception:
                pass
        return self._logger

    # ============================================================
    # 查询
    # ============================================================

    def index_of(self, project_id: int) -> int:
        """项目对应的标签索引，不存在时返回 -1"""
        for index in range(self.count()):
            if self.tabData(index) == project_id:
                return index
        return -1

    def tab_title(self, project) -> str:
        if project.is_modified:
            return f"{project.name} {TAB_MODIFIED_MARK}"
        return project.name

    # ============================================================
    # 同步
    # ============================================================

    def sync_from_store(self) -> None:
        """按仓库当前状态重建全部标签"""
        self._syncing = True
        try:
            while self.count():
                self.removeTab(0)
            for project in self._store.projects:
                index = self.addTab(self.tab_title(project))
                self.setTabData(index, project.id)
                self.setTabToolTip(index, project.path or "")
            active = self.index_of(self._store.active_project_id) \
                if self._store.active_project_id is not None else -1
            if active >= 0:
                self.setCurrentIndex(active)
        finally:
            self._syncing = False

    def refresh_tab(self, project_id: int) -> None:
        index = self.index_of(project_id)
        project = self._store.get_project(project_id)
        if index < 0 or project is None:
            return
        self.setTabText(index, self.tab_title(project))
        self.setTabToolTip(index, project.path or "")

    # ============================================================
    # 关闭
    # ============================================================

    def confirm_close(self, project) -> bool:
        """未保存项目的关闭确认（也作为 ProjectStateStore 的确认回调）"""
        answer = QMessageBox.question(
            self,
            "关闭项目",
            f"项目「{project.name}」有未保存的修改，确定关闭吗？",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    def request_close(self, index: int) -> None:
        project_id = self.tabData(index)
        project = self._store.get_project(project_id)
        if project is None:
            return
        if project.is_modified and not self.confirm_close(project):
            return

        if self._persistence is None:
            self._store.close(project_id, force=True)
            return

        from shared.async_runtime import spawn
        spawn(self._persistence.close_project(project_id, force=True), name=f"close_project_{project_id}")

    # ============================================================
    # 事件处理
    # ============================================================

    def _subscribe_events(self) -> None:
        if not self.event_bus:
            return
        self.event_bus.subscribe(EVENT_PROJECT_CREATED, self._on_project_created)
        self.event_bus.subscribe(EVENT_PROJECT_CLOSED, self._on_project_closed)
        self.event_bus.subscribe(EVENT_PROJECT_SWITCHED, self._on_project_switched)
        self.event_bus.subscribe(EVENT_PROJECT_MODIFIED, self._on_project_changed)
        self.event_bus.subscribe(EVENT_PROJECT_SAVED, self._on_project_changed)
        self.event_bus.subscribe(EVENT_PROJECT_RENAMED, self._on_project_changed)

    def unsubscribe_events(self) -> None:
        if not self.event_bus:
            return
        self.event_bus.unsubscribe(EVENT_PROJECT_CREATED, self._on_project_created)
        self.event_bus.unsubscribe(EVENT_PROJECT_CLOSED, self._on_project_closed)
        self.event_bus.unsubscribe(EVENT_PROJECT_SWITCHED, self._on_project_switched)
        self.event_bus.unsubscribe(EVENT_PROJECT_MODIFIED, self._on_project_changed)
        self.event_bus.unsubscribe(EVENT_PROJECT_SAVED, self._on_project_changed)
        self.event_bus.unsubscribe(EVENT_PROJECT_RENAMED, self._on_project_changed)

    def _on_project_created(self, event: dict) -> None:
        project_id = event.get("data", {}).get("project_id")
        if self.index_of(project_id) >= 0:
            return
        project = self._store.get_project(project_id)
        if project is None:
            return
        self._syncing = True
        try:
            index = self.addTab(self.tab_title(project))
            self.setTabData(index, project.id)
            self.setTabToolTip(index, project.path or "")
            if self._store.active_project_id == project.id:
                self.setCurrentIndex(index)
        finally:
            self._syncing = False

    def _on_project_closed(self, event: dict) -> None:
        index = self.index_of(event.get("data", {}).get("project_id"))
        if index < 0:
            return
        self._syncing = True
        try:
            self.removeTab(index)
        finally:
            self._syncing = False

    def _on_project_switched(self, event: dict) -> None:
        index = self.index_of(event.get("data", {}).get("project_id"))
        if index < 0 or index == self.currentIndex():
            return
        self._syncing = True
        try:
            self.setCurrentIndex(index)
        finally:
            self._syncing = False

    def _on_project_changed(self, event: dict) -> None:
        self.refresh_tab(event.get("data", {}).get("project_id"))

    def _on_current_changed(self, index: int) -> None:
        if self._syncing or index < 0:
            return
        self._store.switch_to(self.tabData(index))


__all__ = ["ProjectTabBar"]
