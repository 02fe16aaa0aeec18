"""
测试公共夹具

- 使用 offscreen 平台创建 QApplication，无需显示器
- 每个测试使用独立的 EventBus / ConfigManager，并在结束时清空 ServiceLocator
- 日志写入临时目录，不触碰用户主目录
"""

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from typing import Any, Dict, List, Tuple

import pytest
from PyQt6.QtWidgets import QApplication

from application.canvas_editor import CanvasEditor
from application.project_state_store import ProjectStateStore
from domain.canvas.canvas_state import CanvasState
from infrastructure.config.config_manager import ConfigManager
from infrastructure.utils.logger import setup_logger
from shared.event_bus import EventBus
from shared.service_locator import ServiceLocator
from shared.service_names import SVC_CONFIG_MANAGER, SVC_EVENT_BUS


class EventRecorder:
    """记录 EventBus 上指定事件的发布"""

    def __init__(self, event_bus: EventBus):
        self._event_bus = event_bus
        self.events: List[Tuple[str, Any]] = []

    def listen(self, *event_types: str) -> "EventRecorder":
        for event_type in event_types:
            self._event_bus.subscribe(event_type, self._record)
        return self

    def _record(self, event: Dict[str, Any]) -> None:
        self.events.append((event["type"], event["data"]))

    def of_type(self, event_type: str) -> List[Any]:
        return [data for kind, data in self.events if kind == event_type]

    def types(self) -> List[str]:
        return [kind for kind, _ in self.events]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture(scope="session", autouse=True)
def _logging(tmp_path_factory):
    setup_logger(log_dir=tmp_path_factory.mktemp("logs"))


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture(autouse=True)
def event_bus():
    ServiceLocator.clear()
    bus = EventBus()
    ServiceLocator.register(SVC_EVENT_BUS, bus)
    yield bus
    ServiceLocator.clear()


@pytest.fixture
def recorder(event_bus) -> EventRecorder:
    return EventRecorder(event_bus)


@pytest.fixture
def config_manager(tmp_path) -> ConfigManager:
    manager = ConfigManager(tmp_path / "config.json")
    manager.load_config()
    ServiceLocator.register(SVC_CONFIG_MANAGER, manager)
    return manager


@pytest.fixture
def canvas() -> CanvasState:
    return CanvasState()


@pytest.fixture
def store(canvas) -> ProjectStateStore:
    return ProjectStateStore(canvas)


@pytest.fixture
def editor(canvas, store) -> CanvasEditor:
    return CanvasEditor(canvas, store)

