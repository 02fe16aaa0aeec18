"""窗口布局防抖保存测试"""

import pytest
from PyQt6.QtCore import Qt
from PyQt6.QtTest import QTest
from PyQt6.QtWidgets import QMainWindow, QSplitter, QWidget

from application.tasks.layout_save_task import LayoutSaveTask
from infrastructure.config.settings import (
    CONFIG_LAYOUT_DEBOUNCE_MS,
    CONFIG_SPLITTER_SIZES,
    CONFIG_WINDOW_GEOMETRY,
)
from presentation.window_state_manager import WindowStateManager
from shared.event_types import EVENT_LAYOUT_SAVED


@pytest.fixture
def task(qapp, config_manager):
    return LayoutSaveTask(config_manager=config_manager, debounce_ms=30)


def test_rapid_changes_save_once(task, config_manager, recorder):
    recorder.listen(EVENT_LAYOUT_SAVED)
    saved = []
    task.layout_saved.connect(saved.append)

    for width in range(800, 810):
        task.schedule({CONFIG_WINDOW_GEOMETRY: [0, 0, width, 600]})
    assert task.has_pending
    assert saved == []

    QTest.qWait(150)
    assert saved == [{CONFIG_WINDOW_GEOMETRY: [0, 0, 809, 600]}]
    assert config_manager.get(CONFIG_WINDOW_GEOMETRY) == [0, 0, 809, 600]
    assert len(recorder.of_type(EVENT_LAYOUT_SAVED)) == 1
    assert not task.has_pending


def test_flush_writes_immediately(task, config_manager):
    task.schedule({CONFIG_SPLITTER_SIZES: {"horizontal": [600, 400]}})
    assert task.flush() is True
    assert config_manager.get(CONFIG_SPLITTER_SIZES) == {"horizontal": [600, 400]}
    assert task.flush() is False


def test_cancel_discards(task, config_manager):
    task.schedule({CONFIG_WINDOW_GEOMETRY: [1, 2, 3, 4]})
    task.cancel()
    QTest.qWait(80)
    assert config_manager.get(CONFIG_WINDOW_GEOMETRY) is None


def test_empty_layout_ignored(task):
    task.schedule({})
    assert not task.has_pending


def test_debounce_from_config(qapp, config_manager):
    config_manager.set(CONFIG_LAYOUT_DEBOUNCE_MS, 123)
    assert LayoutSaveTask(config_manager=config_manager).debounce_ms == 123


def test_without_config_manager_nothing_saved(qapp):
    task = LayoutSaveTask(debounce_ms=10)
    task.schedule({CONFIG_WINDOW_GEOMETRY: [0, 0, 1, 1]})
    assert task.flush() is False


class TestWindowStateManager:
    @pytest.fixture
    def window(self, qapp):
        window = QMainWindow()
        splitter = QSplitter(Qt.Orientation.Horizontal)
        splitter.addWidget(QWidget())
        splitter.addWidget(QWidget())
        window.setCentralWidget(splitter)
        window.setGeometry(10, 20, 1000, 700)
        splitter.setSizes([600, 400])
        yield window, {"horizontal": splitter}
        window.deleteLater()

    def test_capture_layout(self, window):
        main_window, splitters = window
        layout = WindowStateManager(main_window).capture_layout(splitters)
        assert layout[CONFIG_WINDOW_GEOMETRY][2:] == [1000, 700]

    def test_save_flushes_through_task(self, window, task, config_manager):
        main_window, splitters = window
        WindowStateManager(main_window, task).save_window_state(splitters)
        assert config_manager.get(CONFIG_WINDOW_GEOMETRY)[2:] == [1000, 700]
        assert not task.has_pending

    def test_restore(self, window, config_manager):
        main_window, splitters = window
        config_manager.set(CONFIG_WINDOW_GEOMETRY, [30, 40, 900, 650])
        config_manager.set(CONFIG_SPLITTER_SIZES, {"horizontal": [350, 250]})
        WindowStateManager(main_window).restore_window_state(splitters)
        assert main_window.geometry().width() == 900
        assert splitters["horizontal"].sizes()[0] > splitters["horizontal"].sizes()[1]

    def test_restore_rejects_tiny_sizes(self, window, config_manager):
        main_window, splitters = window
        before = splitters["horizontal"].sizes()
        config_manager.set(CONFIG_SPLITTER_SIZES, {"horizontal": [10, 900]})
        WindowStateManager(main_window).restore_splitter_sizes(splitters)
        assert splitters["horizontal"].sizes() == before
