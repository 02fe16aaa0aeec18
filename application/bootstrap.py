# Circuit Canvas - Application Bootstrap
"""
应用启动引导器，负责整个应用的初始化编排

职责：
- 集中管理所有初始化逻辑
- 协调各组件的启动顺序
- 处理初始化失败和降级策略

初始化顺序（严格按此顺序执行）：
- Phase 0: 基础设施初始化（同步）
  - 0.0 全局配置目录初始化
  - 0.1 Logger 初始化
  - 0.2 EventBus 初始化
  - 0.3 ConfigManager 初始化
- Phase 1: 应用服务初始化（同步）
  - 1.1 ProjectRepository
  - 1.2 CanvasState + ProjectStateStore
  - 1.3 CanvasEditor
  - 1.4 ProjectPersistenceService
- Phase 2: GUI 初始化
  - 2.1 创建 QApplication 与 qasync 融合事件循环
  - 2.2 LayoutSaveTask
  - 2.3 创建并显示 MainWindow
  - 2.4 发布 EVENT_INIT_COMPLETE
- 应用关闭时：
  - 刷新待保存布局，取消后台任务，停止节流定时器
"""

import sys
import time
import traceback
from pathlib import Path

# 模块级变量（用于跨函数访问）
_logger = None  # Phase 0.1 后可用


def _init_phase_0() -> bool:
    """
    Phase 0: 基础设施初始化

    Returns:
        bool: 初始化是否成功
    """
    global _logger

    try:
        from infrastructure.config.settings import (
            GLOBAL_COMPONENT_DIR,
            GLOBAL_CONFIG_DIR,
            GLOBAL_LOG_DIR,
        )

        GLOBAL_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        GLOBAL_LOG_DIR.mkdir(parents=True, exist_ok=True)
        GLOBAL_COMPONENT_DIR.mkdir(parents=True, exist_ok=True)
        print("[Phase 0.0] 全局配置目录初始化完成")

        from infrastructure.utils.logger import cleanup_old_logs, get_logger, setup_logger
        setup_logger()
        _logger = get_logger("bootstrap")
        removed = cleanup_old_logs()
        _logger.info(f"Phase 0.1 Logger 初始化完成，清理旧日志 {removed} 个")

        from shared.event_bus import EventBus
        from shared.service_locator import ServiceLocator
        from shared.service_names import SVC_CONFIG_MANAGER, SVC_EVENT_BUS
        ServiceLocator.register(SVC_EVENT_BUS, EventBus())
        _logger.info("Phase 0.2 EventBus 初始化完成")

        from infrastructure.config.config_manager import ConfigManager
        config_manager = ConfigManager()
        config_manager.load_config()
        ok, errors = config_manager.validate_config()
        if not ok:
            _logger.warning(f"配置校验未通过，使用默认值: {errors}")
        ServiceLocator.register(SVC_CONFIG_MANAGER, config_manager)
        _logger.info("Phase 0.3 ConfigManager 初始化完成")

        return True

    except Exception as e:
        # Logger 失败时回退到 print() 输出
        print(f"[Phase 0] 初始化失败: {e}")
        traceback.print_exc()
        return False


def _init_phase_1() -> bool:
    """
    Phase 1: 应用服务初始化

    Returns:
        bool: 初始化是否成功
    """
    try:
        from application.canvas_editor import CanvasEditor
        from application.project_persistence import ProjectPersistenceService
        from application.project_state_store import ProjectStateStore
        from domain.canvas.canvas_state import CanvasState
        from infrastructure.persistence.project_repository import ProjectRepository
        from shared.service_locator import ServiceLocator
        from shared.service_names import (
            SVC_CANVAS_EDITOR,
            SVC_PROJECT_PERSISTENCE,
            SVC_PROJECT_REPOSITORY,
            SVC_PROJECT_STORE,
        )

        repository = ProjectRepository()
        ServiceLocator.register(SVC_PROJECT_REPOSITORY, repository)
        _logger.info("Phase 1.1 ProjectRepository 初始化完成")

        canvas = CanvasState()
        store = ProjectStateStore(canvas)
        ServiceLocator.register(SVC_PROJECT_STORE, store)
        _logger.info("Phase 1.2 ProjectStateStore 初始化完成")

        editor = CanvasEditor(canvas, store)
        ServiceLocator.register(SVC_CANVAS_EDITOR, editor)
        _logger.info("Phase 1.3 CanvasEditor 初始化完成")

        persistence = ProjectPersistenceService(store, repository)
        ServiceLocator.register(SVC_PROJECT_PERSISTENCE, persistence)
        _logger.info("Phase 1.4 ProjectPersistenceService 初始化完成")

        return True

    except Exception as e:
        if _logger:
            _logger.error(f"Phase 1 初始化失败: {e}")
        print(f"[Phase 1] 初始化失败: {e}")
        traceback.print_exc()
        return False


def _init_phase_2(app):
    """
    Phase 2: GUI 初始化

    Returns:
        MainWindow 或 None（失败时）
    """
    try:
        from application.tasks.layout_save_task import LayoutSaveTask
        from presentation.main_window import MainWindow
        from shared.service_locator import ServiceLocator
        from shared.service_names import SVC_EVENT_BUS, SVC_LAYOUT_SAVE_TASK
        from shared.event_types import EVENT_INIT_COMPLETE

        layout_task = LayoutSaveTask(app)
        ServiceLocator.register(SVC_LAYOUT_SAVE_TASK, layout_task)
        _logger.info("Phase 2.2 LayoutSaveTask 初始化完成")

        main_window = MainWindow(layout_save_task=layout_task)
        main_window.show()
        _logger.info("Phase 2.3 MainWindow 显示")

        event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
        if event_bus:
            event_bus.publish(EVENT_INIT_COMPLETE, {}, source="bootstrap")
        _logger.info("Phase 2.4 EVENT_INIT_COMPLETE 已发布")

        return main_window

    except Exception as e:
        if _logger:
            _logger.critical(f"Phase 2 初始化失败: {e}")
        print(f"[Phase 2] 初始化失败: {e}")
        traceback.print_exc()
        _show_fatal_error(f"界面初始化失败:\n{e}")
        return None


def _show_fatal_error(message: str):
    """显示致命错误弹窗"""
    try:
        from PyQt6.QtWidgets import QApplication, QMessageBox
        if QApplication.instance() is not None:
            QMessageBox.critical(None, "启动错误", message)
            return
    except ImportError:
        pass
    print(f"[FATAL] {message}")


def _setup_exception_hook():
    """
    绑定全局异常钩子

    未捕获异常写入日志，防止程序静默崩溃
    """
    def exception_hook(exc_type, exc_value, exc_tb):
        error_msg = ''.join(traceback.format_exception(exc_type, exc_value, exc_tb))
        if _logger:
            _logger.critical(f"未捕获异常:\n{error_msg}")
        else:
            print(f"[UNCAUGHT EXCEPTION]\n{error_msg}")
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = exception_hook


def _shutdown():
    """退出时刷新布局、取消后台任务"""
    from shared import async_runtime
    from shared.service_locator import ServiceLocator
    from shared.service_names import SVC_EVENT_BUS, SVC_LAYOUT_SAVE_TASK

    layout_task = ServiceLocator.get_optional(SVC_LAYOUT_SAVE_TASK)
    if layout_task and layout_task.has_pending:
        layout_task.flush()

    event_bus = ServiceLocator.get_optional(SVC_EVENT_BUS)
    if event_bus:
        event_bus.stop_throttle_timer()

    async_runtime.shutdown()


def run() -> int:
    """
    应用程序主启动函数

    Returns:
        int: 退出码，0 表示正常退出
    """
    print("=" * 50)
    print("Circuit Canvas 启动中...")
    print(f"Python 版本: {sys.version}")
    print(f"工作目录: {Path.cwd()}")
    print("=" * 50)

    start_time = time.time()
    _setup_exception_hook()

    print("\n[Phase 0] 基础设施初始化...")
    if not _init_phase_0():
        print("[Phase 0] 失败，尝试继续启动（功能可能受限）...")

    print("\n[Phase 1] 应用服务初始化...")
    if not _init_phase_1():
        _show_fatal_error("应用服务初始化失败，详见日志")
        return 1

    from PyQt6.QtWidgets import QApplication
    from shared.async_runtime import init_async_runtime

    app = QApplication(sys.argv)
    app.setApplicationName("Circuit Canvas")
    app.setApplicationVersion("0.1.0")
    loop = init_async_runtime(app)
    if _logger:
        _logger.info("Phase 2.1 QApplication 与融合事件循环初始化完成")

    main_window = _init_phase_2(app)
    if main_window is None:
        return 1

    elapsed = (time.time() - start_time) * 1000
    if _logger:
        _logger.info(f"启动完成，耗时 {elapsed:.0f}ms")

    app_close = loop.create_future()
    app.aboutToQuit.connect(lambda: app_close.done() or app_close.set_result(0))
    with loop:
        exit_code = loop.run_until_complete(app_close)
        _shutdown()

    if _logger:
        _logger.info(f"应用退出，退出码: {exit_code}")
    return exit_code


# ============================================================
# 模块导出
# ============================================================

__all__ = ["run"]
