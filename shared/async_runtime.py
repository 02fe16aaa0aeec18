# Circuit Canvas - Async Runtime
"""
异步运行时

职责：
- 初始化 qasync 融合事件循环（Qt + asyncio）
- 从 Qt 槽函数中启动协程（项目保存/加载、元件文件读写）
- 应用退出时取消未完成的任务

设计背景：
- 界面事件与文件 I/O 协程共用一个循环，协作式调度，不跨线程共享画布状态
- 阻塞的文件读写通过 asyncio.to_thread 下放到线程池，结果回到主线程处理

初始化顺序：Phase 0（QApplication 创建后、进入事件循环前），在 bootstrap.py 中调用

使用方式：
    app = QApplication(sys.argv)
    loop = init_async_runtime(app)

    # 槽函数中
    spawn(persistence.save_project(), name="save_project")

    with loop:
        loop.run_forever()
    shutdown()
"""

import asyncio
from typing import Any, Callable, Coroutine, Optional, Set

from PyQt6.QtWidgets import QApplication

_event_loop: Optional[asyncio.AbstractEventLoop] = None
_background_tasks: Set[asyncio.Task] = set()


def init_async_runtime(app: QApplication) -> asyncio.AbstractEventLoop:
    """
    初始化 qasync 融合事件循环

    Args:
        app: QApplication 实例

    Returns:
        asyncio.AbstractEventLoop: 融合后的事件循环

    Raises:
        RuntimeError: 重复初始化
    """
    global _event_loop

    if _event_loop is not None:
        raise RuntimeError("异步运行时已经初始化，不能重复初始化")

    from qasync import QEventLoop

    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)
    _event_loop = loop
    return loop


def get_event_loop() -> asyncio.AbstractEventLoop:
    """
    获取当前事件循环

    未初始化融合循环时（如单元测试）返回正在运行的循环或默认循环。
    """
    if _event_loop is not None:
        return _event_loop
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.get_event_loop()


def is_initialized() -> bool:
    return _event_loop is not None


def spawn(
    coro: Coroutine,
    name: Optional[str] = None,
    on_done: Optional[Callable[[Any], None]] = None,
) -> asyncio.Task:
    """
    在事件循环上启动协程

    任务引用保存在模块内，完成后移除；协程抛出的异常记录到日志，
    不会静默丢失。

    Args:
        coro: 协程对象
        name: 任务名（用于日志）
        on_done: 成功完成时以返回值调用

    Returns:
        asyncio.Task
    """
    task = get_event_loop().create_task(coro, name=name)
    _background_tasks.add(task)

    def _finished(finished: asyncio.Task) -> None:
        _background_tasks.discard(finished)
        if finished.cancelled():
            return
        error = finished.exception()
        if error is not None:
            from infrastructure.utils.logger import get_logger
            get_logger("async_runtime").error(
                f"后台任务失败: {finished.get_name()}", exc_info=error
            )
            return
        if on_done is not None:
            on_done(finished.result())

    task.add_done_callback(_finished)
    return task


def pending_tasks() -> Set[asyncio.Task]:
    """尚未完成的后台任务（副本）"""
    return set(_background_tasks)


async def shutdown_async() -> None:
    """取消所有后台任务并等待其结束"""
    tasks = [task for task in _background_tasks if not task.done()]
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.wait(tasks, timeout=5.0)


def shutdown() -> None:
    """
    关闭异步运行时

    应在事件循环退出后调用；循环仍在运行时只调度取消任务。
    """
    global _event_loop

    if _event_loop is None:
        return

    try:
        if _event_loop.is_running():
            _event_loop.create_task(shutdown_async())
        elif not _event_loop.is_closed():
            _event_loop.run_until_complete(shutdown_async())
    except RuntimeError as e:
        from infrastructure.utils.logger import get_logger
        get_logger("async_runtime").warning(f"关闭异步运行时失败: {e}")
    finally:
        _background_tasks.clear()
        _event_loop = None


__all__ = [
    "init_async_runtime",
    "get_event_loop",
    "is_initialized",
    "spawn",
    "pending_tasks",
    "shutdown",
]
