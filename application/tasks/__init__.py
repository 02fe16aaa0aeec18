# Application Tasks
"""
应用层任务模块

包含：
- layout_save_task.py: 窗口布局防抖保存（QTimer 单次定时器）
"""

from application.tasks.layout_save_task import LayoutSaveTask

__all__ = ["LayoutSaveTask"]
