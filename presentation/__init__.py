# Presentation Layer
"""
表示层 - 主窗口、画布视图、元件设计器与项目标签

包含：
- main_window.py: 主窗口（布局协调和组件初始化）
- project_tabs.py: 已打开项目标签栏
- window_state_manager.py: 窗口状态管理器（位置/尺寸/分割比例）
- canvas/: 电路画布视图与场景渲染
- designer/: 元件设计器绘制表面与控制器
"""
