# Application Layer
"""
应用层 - 启动引导、项目状态、画布编辑与持久化编排

包含：
- bootstrap.py: 应用启动引导器（初始化编排）
- project_state_store.py: 多项目状态仓库（快照切换、修改标记）
- canvas_editor.py: 画布编辑入口（命令执行、撤回/重做）
- project_persistence.py: 项目保存/加载（按项目串行化）
- tasks/: 后台任务（布局防抖保存）
"""
