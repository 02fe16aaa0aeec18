# Domain Layer
"""
领域层 - 核心业务逻辑，不依赖 Qt

包含：
- canvas/: 电路画布域（几何、视口变换、画布状态、可撤回命令）
- designer/: 元件设计域（元件定义、引脚布局、边缘命中测试、边选择状态机）
"""
