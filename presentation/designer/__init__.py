# Designer Presentation
"""
元件设计器表示层

包含：
- designer_canvas.py: 设计器绘制表面（输入转信号）
- designer_controller.py: 设计器控制器与内容绘制
"""
