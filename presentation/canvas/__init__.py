# Canvas Presentation
"""
电路画布表示层

包含：
- scene_renderer.py: 网格、坐标轴与电路内容的 QPainter 渲染
- canvas_view.py: 主画布绘制表面（缩放、平移、拖动、拖放）
"""
