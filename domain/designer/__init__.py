# Component Designer Domain
"""
元件设计域

包含：
- designer_shape.py: 引脚类型、引脚与设计中的元件
- pin_layout.py: 引脚位置计算与元件尺寸自动扩展
- edge_hit_tester.py: 元件边缘命中测试
- pin_side_interaction.py: 引脚边选择状态机
"""
