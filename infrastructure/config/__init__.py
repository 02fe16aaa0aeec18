# Configuration
"""
配置模块

包含：
- settings.py: 常量与默认配置
- config_manager.py: 全局配置读写（~/.circuit_canvas/config.json）
"""
