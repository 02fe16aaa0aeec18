# Infrastructure Layer
"""
基础设施层 - 配置管理、文件持久化、工具函数

包含：
- config/: 配置管理（settings、config_manager）
- persistence/: 持久化（json_repository、project_repository）
- utils/: 工具函数（logger）
"""
