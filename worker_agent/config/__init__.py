"""配置层：Settings 与模块级 settings 实例。"""

from worker_agent.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
