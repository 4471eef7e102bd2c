"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 提供 OpenRouter 的具体实现 (openrouter_client)。
"""

from worker_agent.config.settings import settings
from worker_agent.providers.base import ProviderClient
from worker_agent.providers.openrouter_client import OpenRouterClient


def create_provider() -> ProviderClient:
    """根据当前配置创建 Provider 实例。"""

    return OpenRouterClient(settings)
