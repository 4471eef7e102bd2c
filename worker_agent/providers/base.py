"""Provider 抽象接口。

WorkerAgent 不直接依赖具体厂商的 HTTP 细节，而是依赖此协议：
Agent 循环每轮调用 complete(messages, model, tools)；chat 负责将 ChatRequest
转成具体 API 请求，并把响应 JSON 解析为 ChatResult。
测试里用实现同一协议的假 Provider 驱动 Agent 循环。
"""

from typing import List, Optional, Protocol

from worker_agent.domain.models import ChatMessage, ChatRequest, ChatResult
from worker_agent.tools.definitions import ToolDef


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。"""

    name: str

    def complete(
        self,
        messages: List[ChatMessage],
        model: str,
        tools: Optional[List[ToolDef]] = None,
    ) -> ChatResult:
        ...

    def chat(self, req: ChatRequest) -> ChatResult:
        ...
