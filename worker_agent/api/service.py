"""对外 API 服务模块。

提供简化的函数接口供 HTTP 层调用。
"""

from typing import Optional, Dict, Any

from worker_agent.agents.worker_agent import AgentConfig, WorkerAgent
from worker_agent.config.settings import settings
from worker_agent.domain.models import message_to_dict
from worker_agent.infrastructure.logging.logger import logger
from worker_agent.providers import create_provider
from worker_agent.tools.executor import ToolExecutor, worker_tools
from worker_agent.workers.client import WorkersClient


_agent: Optional[WorkerAgent] = None


def get_default_agent() -> WorkerAgent:
    """获取默认的 WorkerAgent 实例（单例）。

    Agent 本身不保存对话状态，每次 run() 都会新建对话，因此可以跨请求复用。
    """
    global _agent
    if _agent is None:
        _agent = WorkerAgent(
            provider_client=create_provider(),
            tool_executor=ToolExecutor(worker_tools(WorkersClient(settings))),
            config=AgentConfig(model=settings.default_model, max_iterations=settings.max_iterations),
        )
    return _agent


def run_worker_agent(prompt: str, model: Optional[str] = None) -> Dict[str, Any]:
    """运行一次 Worker Agent。

    Args:
        prompt: 用户任务
        model: OpenRouter 模型 ID（可选，默认取配置中的 default_model）

    Returns:
        包含 result 与完整 messages 记录的字典

    Raises:
        各种 domain.exceptions 中定义的异常
    """
    try:
        run = get_default_agent().run(prompt, model=model)
    except Exception as e:
        logger.error(f"Agent run failed: {e}", extra={"extra": {"model": model, "error": str(e)}})
        raise
    return {
        "result": run.result,
        "messages": [message_to_dict(m) for m in run.messages],
    }
