"""Worker Agent 顶层包。

该包提供一个由 HTTP 触发的 Agent 循环：接收自然语言任务，反复向
OpenRouter 请求下一步动作，并在 Cloudflare Workers 上执行创建、更新、
读取、删除、列出与调用 Worker 等工具，直到模型给出最终回答或达到轮数上限。
"""

from worker_agent.agents import AgentConfig, AgentRunResult, WorkerAgent

__all__ = ["AgentConfig", "AgentRunResult", "WorkerAgent"]
