"""Agent 层：WorkerAgent 循环。"""

from worker_agent.agents.worker_agent import AgentConfig, AgentRunResult, WorkerAgent

__all__ = ["AgentConfig", "AgentRunResult", "WorkerAgent"]
