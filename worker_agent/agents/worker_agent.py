"""Worker Agent 循环。

把一次用户任务转换为“模型调用 → 工具执行 → 模型调用 ...”的有界循环：

1. 对话以 system prompt + 用户输入开始。
2. 每轮调用模型，追加 assistant 消息。
3. 没有 tool_calls 时结束，返回其文本。
4. 有 tool_calls 时按请求顺序逐个执行，每个调用追加一条 tool 消息。
5. 超过最大轮数时返回固定的 "Max iterations reached"。

对话只存在于单次 run() 内，不持久化，也不在请求之间共享。
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional
from uuid import uuid4

from worker_agent.domain.models import ChatMessage, ChatResult, ChatUsage
from worker_agent.infrastructure.logging.logger import logger
from worker_agent.prompts import load_system_prompt
from worker_agent.providers.base import ProviderClient
from worker_agent.tools.catalog import WORKER_TOOL_DEFS
from worker_agent.tools.definitions import ToolDef
from worker_agent.tools.executor import ToolExecutor


MAX_ITERATIONS = 20
DEFAULT_MODEL = "openai/gpt-4o"
MAX_ITERATIONS_RESULT = "Max iterations reached"


@dataclass
class AgentConfig:
    agent_type: str = "worker-agent"
    model: str = DEFAULT_MODEL
    max_iterations: int = MAX_ITERATIONS  # 硬上限 20

    @property
    def max_iterations_clamped(self) -> int:
        return max(1, min(self.max_iterations, MAX_ITERATIONS))


@dataclass
class AgentRunResult:
    """一次运行的结果，messages 为完整对话记录（含 system 消息）。"""

    result: str
    messages: List[ChatMessage]
    iterations: int
    status: Literal["completed", "max_iterations"]
    usage: List[Dict[str, Any]] = field(default_factory=list)


class WorkerAgent:
    def __init__(
        self,
        provider_client: ProviderClient,
        tool_executor: ToolExecutor,
        tool_defs: Iterable[ToolDef] = WORKER_TOOL_DEFS,
        config: Optional[AgentConfig] = None,
        system_prompt: Optional[str] = None,
    ):
        self._provider_client = provider_client
        self._tool_executor = tool_executor
        self._tool_defs = list(tool_defs)
        self._config = config or AgentConfig()
        self._system_prompt = system_prompt or load_system_prompt(self._config.agent_type)

    def run(self, prompt: str, model: Optional[str] = None) -> AgentRunResult:
        """执行一次完整的 Agent 运行。

        模型调用失败（UpstreamError、NetworkError 等）不在这里处理，直接向上抛出；
        单个工具调用的失败由 ToolExecutor 转换为 tool 消息。
        """

        start_time = time.time()
        model_id = model or self._config.model
        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "agent_type": self._config.agent_type,
            "model": model_id,
        }
        max_iterations = self._config.max_iterations_clamped
        messages: List[ChatMessage] = [
            ChatMessage(role="system", content=self._system_prompt),
            ChatMessage(role="user", content=prompt),
        ]
        usage_log: List[Dict[str, Any]] = []
        self._log(logging.INFO, "Agent run started", log_ctx, max_iterations=max_iterations)

        for iteration in range(1, max_iterations + 1):
            self._log(logging.INFO, "Iteration", log_ctx, iteration=iteration, message_count=len(messages))
            result: ChatResult = self._provider_client.complete(list(messages), model_id, tools=self._tool_defs)
            assistant_msg = result.message
            messages.append(assistant_msg)
            if result.usage:
                usage_log.append(self._usage_meta_from_usage(result.usage))

            # 没有工具调用，视为最终回答
            if not assistant_msg.tool_calls:
                self._log(
                    logging.INFO,
                    "Agent run completed",
                    log_ctx,
                    iterations=iteration,
                    elapsed_seconds=round(time.time() - start_time, 2),
                )
                return AgentRunResult(
                    result=assistant_msg.content or "",
                    messages=messages,
                    iterations=iteration,
                    status="completed",
                    usage=usage_log,
                )

            self._log(
                logging.INFO,
                "Executing tool calls",
                log_ctx,
                call_count=len(assistant_msg.tool_calls),
            )
            for tool_call in assistant_msg.tool_calls:
                self._log(
                    logging.INFO,
                    "Tool call received",
                    log_ctx,
                    tool_name=tool_call.name,
                    tool_call_id=tool_call.id,
                )
                tool_result = self._tool_executor.execute(tool_call)
                self._log(
                    logging.INFO,
                    "Tool execution finished",
                    log_ctx,
                    tool_call_id=tool_call.id,
                    result_preview=(tool_result.content or "")[:200],
                )
                messages.append(
                    ChatMessage(
                        role="tool",
                        content=tool_result.content,
                        tool_call_id=tool_call.id,
                    )
                )

        self._log(
            logging.WARNING,
            "Reached max iterations",
            log_ctx,
            max_iterations=max_iterations,
            elapsed_seconds=round(time.time() - start_time, 2),
        )
        return AgentRunResult(
            result=MAX_ITERATIONS_RESULT,
            messages=messages,
            iterations=max_iterations,
            status="max_iterations",
            usage=usage_log,
        )

    @staticmethod
    def _usage_meta_from_usage(usage: Optional[ChatUsage]) -> Dict[str, Any]:
        if not usage:
            return {}
        return {
            "prompt_tokens": usage.prompt_tokens,
            "completion_tokens": usage.completion_tokens,
            "total_tokens": usage.total_tokens,
        }

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
