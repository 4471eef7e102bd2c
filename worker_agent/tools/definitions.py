"""工具数据结构定义。

这些 dataclass 描述了“工具调用”的 schema，既用于：
- 将可用工具列表暴露给 LLM（ToolDef / ToolParam）。
- 在 WorkerAgent 中保存和执行模型触发的工具调用（ToolCall / ToolResult）。
"""

import json
from dataclasses import dataclass
from typing import Dict, Any

from worker_agent.domain.exceptions import ArgumentParseError


@dataclass(frozen=True)
class ToolParam:
    """单个工具参数的定义。"""

    name: str
    description: str
    required: bool
    schema: Dict[str, Any]


@dataclass(frozen=True)
class ToolDef:
    """一个可供 LLM 调用的工具定义。"""

    name: str
    description: str
    params: Dict[str, ToolParam]

    @property
    def required_params(self) -> list[str]:
        return [name for name, param in self.params.items() if param.required]


@dataclass
class ToolCall:
    """模型发起的一次工具调用请求。

    arguments 保存模型返回的原始 JSON 字符串，解析推迟到工具分发层，
    这样解析失败也能被转换为工具错误消息而不是中断整个循环。
    """

    id: str
    name: str
    arguments: str

    def parse_arguments(self) -> Dict[str, Any]:
        text = (self.arguments or "").strip()
        if not text:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ArgumentParseError(
                code="INVALID_TOOL_ARGUMENTS",
                message=f"Invalid arguments for tool '{self.name}': {exc}",
            ) from exc
        if not isinstance(data, dict):
            raise ArgumentParseError(
                code="INVALID_TOOL_ARGUMENTS",
                message=f"Invalid arguments for tool '{self.name}': expected a JSON object",
            )
        return data


@dataclass
class ToolResult:
    """工具执行结果的封装（文本形式）。"""

    call_id: str
    content: str
