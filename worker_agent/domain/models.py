"""统一的对话与结果数据模型。

本模块定义了 Agent 内部共享的标准数据结构：

- ChatMessage: 一条对话消息（system/user/assistant/tool）。
- ChatRequest: 发给模型端点的完整请求。
- ChatResult: 从模型端点解析后的统一响应结果（只保留第一个 choice）。

Provider 适配器（OpenRouterClient）负责在 API JSON 和这些模型之间做转换；
HTTP 层返回的 messages 也使用 message_to_dict 的同一种 JSON 形状。
"""

from dataclasses import dataclass, field
from typing import Literal, Optional, Any, Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    # 仅在类型检查时导入，避免运行时循环依赖
    from worker_agent.tools.definitions import ToolCall, ToolDef


# LLM 消息角色类型（与 OpenAI 兼容接口的 role 字段对应）
Role = Literal["system", "user", "assistant", "tool"]


@dataclass
class ChatMessage:
    """一条对话消息，既可用于请求，也可用于响应。

    - role: 消息角色。
    - content: 文本内容；assistant 只发起工具调用时可能为 None。
    - tool_calls: 仅 assistant 消息，模型发起的工具调用列表。
    - tool_call_id: 仅 tool 消息，指向产生该结果的工具调用。
    """

    role: Role
    content: Optional[str] = None
    tool_calls: Optional[List["ToolCall"]] = None
    tool_call_id: Optional[str] = None


@dataclass
class ChatRequest:
    """一次完整的聊天请求。"""

    model: str  # OpenRouter 模型 ID，如 "openai/gpt-4o"
    messages: List[ChatMessage]
    tools: Optional[List["ToolDef"]] = None
    tool_choice: Literal["auto", "none", "required"] = "auto"


@dataclass
class ChatUsage:
    """模型端点返回的 token 统计信息。"""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class ChatResult:
    """一次模型调用的结果：第一个 choice 的消息以及可选的 usage。"""

    provider: str
    model: str
    message: ChatMessage
    usage: Optional[ChatUsage] = None
    finish_reason: Optional[str] = None
    raw: Optional[dict] = field(default=None, repr=False)


def message_to_dict(message: ChatMessage) -> Dict[str, Any]:
    """序列化为 OpenAI 兼容的消息 JSON。"""

    payload: Dict[str, Any] = {"role": message.role, "content": message.content}
    if message.tool_calls:
        payload["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {"name": call.name, "arguments": call.arguments},
            }
            for call in message.tool_calls
        ]
    if message.tool_call_id:
        payload["tool_call_id"] = message.tool_call_id
    return payload
