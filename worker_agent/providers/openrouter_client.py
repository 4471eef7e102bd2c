"""OpenRouter Provider 适配器。

本模块负责：

1. 接收统一的 ChatRequest。
2. 将其转换为 OpenRouter chat/completions 的请求格式（附带工具目录，tool_choice=auto）。
3. 调用 HTTP 接口，非 2xx 响应统一包装为 UpstreamError。
4. 只取第一个 choice 的 message 与可选 usage，解析为 ChatResult。
"""

import json
from typing import Any, Dict, List, Optional

import httpx

from worker_agent.domain.exceptions import ConfigurationError, NetworkError, UpstreamError
from worker_agent.domain.models import ChatMessage, ChatRequest, ChatResult, ChatUsage, message_to_dict
from worker_agent.tools.catalog import WORKER_TOOL_DEFS
from worker_agent.tools.definitions import ToolCall, ToolDef


class OpenRouterClient:
    """OpenRouter 客户端实现。"""

    name = "openrouter"

    def __init__(self, settings):
        # Settings 里包含 base_url、api_key、归属头、超时等配置
        self._settings = settings

    def complete(
        self,
        messages: List[ChatMessage],
        model: str,
        tools: Optional[List[ToolDef]] = None,
    ) -> ChatResult:
        """用完整对话与工具目录请求下一条消息，未指定 tools 时使用固定的 Worker 工具目录。"""

        if tools is None:
            tools = list(WORKER_TOOL_DEFS)
        return self.chat(ChatRequest(model=model, messages=list(messages), tools=tools, tool_choice="auto"))

    def chat(self, req: ChatRequest) -> ChatResult:
        if not getattr(self._settings, "openrouter_api_key", None):
            # 配置缺失走 ConfigurationError，方便上层统一处理
            raise ConfigurationError(code="MISSING_API_KEY", message="OPENROUTER_API_KEY not set")
        payload = self._build_payload(req)
        base = self._settings.openrouter_base_url.rstrip("/")
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = client.post(
                    f"{base}/chat/completions",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self._settings.openrouter_api_key}",
                        "Content-Type": "application/json",
                        "HTTP-Referer": self._settings.openrouter_referer,
                        "X-Title": self._settings.openrouter_title,
                    },
                )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e))
        if not 200 <= resp.status_code < 300:
            raise UpstreamError(
                f"OpenRouter API error: {resp.status_code} {resp.text}",
                http_status=resp.status_code,
                body=resp.text,
            )
        return self._parse_response(resp.json(), req)

    def _build_payload(self, req: ChatRequest) -> dict:
        payload: Dict[str, Any] = {
            "model": req.model,
            "messages": [message_to_dict(m) for m in req.messages],
        }
        if req.tools:
            payload["tools"] = [self._serialize_tool(tool) for tool in req.tools]
            payload["tool_choice"] = req.tool_choice
        return payload

    def _parse_response(self, data: dict, req: ChatRequest) -> ChatResult:
        choices = data.get("choices") or []
        if not choices:
            raise UpstreamError(
                "OpenRouter API error: response contained no choices",
                http_status=502,
                body=str(data)[:500],
            )
        first = choices[0]
        message = self._build_chat_message(first.get("message") or {})
        usage_raw = data.get("usage")
        usage: Optional[ChatUsage] = None
        if isinstance(usage_raw, dict):
            usage = ChatUsage(
                prompt_tokens=usage_raw.get("prompt_tokens", 0),
                completion_tokens=usage_raw.get("completion_tokens", 0),
                total_tokens=usage_raw.get("total_tokens", 0),
            )
        return ChatResult(
            provider=self.name,
            model=data.get("model") or req.model,
            message=message,
            usage=usage,
            finish_reason=first.get("finish_reason"),
            raw=data,
        )

    @staticmethod
    def _serialize_tool(tool: ToolDef) -> Dict[str, Any]:
        """把内部的 ToolDef 转成 OpenAI 兼容的 function tool 描述。"""

        properties: Dict[str, Any] = {}
        required: List[str] = []
        for name, param in tool.params.items():
            properties[name] = {**(param.schema or {"type": "string"})}
            if param.description:
                properties[name]["description"] = param.description
            if param.required:
                required.append(name)
        return {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": {
                    "type": "object",
                    "properties": properties,
                    "required": required,
                },
            },
        }

    @staticmethod
    def _build_chat_message(payload: Dict[str, Any]) -> ChatMessage:
        """将单条 message 转换为 ChatMessage。

        tool_calls 的 arguments 保持原始字符串，由 ToolExecutor 负责解析。
        """

        tool_calls: List[ToolCall] = []
        for idx, call in enumerate(payload.get("tool_calls") or []):
            func = call.get("function") or {}
            arguments = func.get("arguments")
            if arguments is None:
                arguments = ""
            elif not isinstance(arguments, str):
                # 个别模型直接返回对象，这里统一回写成 JSON 字符串
                arguments = json.dumps(arguments, ensure_ascii=False)
            tool_calls.append(
                ToolCall(
                    id=call.get("id") or f"tool_call_{idx}",
                    name=func.get("name") or "",
                    arguments=arguments,
                )
            )
        return ChatMessage(
            role=payload.get("role") or "assistant",
            content=payload.get("content"),
            tool_calls=tool_calls or None,
        )
