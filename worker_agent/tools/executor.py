from typing import Any, Callable, Dict, Iterable, Optional

from worker_agent.domain.exceptions import ArgumentParseError
from worker_agent.workers.client import WorkersClient
from .catalog import WORKER_TOOL_DEFS
from .definitions import ToolCall, ToolDef, ToolResult


ToolFunc = Callable[[Dict[str, Any]], str]


class ToolExecutor:
    """按名称把模型的工具调用分发到对应的处理函数。

    这是单个工具调用的错误边界：参数解析失败、缺少必填参数或处理函数抛出的
    任何异常都会被转换为 "Error: ..." 文本，而不会中断 Agent 循环。
    """

    def __init__(self, tools: Dict[str, ToolFunc], tool_defs: Iterable[ToolDef] = WORKER_TOOL_DEFS):
        self._tools = tools
        self._defs = {tool.name: tool for tool in tool_defs}

    def execute(self, call: ToolCall) -> ToolResult:
        func = self._tools.get(call.name)
        if not func:
            return ToolResult(call_id=call.id, content=f"Unknown tool: {call.name}")
        try:
            args = call.parse_arguments()
            self._check_required(call.name, args)
            result = func(args)
        except Exception as exc:  # noqa: BLE001 - 需要把异常转换为工具错误
            result = f"Error: {exc}"
        return ToolResult(call_id=call.id, content=result)

    def _check_required(self, name: str, args: Dict[str, Any]) -> None:
        tool_def: Optional[ToolDef] = self._defs.get(name)
        if tool_def is None:
            return
        missing = [p for p in tool_def.required_params if args.get(p) is None]
        if missing:
            raise ArgumentParseError(
                code="MISSING_TOOL_ARGUMENTS",
                message=f"Missing required argument(s) for tool '{name}': {', '.join(missing)}",
            )


def worker_tools(client: WorkersClient) -> Dict[str, ToolFunc]:
    """把目录里的六个工具名绑定到 WorkersClient 的操作上。"""

    def _get_worker(args: Dict[str, Any]) -> str:
        name = args["name"]
        return f"Source code for '{name}':\n\n{client.read_source(name)}"

    return {
        "create_worker": lambda args: client.create_or_update(args["name"], args["code"]),
        "update_worker": lambda args: client.update(args["name"], args["code"]),
        "get_worker": _get_worker,
        "invoke_worker": lambda args: client.invoke(
            args["name"],
            args["method"],
            args["path"],
            body=args.get("body"),
            headers=args.get("headers"),
        ),
        "delete_worker": lambda args: client.delete(args["name"]),
        "list_workers": lambda args: client.list_workers(),
    }
