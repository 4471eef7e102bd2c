"""暴露给模型的 Worker 工具目录。

目录在导入时创建一次，之后不再修改；OpenRouterClient 负责把它序列化为
function tool schema，ToolExecutor 用它检查必填参数。
"""

from typing import Dict, Optional, Tuple

from .definitions import ToolDef, ToolParam


HTTP_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH"]


def _name_param(description: str) -> ToolParam:
    return ToolParam(name="name", description=description, required=True, schema={"type": "string"})


WORKER_TOOL_DEFS: Tuple[ToolDef, ...] = (
    ToolDef(
        name="create_worker",
        description=(
            "Create a new Cloudflare Worker with the given name and JavaScript/TypeScript code. "
            "The worker will be deployed and accessible via a URL."
        ),
        params={
            "name": _name_param("The name of the worker (must be unique, lowercase, alphanumeric with hyphens)"),
            "code": ToolParam(
                name="code",
                description="The JavaScript or TypeScript code for the worker. Must export a default fetch handler.",
                required=True,
                schema={"type": "string"},
            ),
        },
    ),
    ToolDef(
        name="update_worker",
        description="Update an existing Cloudflare Worker with new code.",
        params={
            "name": _name_param("The name of the existing worker to update"),
            "code": ToolParam(
                name="code",
                description="The new JavaScript or TypeScript code for the worker",
                required=True,
                schema={"type": "string"},
            ),
        },
    ),
    ToolDef(
        name="invoke_worker",
        description="Invoke/call a Cloudflare Worker by name with an HTTP request.",
        params={
            "name": _name_param("The name of the worker to invoke"),
            "method": ToolParam(
                name="method",
                description="HTTP method to use",
                required=True,
                schema={"type": "string", "enum": HTTP_METHODS},
            ),
            "path": ToolParam(
                name="path",
                description="Path to request (e.g., '/' or '/api/data')",
                required=True,
                schema={"type": "string"},
            ),
            "body": ToolParam(
                name="body",
                description="Optional request body (for POST/PUT/PATCH)",
                required=False,
                schema={"type": "string"},
            ),
            "headers": ToolParam(
                name="headers",
                description="Optional headers as key-value pairs",
                required=False,
                schema={"type": "object"},
            ),
        },
    ),
    ToolDef(
        name="delete_worker",
        description="Delete a Cloudflare Worker by name.",
        params={"name": _name_param("The name of the worker to delete")},
    ),
    ToolDef(
        name="list_workers",
        description="List all Cloudflare Workers in the account.",
        params={},
    ),
    ToolDef(
        name="get_worker",
        description="Get the source code of an existing Cloudflare Worker.",
        params={"name": _name_param("The name of the worker to read")},
    ),
)

_BY_NAME: Dict[str, ToolDef] = {tool.name: tool for tool in WORKER_TOOL_DEFS}


def get_tool_def(name: str) -> Optional[ToolDef]:
    return _BY_NAME.get(name)
