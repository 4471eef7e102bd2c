"""统一业务异常模型。

所有跨模块抛出的业务级错误都继承自 BusinessError，
工具分发层把它们转换为对话里的文本，HTTP 层把未捕获的错误转换为 500。
"""

from typing import Any, Dict, List, Optional


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "REMOTE_API_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 trace_id、provider 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class NetworkError(BusinessError):
    """网络层错误，例如连接失败、超时等。"""


class RemoteApiError(BusinessError):
    """Cloudflare 管理 API 返回 success=false 或非 2xx 时抛出。

    errors 保存平台返回的原始错误列表（可能为空）。
    """

    def __init__(
        self,
        message: str,
        http_status: int = 502,
        errors: Optional[List[Dict[str, Any]]] = None,
        code: str = "REMOTE_API_ERROR",
        **extra,
    ):
        super().__init__(code=code, message=message, http_status=http_status, **extra)
        self.errors = errors or []


class UpstreamError(BusinessError):
    """模型端点（OpenRouter）返回非 2xx 时抛出，携带状态码与响应体。"""

    def __init__(self, message: str, http_status: int, body: str = "", code: str = "UPSTREAM_ERROR", **extra):
        super().__init__(code=code, message=message, http_status=http_status, **extra)
        self.body = body


class ConfigurationError(BusinessError):
    """配置缺失，例如账户没有 workers.dev 子域名或未设置密钥。"""


class ArgumentParseError(BusinessError):
    """模型给出的工具参数不是合法的 JSON 对象，或缺少必填参数。"""
