"""Cloudflare Workers 管理 API 客户端。

本模块负责：

1. 把 Agent 的六个工具操作（创建/更新/读取/删除/列出/调用 Worker）
   转换为 Cloudflare API 的 HTTP 请求。
2. 把管理 API 的 JSON 信封解析为显式的 schema（见 schemas.py），
   平台报告失败时抛出 RemoteApiError。
3. 把结果整理为给模型阅读的纯文本。

每个操作都是一次独立的 HTTP 往返，不做重试、缓存或批处理。
"""

import json
from typing import Any, Dict, List, Optional

import httpx

from worker_agent.domain.exceptions import ConfigurationError, NetworkError, RemoteApiError
from worker_agent.infrastructure.logging.logger import logger
from worker_agent.workers.schemas import AccountSubdomain, ApiEnvelope, ScriptSummary


MAIN_MODULE = "worker.js"
MODULE_CONTENT_TYPE = "application/javascript+module"
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
NO_WORKERS_MESSAGE = "No workers found."


class WorkersClient:
    """Cloudflare Workers 客户端。

    settings 需要提供 cloudflare_api_token、cloudflare_account_id、
    cloudflare_api_base、worker_compatibility_date 与 http_timeout。
    """

    name = "cloudflare"

    def __init__(self, settings):
        self._settings = settings

    def create_or_update(self, name: str, code: str) -> str:
        """上传（或覆盖）Worker 脚本，并尽力开启 workers.dev 子域名。"""

        base = self._workers_url()
        metadata = {
            "main_module": MAIN_MODULE,
            "compatibility_date": self._settings.worker_compatibility_date,
        }
        files = {
            "metadata": ("metadata.json", json.dumps(metadata), "application/json"),
            MAIN_MODULE: (MAIN_MODULE, code, MODULE_CONTENT_TYPE),
        }
        resp = self._request("PUT", f"{base}/scripts/{name}", headers=self._auth_headers(), files=files)
        self._envelope(resp, "create worker")

        self._enable_subdomain(base, name)
        return (
            f"Worker '{name}' created successfully. "
            f"It will be available at https://{name}.<your-subdomain>.workers.dev"
        )

    def update(self, name: str, code: str) -> str:
        # PUT 是幂等的，更新与创建走同一个请求
        return self.create_or_update(name, code)

    def read_source(self, name: str) -> str:
        """返回 Worker 的原始源码文本。"""

        base = self._workers_url()
        resp = self._request("GET", f"{base}/scripts/{name}/content", headers=self._auth_headers())
        if not 200 <= resp.status_code < 300:
            raise RemoteApiError(
                f"Failed to get worker: {resp.status_code} {resp.reason_phrase}",
                http_status=resp.status_code,
            )
        return resp.text

    def get(self, name: str) -> str:
        return self.read_source(name)

    def invoke(
        self,
        name: str,
        method: str,
        path: str,
        body: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None,
    ) -> str:
        """通过 workers.dev 地址调用 Worker，返回状态码、响应头与响应体。

        Worker 的响应不做任何解析，原样交给模型。
        """

        subdomain = self._account_subdomain()
        method = (method or "GET").upper()
        url = f"https://{name}.{subdomain}.workers.dev{_normalize_path(path)}"
        request_headers = {str(k): str(v) for k, v in (headers or {}).items()}
        content = body if body and method in BODY_METHODS else None

        resp = self._request(method, url, headers=request_headers, content=content)
        return (
            f"Status: {resp.status_code}\n"
            f"Headers: {json.dumps(dict(resp.headers))}\n"
            f"Body: {resp.text}"
        )

    def delete(self, name: str) -> str:
        base = self._workers_url()
        resp = self._request("DELETE", f"{base}/scripts/{name}", headers=self._auth_headers())
        self._envelope(resp, "delete worker")
        return f"Worker '{name}' deleted successfully."

    def list_workers(self) -> str:
        base = self._workers_url()
        resp = self._request("GET", f"{base}/scripts", headers=self._auth_headers())
        envelope = self._envelope(resp, "list workers")
        scripts = _parse_scripts(envelope.result)
        if not scripts:
            return NO_WORKERS_MESSAGE
        lines = [f"- {s.id} (modified: {s.modified_on})" for s in scripts]
        return "Workers:\n" + "\n".join(lines)

    list = list_workers

    # ---- 内部工具 ----

    def _workers_url(self) -> str:
        if not getattr(self._settings, "cloudflare_api_token", None):
            raise ConfigurationError(code="MISSING_API_KEY", message="CLOUDFLARE_API_TOKEN not set")
        account_id = getattr(self._settings, "cloudflare_account_id", None)
        if not account_id:
            raise ConfigurationError(code="MISSING_ACCOUNT_ID", message="CLOUDFLARE_ACCOUNT_ID not set")
        base = self._settings.cloudflare_api_base.rstrip("/")
        return f"{base}/accounts/{account_id}/workers"

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._settings.cloudflare_api_token}"}

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            with httpx.Client(timeout=self._settings.http_timeout, trust_env=False) as client:
                return client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e))

    @staticmethod
    def _envelope(resp: httpx.Response, action: str) -> ApiEnvelope:
        try:
            envelope = ApiEnvelope.model_validate(resp.json())
        except ValueError:
            # 非 JSON 或不是信封结构（例如网关返回的 HTML 错误页）
            raise RemoteApiError(
                f"Failed to {action}: {resp.status_code} {resp.text[:200]}",
                http_status=resp.status_code,
            )
        if not envelope.success:
            errors = envelope.errors_payload()
            raise RemoteApiError(
                f"Failed to {action}: {json.dumps(errors)}",
                http_status=resp.status_code,
                errors=errors,
            )
        return envelope

    def _enable_subdomain(self, base: str, name: str) -> None:
        """尽力而为地为脚本开启 workers.dev 路由。

        失败只记 WARNING 日志，不影响 create_or_update 的返回。
        """

        url = f"{base}/scripts/{name}/subdomain"
        headers = {**self._auth_headers(), "Content-Type": "application/json"}
        try:
            resp = self._request("POST", url, headers=headers, json={"enabled": True})
        except NetworkError as exc:
            logger.warning(
                "Enable subdomain failed",
                extra={"extra": {"worker": name, "error": exc.message}},
            )
            return
        errors: List[dict] = []
        accepted = 200 <= resp.status_code < 300
        if accepted:
            # 2xx 也可能带 success=false 的信封
            try:
                envelope = ApiEnvelope.model_validate(resp.json())
            except ValueError:
                accepted = False
            else:
                accepted = envelope.success
                errors = envelope.errors_payload()
        if not accepted:
            logger.warning(
                "Enable subdomain rejected",
                extra={"extra": {"worker": name, "status": resp.status_code, "errors": errors}},
            )

    def _account_subdomain(self) -> str:
        base = self._workers_url()
        resp = self._request("GET", f"{base}/subdomain", headers=self._auth_headers())
        subdomain = None
        try:
            envelope = ApiEnvelope.model_validate(resp.json())
            if envelope.success and isinstance(envelope.result, dict):
                subdomain = AccountSubdomain.model_validate(envelope.result).subdomain
        except ValueError:
            subdomain = None
        if not subdomain:
            raise ConfigurationError(
                code="MISSING_SUBDOMAIN",
                message="Could not determine workers.dev subdomain",
            )
        return subdomain


def _normalize_path(path: Optional[str]) -> str:
    path = path or "/"
    return path if path.startswith("/") else f"/{path}"


def _parse_scripts(result: Any) -> List[ScriptSummary]:
    if not isinstance(result, list):
        return []
    return [ScriptSummary.model_validate(item) for item in result]
