"""Cloudflare API 响应结构。

管理 API 统一返回 {success, errors, messages, result} 信封，
这里用显式的 pydantic 模型描述，缺失字段有明确的默认值，
未知字段忽略，避免在业务代码里做无校验的字典访问。
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CloudflareMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: Optional[int] = None
    message: str = ""


class ApiEnvelope(BaseModel):
    """管理 API 的通用响应信封。"""

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    errors: List[CloudflareMessage] = Field(default_factory=list)
    messages: List[CloudflareMessage] = Field(default_factory=list)
    result: Any = None

    def errors_payload(self) -> list[dict]:
        return [e.model_dump() for e in self.errors]


class ScriptSummary(BaseModel):
    """scripts 列表中的单个 Worker。"""

    model_config = ConfigDict(extra="ignore")

    id: str
    modified_on: Optional[str] = None


class AccountSubdomain(BaseModel):
    """账户级 workers.dev 子域名，未开通时 subdomain 为 None。"""

    model_config = ConfigDict(extra="ignore")

    subdomain: Optional[str] = None
