"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
三个必需的密钥（OpenRouter API key、Cloudflare API token、Cloudflare account id）
只在真正发起请求时校验，便于在没有密钥的环境下运行测试。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("AGENT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- OpenRouter（模型端点）----
    openrouter_api_key: Optional[str] = Field(default=None, description="OpenRouter API 密钥")
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        description="OpenRouter API 基础URL",
    )
    openrouter_referer: str = Field(
        default="https://worker-agent.workers.dev",
        description="发送给 OpenRouter 的 HTTP-Referer 归属头",
    )
    openrouter_title: str = Field(default="Worker Agent", description="发送给 OpenRouter 的 X-Title 归属头")
    default_model: str = Field(
        default="openai/gpt-4o",
        description="请求未指定 model 时使用的 OpenRouter 模型 ID",
    )

    # ---- Cloudflare Workers（远程函数平台）----
    cloudflare_api_token: Optional[str] = Field(default=None, description="Cloudflare API Token")
    cloudflare_account_id: Optional[str] = Field(default=None, description="Cloudflare 账户 ID")
    cloudflare_api_base: str = Field(
        default="https://api.cloudflare.com/client/v4",
        description="Cloudflare API 基础URL",
    )
    worker_compatibility_date: str = Field(
        default="2024-01-01",
        description="部署 Worker 时写入 metadata 的 compatibility_date",
    )

    # ---- Agent ----
    http_timeout: float = Field(default=60.0, ge=1.0, description="HTTP 超时时间（秒）")
    max_iterations: int = Field(
        default=20,
        ge=1,
        le=20,
        description="单次运行内模型调用的最大轮数（硬上限 20）",
    )

    # ---- HTTP 服务 ----
    index_format: Literal["json", "html"] = Field(
        default="json",
        description="GET / 返回 JSON 能力描述还是 HTML 页面",
    )
    host: str = Field(default="127.0.0.1", description="服务监听地址")
    port: int = Field(default=8000, ge=1, le=65535, description="服务监听端口")

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_level: str = Field(default="INFO", description="日志级别")
    log_to_console: bool = Field(default=False, description="是否同时输出到 stderr")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("openrouter_api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v and len(v) < 10:
            raise ValueError("API key seems too short")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return (v or "INFO").upper()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
