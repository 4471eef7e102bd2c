"""Cloudflare Workers 远程函数平台集成。"""

from worker_agent.workers.client import WorkersClient

__all__ = ["WorkersClient"]
