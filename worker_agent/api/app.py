"""FastAPI application entrypoint.

HTTP contract:
- GET /          capability descriptor (JSON) or the static HTML form
- OPTIONS *      empty 200
- POST /run      run one agent loop, return {result, messages}
- anything else  404 "Not found"
Every response carries permissive CORS headers.
"""

import json
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from worker_agent.api import service
from worker_agent.config.settings import settings
from worker_agent.infrastructure.logging.logger import logger


STATIC_DIR = Path(__file__).resolve().parent / "static"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

CAPABILITIES = {
    "name": "Worker Agent",
    "description": "An AI agent that can create, update, read, and invoke Cloudflare Workers",
    "usage": {
        "method": "POST",
        "path": "/run",
        "body": {
            "prompt": "Your task or question",
            "model": "openai/gpt-4o (or any OpenRouter model)",
        },
    },
}

MISSING_PROMPT = "Missing 'prompt' in request body"


class PrettyJSONResponse(JSONResponse):
    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Worker Agent",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Added to every response, including errors and preflight
    @app.middleware("http")
    async def add_cors_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def not_found(request: Request, exc: StarletteHTTPException) -> Response:
        # Unknown paths and known paths with the wrong method both map to 404
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.options("/{path:path}")
    def preflight(path: str) -> Response:
        return Response(status_code=200)

    @app.get("/")
    def index() -> Response:
        if settings.index_format == "html":
            return HTMLResponse((STATIC_DIR / "index.html").read_text(encoding="utf-8"))
        return PrettyJSONResponse(CAPABILITIES)

    @app.post("/run")
    async def run(request: Request) -> Response:
        """Run one agent loop to completion; the blocking run goes to the threadpool."""
        try:
            body = await request.json()
            # A body that is not an object has no prompt either
            prompt = body.get("prompt") if isinstance(body, dict) else None
            if not prompt or not isinstance(prompt, str):
                return JSONResponse({"error": MISSING_PROMPT}, status_code=400)
            model = body.get("model")
            if not model or not isinstance(model, str):
                model = settings.default_model
            data = await run_in_threadpool(service.run_worker_agent, prompt, model)
        except Exception as exc:  # noqa: BLE001 - any failure becomes a 500 JSON error
            logger.error("Run request failed", extra={"extra": {"error": str(exc)}})
            return JSONResponse({"error": str(exc)}, status_code=500)
        return PrettyJSONResponse(data)

    return app


app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run("worker_agent.api.app:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
