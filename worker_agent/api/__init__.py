"""HTTP 层：service（组装 Agent）与 app（FastAPI 应用）。"""
