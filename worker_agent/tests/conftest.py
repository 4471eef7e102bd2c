import httpx
import pytest


@pytest.fixture
def fake_http(monkeypatch):
    """把所有 httpx.Client 请求转发给 handler(method, url, **kw)。"""

    def install(handler):
        class Client:
            def __init__(self, *a, **kw):
                pass

            def __enter__(self):
                return self

            def __exit__(self, *a):
                return False

            def request(self, method, url, **kw):
                return handler(method, url, **kw)

            def post(self, url, **kw):
                return handler("POST", url, **kw)

        monkeypatch.setattr("httpx.Client", Client)
        return handler

    return install


@pytest.fixture
def connect_error():
    return httpx.ConnectError("connection refused")
