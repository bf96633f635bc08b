import asyncio

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from docarchive.middleware.ratelimit import RateLimitMiddleware, make_key_func


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limited_client(clock, issuer):
    app = FastAPI()
    app.add_middleware(
        RateLimitMiddleware,
        window_seconds=60,
        max_calls=2,
        key_func=make_key_func(lambda: issuer),
        include_path_prefixes=("/auth/login",),
        clock=clock,
    )

    @app.post("/auth/login")
    def login():
        return {"ok": True}

    @app.get("/documents")
    def documents():
        return {"ok": True}

    return TestClient(app)


def test_blocks_after_max_calls(limited_client):
    assert limited_client.post("/auth/login").status_code == 200
    assert limited_client.post("/auth/login").status_code == 200
    blocked = limited_client.post("/auth/login")
    assert blocked.status_code == 429
    assert int(blocked.headers["Retry-After"]) >= 1


def test_window_slides(limited_client, clock):
    limited_client.post("/auth/login")
    limited_client.post("/auth/login")
    clock.now += 61
    assert limited_client.post("/auth/login").status_code == 200


def test_unguarded_paths_pass(limited_client):
    for _ in range(5):
        assert limited_client.get("/documents").status_code == 200


def test_authenticated_callers_get_own_bucket(limited_client, issuer):
    limited_client.post("/auth/login")
    limited_client.post("/auth/login")
    assert limited_client.post("/auth/login").status_code == 429

    headers = {"Authorization": f"Bearer {issuer.issue(1)}"}
    assert limited_client.post("/auth/login", headers=headers).status_code == 200


async def _ok_app(scope, receive, send):
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"ok"})


def _hit(mw, key):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/auth/login",
        "query_string": b"",
        "headers": [(b"x-key", key.encode())],
    }
    sent = []

    async def receive():
        return {"type": "http.request", "body": b"", "more_body": False}

    async def send(message):
        sent.append(message)

    asyncio.run(mw(scope, receive, send))
    return sent[0]["status"]


def test_idle_keys_are_evicted(clock):
    mw = RateLimitMiddleware(
        _ok_app,
        window_seconds=60,
        max_calls=2,
        key_func=lambda request: request.headers["x-key"],
        clock=clock,
    )
    for key in ("a", "b", "c"):
        assert _hit(mw, key) == 200
    assert set(mw._hits) == {"a", "b", "c"}

    clock.now += 61
    assert _hit(mw, "d") == 200
    assert set(mw._hits) == {"d"}
