import pytest
from fastapi import FastAPI, Depends, Request
from fastapi.testclient import TestClient
from fastapi_limiter import FastAPILimiter

from storefront.utils.rate_limit import optional_rate_limit, rate_limit_health_info


def _make_app(times=2, seconds=60):
    app = FastAPI()

    @app.post("/orders", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def create_order():
        return {"ok": True}

    @app.post("/verify", dependencies=[Depends(optional_rate_limit(times, seconds))])
    def verify():
        return {"ok": True}

    @app.get("/rl_info")
    def rl_info(request: Request):
        return rate_limit_health_info(request)

    return app


@pytest.fixture
def local_fallback(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")


def test_fallback_blocks_after_limit(local_fallback):
    client = TestClient(_make_app(times=2))

    codes = [client.post("/orders").status_code for _ in range(3)]

    assert codes == [200, 200, 429]


def test_limit_is_per_path_and_session(local_fallback):
    client = TestClient(_make_app(times=2))
    client.cookies.set("sb_access", "session-a")

    assert [client.post("/orders").status_code for _ in range(3)] == [200, 200, 429]
    # Autre chemin: compteur indépendant
    assert client.post("/verify").status_code == 200

    # Autre session (Bearer prioritaire sur le cookie): compteur indépendant
    other = {"Authorization": "Bearer session-b"}
    assert client.post("/orders", headers=other).status_code == 200


def test_disabled_flag_bypasses_limit(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    app = _make_app(times=1)
    app.state.rate_limit_enabled = False
    client = TestClient(app)

    assert all(client.post("/orders").status_code == 200 for _ in range(3))


def test_no_redis_backend_lets_requests_through(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    monkeypatch.setattr(FastAPILimiter, "redis", None, raising=False)
    client = TestClient(_make_app(times=1))

    assert [client.post("/orders").status_code for _ in range(2)] == [200, 200]


def test_health_info_reports_backend(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    monkeypatch.setattr(FastAPILimiter, "redis", None, raising=False)
    app = _make_app()
    app.state.rate_limit_enabled = True
    client = TestClient(app)

    info = client.get("/rl_info").json()
    assert info == {"enabled": True, "ready": False, "backend": None}

    monkeypatch.setattr(FastAPILimiter, "redis", object(), raising=False)
    info = client.get("/rl_info").json()
    assert info["ready"] is True
    assert info["backend"] == "redis"
