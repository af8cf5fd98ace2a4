from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError


def test_health_when_connected(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["checks"]["database"] == "healthy"
    assert data["checks"]["sessions_in_use"] == 0


def test_ready_and_live(client) -> None:
    assert client.get("/ready").json() == {"status": "ready"}
    assert client.get("/live").json() == {"status": "alive"}


def test_startup_without_database_keeps_serving(app, fake_mongo) -> None:
    unreachable = ServerSelectionTimeoutError("no servers available")
    fake_mongo.ping_error = unreachable
    fake_mongo.users.error = unreachable

    with TestClient(app) as client:
        health = client.get("/health")
        assert health.status_code == 503
        assert health.json()["status"] == "degraded"

        assert client.get("/ready").status_code == 503
        assert client.get("/getUsers").status_code == 500
        assert client.post("/addUser", json={"name": "Ivan"}).status_code == 500
        assert client.get("/live").status_code == 200
        assert client.get("/metrics").status_code == 200


def test_static_directory_is_served(build_app, tmp_path) -> None:
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<h1>mybank</h1>", encoding="utf-8")

    with TestClient(build_app()) as client:
        assert "mybank" in client.get("/").text
        assert client.get("/getUsers").status_code == 200


def test_shutdown_closes_client(app, fake_mongo) -> None:
    with TestClient(app) as client:
        client.get("/getUsers")
        assert fake_mongo.clients[0].closed is False

    assert fake_mongo.clients[0].closed is True
