def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_health_reports_degraded_on_memory_storage(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["checks"]["storage"] == "memory"


def test_ready_and_live(client):
    assert client.get("/ready").json() == {"status": "ready", "storage": "memory"}
    assert client.get("/live").json() == {"status": "alive"}


def test_request_id_is_echoed_or_generated(client):
    echoed = client.get("/live", headers={"X-Request-ID": "abc123"})
    assert echoed.headers["x-request-id"] == "abc123"

    generated = client.get("/live")
    assert len(generated.headers["x-request-id"]) == 32
