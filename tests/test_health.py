def test_ping(client):
    assert client.get("/health/ping").json() == {"ok": True}


def test_routes_lists_api(client):
    routes = {r["path"]: r["methods"] for r in client.get("/health/routes").json()["routes"]}
    assert "/api/destinations" in routes
    assert "/api/manager/tickets/response" in routes
    assert routes["/api/admin/users/{user_id}"] == ["DELETE", "GET", "PUT"]
    assert "/health/ping" in routes
    assert "/docs" not in routes


def test_unknown_route_uses_error_shape(client):
    r = client.get("/api/nowhere")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}


def test_bad_query_parameter_is_400(client):
    r = client.get("/api/reviews?tourId=abc")
    assert r.status_code == 400
    assert r.json()["details"]["violations"][0]["field"] == "tourId"
