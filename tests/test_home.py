from app import create_app


def test_home_lists_plugins():
    app = create_app("TestingConfig")
    client = app.test_client()
    response = client.get("/")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["data"]["site"]["title"] == "NimbusCalc"
    plugins = payload["data"]["plugins"]
    titles = [item["title"] for item in plugins]
    assert "Graphing Calculator" in titles
    calculator = next(item for item in plugins if item["title"] == "Graphing Calculator")
    assert calculator["api"] == "/api/graphing_calculator"
    assert response.headers.get("Content-Security-Policy")


def test_request_id_is_echoed():
    client = create_app("TestingConfig").test_client()
    response = client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


def test_unknown_route_uses_error_envelope():
    client = create_app("TestingConfig").test_client()
    response = client.get("/missing")
    assert response.status_code == 404
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"]
