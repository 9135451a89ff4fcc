from app import create_app


def test_home_lists_plugins():
    app = create_app("TestingConfig")
    client = app.test_client()
    response = client.get("/")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    titles = [item["title"] for item in payload["data"]["plugins"]]
    assert titles == ["Unit Converter"]
    assert response.headers.get("Content-Security-Policy")
    assert response.headers.get("X-Request-ID")


def test_unknown_route_returns_json_error():
    app = create_app("TestingConfig")
    response = app.test_client().get("/does-not-exist")
    assert response.status_code == 404
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "http.404"


def test_plugin_settings_loaded_from_yaml():
    app = create_app("TestingConfig")
    settings = app.config["PLUGIN_SETTINGS"]["unit_converter"]
    assert settings["max_sessions"] == 64
    assert app.config["SITE_SETTINGS"]["title"] == "QuickConvert"
