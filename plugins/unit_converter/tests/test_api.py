import pytest

from app import create_app
from plugins.unit_converter.core import reset_session_store


@pytest.fixture
def app():
    reset_session_store()
    application = create_app("TestingConfig")
    yield application
    reset_session_store()


@pytest.fixture
def client(app):
    return app.test_client()


def _new_session(client):
    response = client.post("/api/unit_converter/sessions")
    assert response.status_code == 201
    return response.get_json()["data"]["session_id"]


def test_categories_endpoint(client):
    response = client.get("/api/unit_converter/categories")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    categories = payload["data"]["categories"]
    assert [item["id"] for item in categories][0] == "length"
    temperature = next(item for item in categories if item["id"] == "temperature")
    assert {rule["kind"] for rule in temperature["rules"]} == {"formula"}
    assert categories[-1]["id"] == "custom"
    assert categories[-1]["rules"] == []


def test_convert_endpoint_formats_result(client):
    response = client.post(
        "/api/unit_converter/convert",
        json={"category": "length", "value": 1000},
    )
    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["result"] == "3,280.84"
    assert data["input_unit"] == "Meters"
    assert data["status"] == "value"


def test_convert_endpoint_custom_zero_factor(client):
    response = client.post(
        "/api/unit_converter/convert",
        json={
            "category": "custom",
            "value": "5",
            "custom": {"from_unit": "A", "to_unit": "B", "factor": "0"},
        },
    )
    data = response.get_json()["data"]
    assert data["result"] == "Factor must be non-zero"
    assert data["swap_disabled"] is True


def test_convert_endpoint_rejects_bad_requests(client):
    response = client.post(
        "/api/unit_converter/convert",
        json={"category": "bogus", "value": "1"},
    )
    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "unit.invalid_category"

    response = client.post(
        "/api/unit_converter/convert",
        json={"category": "length", "value": "1", "rule_index": 42},
    )
    assert response.get_json()["error"]["code"] == "unit.invalid_rule"

    response = client.post(
        "/api/unit_converter/convert",
        json={"category": "length", "value": "1", "unexpected": True},
    )
    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "unit.invalid_request"


def test_session_flow(client):
    session_id = _new_session(client)
    base = f"/api/unit_converter/sessions/{session_id}"

    data = client.post(f"{base}/input", json={"value": "5"}).get_json()["data"]
    assert data["view"]["result"] == "16.4042"
    assert len(data["history"]) == 1

    data = client.post(f"{base}/swap").get_json()["data"]
    assert data["view"]["input"] == "16.4042"
    assert data["view"]["swapped"] is True
    assert data["view"]["input_unit"] == "Feet"

    data = client.post(f"{base}/category", json={"category": "temperature"}).get_json()["data"]
    assert data["view"]["swap_disabled"] is True
    client.post(f"{base}/input", json={"value": "100"})
    response = client.post(f"{base}/swap")
    assert response.status_code == 409
    error = response.get_json()["error"]
    assert error["code"] == "unit.swap_rejected"
    assert error["details"]["title"] == "Non-Linear Unit"

    data = client.get(base).get_json()["data"]
    assert data["view"]["result"] == "212"
    first_entry = data["history"][-1]

    data = client.post(f"{base}/history/{first_entry['id']}/recall").get_json()["data"]
    assert data["view"]["input"] == "5"

    data = client.delete(f"{base}/history").get_json()["data"]
    assert data["history"] == []


def test_session_rule_and_custom_endpoints(client):
    session_id = _new_session(client)
    base = f"/api/unit_converter/sessions/{session_id}"

    response = client.post(f"{base}/rule", json={"index": 99})
    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == "unit.invalid_rule"

    data = client.post(f"{base}/rule", json={"index": 3}).get_json()["data"]
    assert data["view"]["input_unit"] == "Miles"

    client.post(f"{base}/category", json={"category": "custom"})
    client.post(f"{base}/custom", json={"from_unit": "USD", "to_unit": "EUR", "factor": 0.85})
    data = client.post(f"{base}/input", json={"value": "100"}).get_json()["data"]
    assert data["view"]["result"] == "85"
    assert data["view"]["custom"]["factor"] == "0.85"
    assert data["history"][0]["category"] == "Custom: USD ↔ EUR"


def test_unknown_session_returns_404(client):
    response = client.get("/api/unit_converter/sessions/missing")
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "unit.session_not_found"

    response = client.delete("/api/unit_converter/sessions/missing")
    assert response.status_code == 404

    session_id = _new_session(client)
    response = client.post(f"/api/unit_converter/sessions/{session_id}/history/h99/recall")
    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == "unit.history_not_found"


def test_session_limit_from_plugin_settings(app, client):
    app.config["PLUGIN_SETTINGS"]["unit_converter"] = {"max_sessions": 1}
    _new_session(client)
    response = client.post("/api/unit_converter/sessions")
    assert response.status_code == 400
    payload = response.get_json()
    assert payload["error"]["code"] == "unit.session_limit"
    assert "too many active sessions" in payload["error"]["message"].lower()


def test_delete_session(client):
    session_id = _new_session(client)
    response = client.delete(f"/api/unit_converter/sessions/{session_id}")
    assert response.get_json()["data"]["deleted"] is True
    assert client.get(f"/api/unit_converter/sessions/{session_id}").status_code == 404
