from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from rebalancer.api.main import app
from rebalancer.api.services import rebalance_service
from tests.factories import valid_api_payload


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_rebalance_endpoint_returns_suggestion(client):
    response = client.post(
        "/rebalance", json=valid_api_payload(), headers={"X-Correlation-Id": "corr-1"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["to_sell"] == {"META": 10, "AAPL": 5}
    assert data["to_buy"] == {"META": 6, "AAPL": 8}
    assert Decimal(data["surplus"]) == Decimal("60")
    assert Decimal(data["total_value"]) == Decimal("2400")
    assert Decimal(data["spent"]) == Decimal("2340")
    assert data["correlation_id"] == "corr-1"
    assert response.headers["X-Correlation-Id"] == "corr-1"


def test_rebalance_endpoint_with_no_holdings(client):
    payload = valid_api_payload()
    payload.pop("holdings")

    response = client.post("/rebalance", json=payload)

    assert response.status_code == 200
    data = response.json()
    assert data["to_sell"] == {}
    assert data["to_buy"] == {}
    assert Decimal(data["surplus"]) == Decimal("0")


@pytest.mark.parametrize(
    "mutate,code",
    [
        (lambda p: p["targets"][0].update(weight="39.99"), "WEIGHTS_DO_NOT_SUM_TO_100"),
        (lambda p: p["targets"][0].update(weight="-40"), "INVALID_WEIGHT"),
        (
            lambda p: p["targets"].append({"identifier": "META", "weight": "0"}),
            "DUPLICATE_SECURITY",
        ),
        (lambda p: p["prices"][0].update(price="0"), "NON_POSITIVE_PRICE"),
        (lambda p: p["holdings"][0].update(units=-1), "INVALID_HOLDING"),
        (lambda p: p["holdings"].append({"identifier": "TSLA", "units": 1}), "MISSING_PRICE"),
    ],
)
def test_rebalance_endpoint_maps_domain_errors_to_422(client, mutate, code):
    payload = valid_api_payload()
    mutate(payload)

    response = client.post("/rebalance", json=payload)

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == code


def test_rebalance_endpoint_rejects_fractional_units(client):
    payload = valid_api_payload()
    payload["holdings"][0]["units"] = 1.5

    response = client.post("/rebalance", json=payload)

    assert response.status_code == 422


def test_rebalance_endpoint_rejects_missing_targets(client):
    payload = valid_api_payload()
    payload.pop("targets")

    assert client.post("/rebalance", json=payload).status_code == 422


def test_rebalance_endpoint_enforces_row_limit(client, monkeypatch):
    monkeypatch.setenv("REBALANCE_MAX_SECURITIES", "1")

    response = client.post("/rebalance", json=valid_api_payload())

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "REQUEST_TOO_LARGE"


def test_unhandled_errors_become_problem_details(monkeypatch):
    def _boom(**_kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(rebalance_service, "rebalance", _boom)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        response = test_client.post("/rebalance", json=valid_api_payload())

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/problem+json")
    assert response.json()["instance"] == "/rebalance"


def test_openapi_documents_rebalance_route(client):
    schema = client.get("/openapi.json").json()
    assert "/rebalance" in schema["paths"]
    assert "/health" not in schema["paths"]


def test_rebalance_endpoint_rejects_json_number_weights(client):
    # Both weights collapse to 40.0 and 60.0 as binary floats.
    body = (
        '{"prices": [{"identifier": "META", "price": "150"},'
        ' {"identifier": "AAPL", "price": "180"}],'
        ' "holdings": [{"identifier": "META", "units": 10}],'
        ' "targets": [{"identifier": "META", "weight": 40.00000000000000000001},'
        ' {"identifier": "AAPL", "weight": 59.99999999999999999999}]}'
    )

    response = client.post(
        "/rebalance", content=body, headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 422


def test_rebalance_endpoint_rejects_json_number_price(client):
    payload = valid_api_payload()
    payload["prices"][0]["price"] = 150.5

    assert client.post("/rebalance", json=payload).status_code == 422


def test_rebalance_endpoint_accepts_json_integer_weights_and_prices(client):
    payload = valid_api_payload()
    payload["prices"][0]["price"] = 150
    payload["targets"][0]["weight"] = 40
    payload["targets"][1]["weight"] = 60

    response = client.post("/rebalance", json=payload)

    assert response.status_code == 200
    assert response.json()["to_buy"] == {"META": 6, "AAPL": 8}


@pytest.mark.parametrize("price", ["1E-5000", "1E-3000000", "1E+60", "0." + "0" * 40 + "1"])
def test_rebalance_endpoint_rejects_out_of_range_prices(client, price):
    payload = valid_api_payload()
    payload["prices"][0]["price"] = price

    response = client.post("/rebalance", json=payload)

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "DECIMAL_OUT_OF_RANGE"


def test_rebalance_endpoint_rejects_out_of_range_weight(client):
    payload = valid_api_payload()
    payload["targets"][0]["weight"] = "1E-5000"

    response = client.post("/rebalance", json=payload)

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "DECIMAL_OUT_OF_RANGE"


def test_rebalance_endpoint_rejects_oversized_holding(client):
    payload = valid_api_payload()
    payload["holdings"][0]["units"] = 10**19

    response = client.post("/rebalance", json=payload)

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "INVALID_HOLDING"


def test_rebalance_endpoint_renders_suggestion_only_when_debug_enabled(client, caplog):
    payload = valid_api_payload()
    payload["prices"][0]["price"] = "0." + "0" * 33 + "1"

    with caplog.at_level("INFO", logger="rebalancer.api.services.rebalance_service"):
        assert client.post("/rebalance", json=payload).status_code == 200
    assert not any("Rebalance suggestion" in r.getMessage() for r in caplog.records)

    with caplog.at_level("DEBUG", logger="rebalancer.api.services.rebalance_service"):
        assert client.post("/rebalance", json=payload).status_code == 200
    assert any("Rebalance suggestion" in r.getMessage() for r in caplog.records)
