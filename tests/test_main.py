"""
Unit Tests for the MCP tool layer

Tools are called directly; the shared client is replaced with one backed by
a mock session.
"""

import threading
import time

import pytest
import requests

import main
from client import RajaOngkir
from errors import ConfigurationError


def call(tool, *args, **kwargs):
    """Invoke a registered tool's underlying function"""
    return getattr(tool, "fn", tool)(*args, **kwargs)


@pytest.fixture
def use_client(monkeypatch, session):
    def _use(account_type="starter"):
        client = RajaOngkir("test-key", account_type, session=session)
        monkeypatch.setattr(main, "_client", client)
        return client
    return _use


class TestTools:

    def test_provinces_success(self, use_client):
        use_client()
        response = call(main.provinces)
        assert response == {"status": "success", "data": [{"id": "1"}, {"id": "2"}]}

    def test_single_city(self, use_client, session, make_response):
        use_client()
        session.request.return_value = make_response(results=[{"city_id": "501"}])
        response = call(main.cities, city_id=501)
        assert response["data"] == {"city_id": "501"}
        assert session.request.call_args.kwargs["params"] == {"id": 501}

    def test_not_found(self, use_client, session, make_response):
        use_client()
        session.request.return_value = make_response()
        response = call(main.provinces, province_id=99)
        assert response["error_code"] == "NOT_FOUND"

    def test_rejection_payload(self, use_client, session):
        use_client()
        response = call(main.shipping_cost, 501, 108, "jne", weight=1000, destination_type="country")

        assert response["error_code"] == "REJECTED"
        assert response["rajaongkir_code"] == 301
        assert "International" in response["error"]
        session.request.assert_not_called()

    def test_shipping_cost_with_dimensions(self, use_client, session):
        use_client("pro")
        response = call(
            main.shipping_cost, 501, 114, "jne", length=20, width=10, height=10
        )

        assert response["status"] == "success"
        data = session.request.call_args.kwargs["data"]
        assert data["weight"] == pytest.approx(1000 / 3)
        assert "diameter" not in data

    def test_invalid_input(self, use_client):
        use_client()
        response = call(main.track_waybill, "123", "")
        assert response["error_code"] == "INVALID_INPUT"

    def test_transport_failure(self, use_client, session):
        use_client("basic")
        session.request.side_effect = requests.ConnectionError("down")
        response = call(main.currency)
        assert response["error_code"] == "SERVICE_UNAVAILABLE"

    def test_subdistricts_rejected_below_pro(self, use_client):
        use_client("basic")
        response = call(main.subdistricts, 501)
        assert response["error_code"] == "REJECTED"

    def test_list_couriers(self, use_client):
        use_client("basic")
        response = call(main.list_couriers)
        assert response["account_type"] == "basic"
        assert response["waybill_couriers"] == ["jne"]
        assert "jne" in response["couriers"]

    def test_health_check_reports_errors(self, use_client):
        client = use_client()
        client.get_currency()
        response = call(main.health_check)
        assert response["status"] == "healthy"
        assert 301 in response["recorded_errors"]

    def test_international_destinations(self, use_client, session, make_response):
        use_client("basic")
        session.request.return_value = make_response(results=[{"country_id": "108", "country_name": "Singapore"}])

        response = call(main.international_destinations, country_id=108)

        assert response["data"] == {"country_id": "108", "country_name": "Singapore"}
        assert session.request.call_args.args[1] == (
            "https://api.rajaongkir.com/basic/internationalDestination"
        )
        assert session.request.call_args.kwargs["params"] == {"id": 108}

    def test_international_origins(self, use_client, session):
        use_client("pro")
        response = call(main.international_origins, province_id=6)
        assert response["status"] == "success"
        assert session.request.call_args.kwargs["params"] == {"province": 6}

    def test_international_lookups_rejected_on_starter(self, use_client, session):
        use_client()
        assert call(main.international_origins)["error_code"] == "REJECTED"
        assert call(main.international_destinations)["error_code"] == "REJECTED"
        session.request.assert_not_called()


class TestUnconfigured:

    @pytest.fixture(autouse=True)
    def no_client(self, monkeypatch):
        monkeypatch.setattr(main, "_client", None)

        def fail():
            raise ConfigurationError("RAJAONGKIR_API_KEY: API key is required")

        monkeypatch.setattr(main, "load_config", fail)

    def test_tool_reports_config_error(self):
        assert call(main.provinces)["error_code"] == "CONFIG_ERROR"

    def test_health_check_unhealthy(self):
        assert call(main.health_check)["status"] == "unhealthy"


class TestSharedClient:

    def test_built_once_across_threads(self, monkeypatch):
        monkeypatch.setattr(main, "_client", None)
        loads = []
        started = threading.Barrier(8)

        def slow_config():
            loads.append(1)
            time.sleep(0.05)
            return {"api_key": "abc", "account_type": "basic", "timeout": 5.0}

        monkeypatch.setattr(main, "load_config", slow_config)
        clients = []

        def worker():
            started.wait()
            clients.append(main.get_client())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(loads) == 1
        assert len({id(client) for client in clients}) == 1
