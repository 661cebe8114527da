from unittest.mock import Mock

import pytest

from client import RajaOngkir


def _response(code=200, description="OK", status_code=None, **payload):
    response = Mock()
    response.status_code = status_code or (200 if code == 200 else 400)
    response.json.return_value = {
        "rajaongkir": {"status": {"code": code, "description": description}, **payload}
    }
    return response


@pytest.fixture
def make_response():
    """Factory for fake Rajaongkir responses"""
    return _response


@pytest.fixture
def session():
    session = Mock()
    session.request.return_value = _response(results=[{"id": "1"}, {"id": "2"}])
    return session


@pytest.fixture
def make_client(session):
    def _make(account_type="starter"):
        return RajaOngkir("test-key", account_type, session=session)
    return _make


@pytest.fixture
def sent_params(session):
    """Parameters of the last request, whether sent as query or form"""
    def _sent():
        kwargs = session.request.call_args.kwargs
        return kwargs.get("params", kwargs.get("data"))
    return _sent
