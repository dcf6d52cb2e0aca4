from __future__ import annotations

import httpx
import pytest

from qsearch.config import HttpConfig
from qsearch.engine import Fetcher, RequestTarget, TransportError

URL = "http://quakeml.test/2012p070732"


def test_fetch_returns_body(mock_client) -> None:
    client = mock_client({URL: b"<quakeml/>"})
    response = Fetcher(client=client).fetch(RequestTarget("2012p070732", URL))

    assert response.status_code == 200
    assert response.content == b"<quakeml/>"
    assert response.url == URL


@pytest.mark.parametrize("status", [404, 500, 301])
def test_non_success_status_is_transport_error(mock_client, status: int) -> None:
    client = mock_client({URL: status})
    with pytest.raises(TransportError) as excinfo:
        Fetcher(client=client).fetch(RequestTarget("2012p070732", URL))
    assert excinfo.value.status_code == status
    assert excinfo.value.url == URL
    assert str(excinfo.value) == f"Non 200 response code: {status}"


def test_network_failure_is_transport_error(mock_client) -> None:
    client = mock_client({URL: httpx.ConnectError("connection refused")})
    with pytest.raises(TransportError) as excinfo:
        Fetcher(client=client).fetch(RequestTarget("2012p070732", URL))
    assert excinfo.value.status_code is None
    assert "connection refused" in str(excinfo.value)


def test_shared_client_is_not_closed(mock_client) -> None:
    client = mock_client({URL: b"{}"})
    with Fetcher(client=client):
        pass
    assert not client.is_closed


def test_owned_client_uses_http_config() -> None:
    fetcher = Fetcher(HttpConfig(timeout=5, user_agent="qsearch-test"))
    try:
        assert fetcher._client.headers["User-Agent"] == "qsearch-test"
        assert fetcher._client.timeout.read == 5.0
    finally:
        fetcher.close()
    assert fetcher._client.is_closed
