"""Pytest configuration providing catalog fixtures and a mocked HTTP transport."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterator, Mapping, Union

import httpx
import pytest

from qsearch.config import ConfigLocator, ConfigRepository, QSearchConfig
from qsearch.logging_conf import configure_logging

FIXTURES_DIR = Path(__file__).parent / "fixtures"

Route = Union[bytes, str, int, Exception, Callable[[httpx.Request], httpx.Response]]


@pytest.fixture(scope="session", autouse=True)
def _quiet_logging(tmp_path_factory: pytest.TempPathFactory) -> None:
    # structlog prints to stdout until configured; CLI tests read stdout
    configure_logging(log_dir=tmp_path_factory.mktemp("logs"))


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    monkeypatch.setenv("QSEARCH_HOME", str(home))
    return home


@pytest.fixture
def read_fixture() -> Callable[[str], bytes]:
    def _reader(name: str) -> bytes:
        return (FIXTURES_DIR / name).read_bytes()

    return _reader


@pytest.fixture
def fast_config() -> Callable[..., QSearchConfig]:
    """Config with small pools and a short poll interval so tests stay quick."""

    def _builder(**catalog: str) -> QSearchConfig:
        config = QSearchConfig.model_validate(
            {
                "catalog": {
                    "wfs_url": "http://wfs.test/ows?service=WFS&outputFormat=json",
                    "quakeml_url": "http://quakeml.test/",
                    "seiscompml_url": "http://sc3.test/",
                    **catalog,
                },
                "pool": {"event_workers": 3, "search_workers": 2, "poll_interval": 0.01},
            }
        )
        return config

    return _builder


@pytest.fixture
def mock_client() -> Iterator[Callable[[Mapping[str, Route]], httpx.Client]]:
    """Build an ``httpx.Client`` answering from a URL → response table.

    Values may be a body (200), a status code, an exception to raise, or a
    callable taking the request. Unknown URLs answer 404.
    """

    clients: list[httpx.Client] = []

    def _builder(routes: Mapping[str, Route]) -> httpx.Client:
        # Keys are normalised the same way httpx normalises request URLs
        table = {str(httpx.URL(url)): route for url, route in routes.items()}

        def handler(request: httpx.Request) -> httpx.Response:
            route = table.get(str(request.url))
            if route is None:
                return httpx.Response(404, text="not found")
            if isinstance(route, Exception):
                raise route
            if isinstance(route, int):
                return httpx.Response(route)
            if callable(route):
                return route(request)
            return httpx.Response(200, content=route)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _builder
    for client in clients:
        client.close()


@pytest.fixture
def temp_config_repository(tmp_path: Path) -> ConfigRepository:
    return ConfigRepository(ConfigLocator(home=tmp_path / "home"))
