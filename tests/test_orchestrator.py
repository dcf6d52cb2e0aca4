from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from qsearch.config import DocumentDialect
from qsearch.engine import Query, TransportError, search_targets
from qsearch.orchestrator import Orchestrator


def _collection(*public_ids: str) -> bytes:
    features = [
        {"type": "Feature", "properties": {"publicid": public_id, "magnitude": 3.1, "depth": 12.5}}
        for public_id in public_ids
    ]
    return json.dumps({"type": "FeatureCollection", "features": features}).encode()


@pytest.fixture
def two_year_query() -> Query:
    return Query(
        start=datetime(2012, 6, 1, tzinfo=timezone.utc),
        end=datetime(2013, 2, 1, tzinfo=timezone.utc),
        min_magnitude=3.0,
    )


def test_search_merges_chunks_by_public_id(fast_config, mock_client, two_year_query: Query) -> None:
    config = fast_config()
    first, second = [t.url for t in search_targets(two_year_query, config.catalog.wfs_url)]
    client = mock_client({first: _collection("q1", "q2"), second: _collection("q2", "q3")})

    quakes = Orchestrator(config, client=client).search(two_year_query)

    assert sorted(quakes) == ["q1", "q2", "q3"]
    assert quakes["q3"].magnitude == 3.1


def test_search_by_event_id(fast_config, mock_client, read_fixture) -> None:
    config = fast_config()
    query = Query(event_id="2014p549333")
    client = mock_client({query.url(config.catalog.wfs_url): read_fixture("2014p549333.json")})

    quakes = Orchestrator(config, client=client).search(query)

    assert list(quakes) == ["2014p549333"]
    assert quakes["2014p549333"].used_phase_count == 23


def test_search_fails_when_any_chunk_fails(fast_config, mock_client, two_year_query: Query) -> None:
    config = fast_config()
    first, second = [t.url for t in search_targets(two_year_query, config.catalog.wfs_url)]
    client = mock_client({first: _collection("q1"), second: 500})

    with pytest.raises(TransportError):
        Orchestrator(config, client=client).search(two_year_query)


def test_fetch_seiscompml_skips_failures(fast_config, mock_client, read_fixture) -> None:
    client = mock_client(
        {
            "http://sc3.test/2012p070732.xml": read_fixture("2012p070732-sc3.xml"),
            "http://sc3.test/999.xml": read_fixture("999.xml"),
            "http://sc3.test/2012p000001.xml": b"<seiscomp><EventParameters>",
        }
    )
    orchestrator = Orchestrator(fast_config(), client=client)

    documents = orchestrator.fetch_documents(
        ["2012p070732", "999", "2012p000001", "2012p000404"], DocumentDialect.SEISCOMPML
    )

    assert list(documents) == ["2012p070732"]
    document = documents["2012p070732"]
    assert document.preferred_magnitude.value == 2.652616042
    assert document.preferred_origin.arrivals[0].pick.waveform_id.station_code == "WVZ"


def test_fetch_quakeml_keys_by_requested_id(fast_config, mock_client, read_fixture) -> None:
    client = mock_client({"http://quakeml.test/2012p070732": read_fixture("2012p070732.xml")})

    documents = Orchestrator(fast_config(), client=client).fetch_documents(["2012p070732"])

    document = documents["2012p070732"]
    assert document.public_id == "smi:nz.org.geonet/2012p070732"
    assert [a.pick is not None for a in document.preferred_origin.arrivals] == [True, False]


def test_fetch_json_documents(fast_config, mock_client, read_fixture) -> None:
    config = fast_config(event_json_url="http://events.test/event/")
    client = mock_client({"http://events.test/event/2012p070732": read_fixture("2012p070732.json")})

    documents = Orchestrator(config, client=client).fetch_documents(["2012p070732"], DocumentDialect.JSON)

    assert documents["2012p070732"].preferred_origin.arrivals[0].time_weight == 1.532535963


def test_json_documents_need_an_endpoint(fast_config, mock_client) -> None:
    orchestrator = Orchestrator(fast_config(), client=mock_client({}))
    with pytest.raises(ValueError):
        orchestrator.fetch_documents(["2012p070732"], DocumentDialect.JSON)


def test_fetch_without_ids(fast_config, mock_client) -> None:
    assert Orchestrator(fast_config(), client=mock_client({})).fetch_documents([]) == {}
