import pytest
import requests

from melodix.domain.concerts import TicketmasterClient
from melodix.errors import EventsProviderError


class _Response:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class _Session:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


def _client(session, api_key="tm-key"):
    return TicketmasterClient(api_key=api_key, api_url="https://tm.example/events.json", timeout=3, session=session)


@pytest.mark.unit
def test_search_events_sends_music_query():
    session = _Session(_Response(body={"_embedded": {"events": [{"id": "e1"}]}}))
    events = _client(session).search_events("Band", country="id", size=5)

    assert events == [{"id": "e1"}]
    call = session.calls[0]
    assert call["url"] == "https://tm.example/events.json"
    assert call["timeout"] == 3
    assert call["params"] == {
        "apikey": "tm-key",
        "keyword": "Band",
        "classificationName": "music",
        "sort": "date,asc",
        "size": 5,
        "countryCode": "ID",
    }


@pytest.mark.unit
def test_no_embedded_events_is_empty_list():
    assert _client(_Session(_Response(body={"page": {"totalElements": 0}}))).search_events("Band") == []


@pytest.mark.unit
def test_missing_key_is_not_configured():
    session = _Session()
    with pytest.raises(EventsProviderError) as exc:
        _client(session, api_key=None).search_events("Band")
    assert exc.value.kind == EventsProviderError.NOT_CONFIGURED
    assert session.calls == []


@pytest.mark.unit
@pytest.mark.parametrize("status, kind", [
    (401, EventsProviderError.UNAUTHORIZED),
    (403, EventsProviderError.UNAUTHORIZED),
    (404, EventsProviderError.NOT_FOUND),
    (429, EventsProviderError.RATE_LIMITED),
    (500, EventsProviderError.GENERIC),
])
def test_error_statuses_are_classified(status, kind):
    with pytest.raises(EventsProviderError) as exc:
        _client(_Session(_Response(status_code=status))).search_events("Band")
    assert exc.value.kind == kind


@pytest.mark.unit
def test_transport_failures_are_classified():
    with pytest.raises(EventsProviderError) as timeout:
        _client(_Session(error=requests.Timeout())).search_events("Band")
    assert timeout.value.kind == EventsProviderError.TIMEOUT

    with pytest.raises(EventsProviderError) as generic:
        _client(_Session(error=requests.ConnectionError())).search_events("Band")
    assert generic.value.kind == EventsProviderError.GENERIC


@pytest.mark.unit
@pytest.mark.parametrize("body", [
    [{"id": "e1"}],
    "events",
    {"_embedded": ["e1"]},
    {"_embedded": {"events": {"id": "e1"}}},
])
def test_malformed_payloads_are_provider_errors(body):
    with pytest.raises(EventsProviderError) as exc:
        _client(_Session(_Response(body=body))).search_events("Band")
    assert exc.value.kind == EventsProviderError.GENERIC
    assert "unexpected payload" in str(exc.value)


@pytest.mark.unit
def test_invalid_json_is_generic_provider_error():
    with pytest.raises(EventsProviderError) as exc:
        _client(_Session(_Response(body=None))).search_events("Band")
    assert exc.value.kind == EventsProviderError.GENERIC
