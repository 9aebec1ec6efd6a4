from datetime import date

import pytest
import requests

from target_client import MonthlyTargetClient, TargetApiError
from target_distribution import SpecialDay, TargetSpecification


class FakeResponse:
    def __init__(self, status_code=200, payload=None, body=None):
        self.status_code = status_code
        self._payload = payload
        if body is not None:
            self.content = body
        else:
            self.content = b"" if payload is None else b"{}"

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse(payload={})
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def spec():
    return TargetSpecification(
        branch_id=2, month=4, year=2025, target_amount=30000.0,
        special_days=(SpecialDay(date(2025, 4, 10), "Holiday", 2.5, "holiday"),),
    )


def test_submit_posts_request_body(spec):
    session = FakeSession(FakeResponse(payload={"id": 17}))
    client = MonthlyTargetClient(base_url="http://api.local/", timeout=3, session=session)

    result = client.submit(spec)

    assert result == {"id": 17}
    method, url, kwargs = session.calls[0]
    assert method == "POST"
    assert url == "http://api.local/api/monthly-targets"
    assert kwargs["timeout"] == 3
    assert kwargs["headers"]["Content-Type"] == "application/json"
    body = kwargs["json"]
    assert body["branchId"] == 2
    assert len(body["dailyTargets"]) == 30
    assert body["specialDays"][0]["date"] == "2025-04-10"


def test_submit_uses_precomputed_targets(spec):
    session = FakeSession()
    MonthlyTargetClient(session=session).submit(spec, {"2025-04-01": 5.0})
    assert session.calls[0][2]["json"]["dailyTargets"] == {"2025-04-01": 5.0}


def test_submit_http_error_raises_and_keeps_spec(spec):
    session = FakeSession(FakeResponse(status_code=500, payload={"message": "boom"}))
    client = MonthlyTargetClient(session=session)

    with pytest.raises(TargetApiError) as exc_info:
        client.submit(spec)

    assert exc_info.value.status_code == 500
    assert spec.special_days[0].name == "Holiday"
    # no retry
    assert len(session.calls) == 1


def test_submit_connection_error(spec):
    session = FakeSession(error=requests.exceptions.ConnectionError("refused"))
    with pytest.raises(TargetApiError) as exc_info:
        MonthlyTargetClient(session=session).submit(spec)
    assert exc_info.value.status_code is None


def test_empty_response_body_returns_empty_dict(spec):
    session = FakeSession(FakeResponse(status_code=204))
    assert MonthlyTargetClient(session=session).submit(spec) == {}


def test_invalid_json_raises(spec):
    session = FakeSession(FakeResponse(status_code=200, body=b"<html>"))
    with pytest.raises(TargetApiError):
        MonthlyTargetClient(session=session).submit(spec)


def test_list_branches():
    branches = [{"id": 1, "name": "Main"}, {"id": 2, "name": "Airport"}]
    session = FakeSession(FakeResponse(payload=branches))
    client = MonthlyTargetClient(base_url="http://api.local", session=session)

    assert client.list_branches() == branches
    method, url, _ = session.calls[0]
    assert (method, url) == ("GET", "http://api.local/api/branches")


def test_list_branches_non_list_payload():
    session = FakeSession(FakeResponse(payload={"error": "nope"}))
    assert MonthlyTargetClient(session=session).list_branches() == []


def test_list_branches_error_raises_api_error():
    session = FakeSession(FakeResponse(status_code=503, payload={}))
    with pytest.raises(TargetApiError) as exc_info:
        MonthlyTargetClient(session=session).list_branches()
    assert exc_info.value.status_code == 503
