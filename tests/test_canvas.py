import pytest
import requests

import config
from utils.canvas import CanvasClient, to_upstream_record
from utils.errors import UpstreamUnavailable


class FakeResponse:
    def __init__(self, payload, status_code=200, next_url=None, reason="OK"):
        self._payload = payload
        self.status_code = status_code
        self.reason = reason
        self.links = {"next": {"url": next_url}} if next_url else {}

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


BASE = "https://canvas.example.edu/api/v1"


def _client(responses):
    session = FakeSession(responses)
    return CanvasClient("canvas.example.edu/", "tok", timeout=3, per_page=2, session=session), session


def test_snapshot_follows_pagination_and_maps_records():
    client, session = _client(
        {
            f"{BASE}/courses": FakeResponse([{"id": 900, "name": "Biology"}]),
            f"{BASE}/courses/900/assignments": FakeResponse(
                [
                    {"id": 1, "name": "Cell Diagram", "due_at": "2026-10-22T03:59:00Z", "graded_submissions_exist": True},
                    {"id": 2, "name": "Lab Report", "due_at": None},
                ],
                next_url=f"{BASE}/courses/900/assignments?page=2",
            ),
            f"{BASE}/courses/900/assignments?page=2": FakeResponse(
                [{"id": 3, "name": "Quiz", "graded_submissions_exist": False}]
            ),
        }
    )

    records = client.fetch_snapshot()

    assert [r.upstream_id for r in records] == ["1", "2", "3"]
    assert records[0].is_graded and not records[1].is_graded
    assert records[0].course_name == "Biology"
    assert records[1].due_at is None
    assert all(call["timeout"] == 3 for call in session.calls)
    assert session.calls[0]["headers"]["Authorization"] == "Bearer tok"
    # next link already carries the query string
    assert session.calls[-1]["params"] is None


def test_timeout_becomes_upstream_unavailable():
    client, _ = _client({f"{BASE}/courses": requests.Timeout("read timed out")})

    with pytest.raises(UpstreamUnavailable):
        client.fetch_snapshot()


def test_failing_course_aborts_whole_snapshot():
    client, _ = _client(
        {
            f"{BASE}/courses": FakeResponse([{"id": 900, "name": "Biology"}, {"id": 901, "name": "History"}]),
            f"{BASE}/courses/900/assignments": FakeResponse([{"id": 1, "name": "Cell Diagram"}]),
            f"{BASE}/courses/901/assignments": FakeResponse({"errors": []}, status_code=401, reason="Unauthorized"),
        }
    )

    with pytest.raises(UpstreamUnavailable) as excinfo:
        client.fetch_snapshot()

    assert "401" in excinfo.value.message


def test_invalid_json_and_malformed_records_are_unavailable():
    client, _ = _client({f"{BASE}/courses": FakeResponse(ValueError("Expecting value"))})
    with pytest.raises(UpstreamUnavailable):
        client.fetch_snapshot()

    client, _ = _client(
        {
            f"{BASE}/courses": FakeResponse([{"id": 900, "name": "Biology"}]),
            f"{BASE}/courses/900/assignments": FakeResponse([{"name": "No id"}]),
        }
    )
    with pytest.raises(UpstreamUnavailable):
        client.fetch_snapshot()


def test_missing_graded_key_means_not_graded():
    record = to_upstream_record({"id": 5, "name": "Essay"}, {"id": 12, "name": "English"})

    assert record.graded_signal is None
    assert not record.is_graded
    assert record.course_id == "12"


def test_from_config_requires_token(studyflow_home, monkeypatch):
    monkeypatch.delenv("CANVAS_TOKEN_ADA", raising=False)
    with pytest.raises(UpstreamUnavailable):
        CanvasClient.from_config(config.load_config(), "ada")

    monkeypatch.setenv("CANVAS_TOKEN_ADA", "tok")
    client = CanvasClient.from_config(config.load_config(), "ada")
    assert client.base_url == "https://canvas.example.edu"
    assert client.timeout == 5.0
