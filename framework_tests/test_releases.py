import typing as tp

import pytest
import requests

from hosted_cluster_tests.utils import errors
from hosted_cluster_tests.utils import http_client
from hosted_cluster_tests.utils import releases

STREAM_URL = "https://releases.example.com/api/v1/releasestream/4-stable/latest"


class FakeResponse:
    def __init__(self, payload: tp.Any = None, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            msg = f"{self.status_code} Server Error"
            raise requests.HTTPError(msg)

    def json(self) -> tp.Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response: FakeResponse | None = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.requests: list[tuple[str, tp.Any]] = []

    def get(self, url: str, timeout: tp.Any = None) -> FakeResponse | None:
        self.requests.append((url, timeout))
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def set_session(monkeypatch: pytest.MonkeyPatch) -> tp.Callable[[FakeSession], None]:
    def _set(session: FakeSession) -> None:
        monkeypatch.setattr(http_client, "get_session", lambda: session)

    return _set


def test_lookup(set_session: tp.Callable):
    payload = {
        "name": "4.8.0",
        "pullSpec": "quay.io/openshift-release-dev/ocp-release:4.8.0-x86_64",
        "downloadURL": "https://example.com/4.8.0",
    }
    session = FakeSession(response=FakeResponse(payload=payload))
    set_session(session)

    resolver = releases.ReleaseStreamResolver(url=STREAM_URL, timeout=5)
    assert resolver.lookup() == "quay.io/openshift-release-dev/ocp-release:4.8.0-x86_64"
    assert resolver.get_latest().name == "4.8.0"
    assert session.requests[0] == (STREAM_URL, 5)


def test_lookup_empty_pull_spec(set_session: tp.Callable):
    set_session(FakeSession(response=FakeResponse(payload={"name": "4.8.0"})))
    assert releases.ReleaseStreamResolver(url=STREAM_URL).lookup() == ""


@pytest.mark.parametrize(
    "session",
    (
        FakeSession(error=requests.ConnectionError("connection refused")),
        FakeSession(response=FakeResponse(payload={}, status_code=503)),
        FakeSession(response=FakeResponse(payload=ValueError("Expecting value"))),
        FakeSession(response=FakeResponse(payload=["not", "a", "dict"])),
    ),
    ids=("connection_error", "http_error", "invalid_json", "unexpected_json"),
)
def test_lookup_failure(set_session: tp.Callable, session: FakeSession):
    set_session(session)
    with pytest.raises(errors.ResolutionError) as excinfo:
        releases.ReleaseStreamResolver(url=STREAM_URL).lookup()
    assert "couldn't look up default OCP version" in str(excinfo.value)


def test_shared_session():
    assert http_client.get_session() is http_client.get_session()
