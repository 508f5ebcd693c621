import http.client
import io
import json
import urllib.error

import pytest

from commentary import video_analysis
from commentary.errors import InvalidInput, MissingAPIKeyError, UpstreamFailure
from commentary.video_analysis import NO_ANALYSIS_TEXT, TwelveLabsAnalyzer


class _FakeResponse(io.BytesIO):
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


@pytest.fixture
def captured(monkeypatch):
    state = {"payload": {"data": "A fast break ends in a dunk."}, "error": None, "requests": []}

    def fake_urlopen(req, timeout=None):
        state["requests"].append((req, timeout))
        if state["error"]:
            raise state["error"]
        return _FakeResponse(json.dumps(state["payload"]).encode("utf-8"))

    monkeypatch.setattr(video_analysis.urllib.request, "urlopen", fake_urlopen)
    return state


def test_posts_analyze_request(captured):
    analyzer = TwelveLabsAnalyzer("tl-key", base_url="https://api.twelvelabs.io/v1.3/", timeout=15)

    result = analyzer.analyze("68aac64d88cce82e525f1059")

    assert result.text == "A fast break ends in a dunk."
    assert result.video_id == "68aac64d88cce82e525f1059"
    req, timeout = captured["requests"][0]
    assert req.full_url == "https://api.twelvelabs.io/v1.3/analyze"
    assert req.get_method() == "POST"
    assert req.get_header("X-api-key") == "tl-key"
    assert timeout == 15
    body = json.loads(req.data.decode("utf-8"))
    assert body["video_id"] == "68aac64d88cce82e525f1059"
    assert body["temperature"] == 0.2
    assert body["stream"] is False


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"text": "From text field."}, "From text field."),
        ({"data": "", "text": "Fallback."}, "Fallback."),
        ({"id": "abc"}, NO_ANALYSIS_TEXT),
    ],
)
def test_text_field_fallbacks(captured, payload, expected):
    captured["payload"] = payload
    assert TwelveLabsAnalyzer("tl-key").analyze("vid").text == expected


@pytest.mark.parametrize("video_id", ["", None])
def test_rejects_missing_video_id(captured, video_id):
    with pytest.raises(InvalidInput) as exc_info:
        TwelveLabsAnalyzer("tl-key").analyze(video_id)
    assert "Invalid videoId" in str(exc_info.value)
    assert captured["requests"] == []


def test_requires_api_key(captured):
    with pytest.raises(MissingAPIKeyError) as exc_info:
        TwelveLabsAnalyzer(None).analyze("vid")
    assert "TWELVE_LABS_API_KEY" in str(exc_info.value)


def test_http_error_becomes_upstream_failure(captured):
    captured["error"] = urllib.error.HTTPError(
        "https://api.twelvelabs.io/v1.3/analyze",
        404,
        "Not Found",
        {},
        io.BytesIO(b'{"message": "video not found"}'),
    )
    with pytest.raises(UpstreamFailure) as exc_info:
        TwelveLabsAnalyzer("tl-key").analyze("vid")
    assert exc_info.value.service == "video-analysis"
    assert "404" in str(exc_info.value)
    assert "video not found" in str(exc_info.value)


def test_network_error_becomes_upstream_failure(captured):
    captured["error"] = urllib.error.URLError("connection refused")
    with pytest.raises(UpstreamFailure) as exc_info:
        TwelveLabsAnalyzer("tl-key").analyze("vid")
    assert exc_info.value.status_code == 502


@pytest.mark.parametrize(
    "error",
    [
        http.client.RemoteDisconnected("Remote end closed connection without response"),
        ConnectionResetError("connection reset by peer"),
        http.client.IncompleteRead(b"{\"data\": \"A fast"),
    ],
)
def test_dropped_connection_becomes_upstream_failure(captured, error):
    captured["error"] = error
    with pytest.raises(UpstreamFailure) as exc_info:
        TwelveLabsAnalyzer("tl-key").analyze("vid")
    assert exc_info.value.service == "video-analysis"
    assert exc_info.value.status_code == 502
