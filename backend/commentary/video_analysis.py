import http.client
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Dict

from .config import TWELVE_LABS_BASE_URL
from .errors import VIDEO_ANALYSIS, InvalidInput, MissingAPIKeyError, UpstreamFailure

logger = logging.getLogger(__name__)

ANALYSIS_PROMPT = "Provide a comprehensive description and summary of this video content."
ANALYSIS_TEMPERATURE = 0.2
NO_ANALYSIS_TEXT = "No analysis text available"


@dataclass
class VideoAnalysis:
    text: str
    video_id: str


def _post_json(url: str, body: Dict[str, Any], headers: Dict[str, str], timeout: int) -> Dict[str, Any]:
    req = urllib.request.Request(
        url,
        data=json.dumps(body).encode("utf-8"),
        headers={"Content-Type": "application/json", **headers},
        method="POST",
    )
    with urllib.request.urlopen(req, timeout=timeout) as resp:
        payload = resp.read().decode("utf-8")
    return json.loads(payload)


def _analysis_text(data: Dict[str, Any]) -> str:
    for key in ("data", "text"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return NO_ANALYSIS_TEXT


class TwelveLabsAnalyzer:
    """Describes an indexed video with the Twelve Labs ``/analyze`` endpoint."""

    def __init__(self, api_key: str | None, base_url: str = TWELVE_LABS_BASE_URL, timeout: int = 60):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def analyze(self, video_id: str) -> VideoAnalysis:
        if not video_id or not isinstance(video_id, str):
            raise InvalidInput(
                "Invalid videoId: must be a non-empty string",
                step=VIDEO_ANALYSIS,
            )
        if not self._api_key:
            raise MissingAPIKeyError("twelvelabs", step=VIDEO_ANALYSIS)

        body = {
            "video_id": video_id,
            "prompt": ANALYSIS_PROMPT,
            "temperature": ANALYSIS_TEMPERATURE,
            "stream": False,
        }
        logger.info(f"Analyzing video {video_id} with Twelve Labs")
        try:
            data = _post_json(
                f"{self._base_url}/analyze",
                body,
                {"x-api-key": self._api_key},
                self._timeout,
            )
        except urllib.error.HTTPError as exc:
            error_text = exc.read().decode("utf-8", errors="replace")
            raise UpstreamFailure(VIDEO_ANALYSIS, f"Twelve Labs API error: {exc.code} - {error_text}") from exc
        except urllib.error.URLError as exc:
            raise UpstreamFailure(VIDEO_ANALYSIS, f"Twelve Labs API error: {exc.reason}") from exc
        except TimeoutError as exc:
            raise UpstreamFailure(VIDEO_ANALYSIS, "Twelve Labs API error: request timed out") from exc
        except json.JSONDecodeError as exc:
            raise UpstreamFailure(VIDEO_ANALYSIS, f"Twelve Labs API error: invalid JSON response ({exc})") from exc
        except (OSError, http.client.HTTPException) as exc:
            raise UpstreamFailure(VIDEO_ANALYSIS, f"Twelve Labs API error: connection failed ({exc!r})") from exc

        if not isinstance(data, dict):
            raise UpstreamFailure(VIDEO_ANALYSIS, "Twelve Labs API error: unexpected response shape")

        text = _analysis_text(data)
        logger.info(f"Video analysis completed ({len(text)} characters)")
        return VideoAnalysis(text=text, video_id=video_id)
