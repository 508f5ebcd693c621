import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
BACKEND_DIR = ROOT_DIR / "backend"

if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from commentary.commentator import Commentator  # noqa: E402
from commentary.errors import SPEECH_GENERATION, VIDEO_ANALYSIS, InvalidInput, UpstreamFailure  # noqa: E402
from commentary.pipeline import CommentaryPipeline  # noqa: E402
from commentary.video_analysis import VideoAnalysis  # noqa: E402

DESCRIPTION = "A guard crosses over at the top of the key, drives left and finishes with a reverse layup."
COMMENTARY = "He crosses him over! Drives left, spins, and lays it in off the glass! What a finish."


class FakeAnalyzer:
    def __init__(self, text: str = DESCRIPTION, error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls = []

    def analyze(self, video_id: str) -> VideoAnalysis:
        self.calls.append(video_id)
        if self.error:
            raise self.error
        if not video_id:
            raise InvalidInput("Invalid videoId: must be a non-empty string", step=VIDEO_ANALYSIS)
        return VideoAnalysis(text=self.text, video_id=video_id)


class FakeGenerator:
    def __init__(self, reply: str | None = COMMENTARY, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, prompt, max_tokens, temperature, system_prompt=None):
        self.calls.append(
            {
                "prompt": prompt,
                "max_tokens": max_tokens,
                "temperature": temperature,
                "system_prompt": system_prompt,
            }
        )
        if self.error:
            raise self.error
        return self.reply


class FakeSynthesizer:
    def __init__(self, audio: bytes = b"ID3fake-mp3", error: Exception | None = None):
        self.audio = audio
        self.error = error
        self.calls = []

    def synthesize(self, text: str, voice_id: str | None = None) -> bytes:
        self.calls.append((text, voice_id))
        if self.error:
            raise self.error
        return self.audio

    def list_voices(self) -> list[dict]:
        if self.error:
            raise self.error
        return [{"voiceId": "6XVUA6jZZtcqPTW6amVC", "name": "ESPN on Steroid", "category": "cloned"}]


@pytest.fixture
def analyzer():
    return FakeAnalyzer()


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def pipeline(analyzer, generator, synthesizer):
    return CommentaryPipeline(
        analyzer=analyzer,
        commentator=Commentator(generator),
        synthesizer=synthesizer,
    )


@pytest.fixture
def client(pipeline):
    from fastapi.testclient import TestClient

    from app import app, get_pipeline

    app.dependency_overrides[get_pipeline] = lambda: pipeline
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def speech_failure():
    return UpstreamFailure(SPEECH_GENERATION, "ElevenLabs API error: 401 - invalid api key")
