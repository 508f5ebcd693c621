from types import SimpleNamespace

import httpx
import pytest
from elevenlabs.core import ApiError

from commentary.errors import InvalidInput, MissingAPIKeyError, UpstreamFailure
from commentary.speech import VOICE_SETTINGS, ElevenLabsSynthesizer


class _FakeTextToSpeech:
    def __init__(self, chunks=None, error=None):
        self.chunks = chunks or [b"ID3", b"audio"]
        self.error = error
        self.calls = []

    def convert(self, voice_id, **kwargs):
        self.calls.append((voice_id, kwargs))
        if self.error:
            raise self.error
        return iter(self.chunks)


def _client(tts=None, voices=None):
    return SimpleNamespace(text_to_speech=tts or _FakeTextToSpeech(), voices=voices)


def test_synthesize_collects_streamed_chunks():
    tts = _FakeTextToSpeech()
    synthesizer = ElevenLabsSynthesizer(None, client=_client(tts))

    audio = synthesizer.synthesize("Bang!", "YiUJCEfHcazOOIxtzmUX")

    assert audio == b"ID3audio"
    voice_id, kwargs = tts.calls[0]
    assert voice_id == "YiUJCEfHcazOOIxtzmUX"
    assert kwargs["text"] == "Bang!"
    assert kwargs["model_id"] == "eleven_turbo_v2"
    assert kwargs["voice_settings"] is VOICE_SETTINGS


def test_voice_settings_match_broadcast_profile():
    assert VOICE_SETTINGS.stability == 0.8
    assert VOICE_SETTINGS.similarity_boost == 0.8
    assert VOICE_SETTINGS.style == 0.5
    assert VOICE_SETTINGS.use_speaker_boost is True


def test_default_voice_is_default_style():
    tts = _FakeTextToSpeech()
    ElevenLabsSynthesizer(None, client=_client(tts)).synthesize("Bang!")
    assert tts.calls[0][0] == "6XVUA6jZZtcqPTW6amVC"


def test_api_error_becomes_upstream_failure():
    tts = _FakeTextToSpeech(error=ApiError(status_code=401, body={"detail": "invalid_api_key"}))
    with pytest.raises(UpstreamFailure) as exc_info:
        ElevenLabsSynthesizer(None, client=_client(tts)).synthesize("Bang!", "voice")
    assert exc_info.value.service == "speech-generation"
    assert "ElevenLabs API error: 401" in str(exc_info.value)


def test_transport_error_becomes_upstream_failure():
    tts = _FakeTextToSpeech(error=httpx.ConnectError("connection refused"))
    with pytest.raises(UpstreamFailure):
        ElevenLabsSynthesizer(None, client=_client(tts)).synthesize("Bang!", "voice")


def test_stream_error_mid_audio_becomes_upstream_failure():
    class _ClosedStream:
        def __iter__(self):
            yield b"ID3"
            raise httpx.StreamClosed()

    tts = _FakeTextToSpeech()
    tts.convert = lambda voice_id, **kwargs: _ClosedStream()
    with pytest.raises(UpstreamFailure) as exc_info:
        ElevenLabsSynthesizer(None, client=_client(tts)).synthesize("Bang!", "voice")
    assert exc_info.value.service == "speech-generation"


def test_list_voices_stream_error_becomes_upstream_failure():
    def search():
        raise httpx.StreamConsumed()

    synthesizer = ElevenLabsSynthesizer(None, client=_client(voices=SimpleNamespace(search=search)))
    with pytest.raises(UpstreamFailure):
        synthesizer.list_voices()


def test_empty_audio_is_a_failure():
    tts = _FakeTextToSpeech(chunks=[b""])
    with pytest.raises(UpstreamFailure):
        ElevenLabsSynthesizer(None, client=_client(tts)).synthesize("Bang!", "voice")


def test_rejects_blank_text():
    tts = _FakeTextToSpeech()
    with pytest.raises(InvalidInput):
        ElevenLabsSynthesizer(None, client=_client(tts)).synthesize("  ", "voice")
    assert tts.calls == []


def test_requires_api_key():
    with pytest.raises(MissingAPIKeyError) as exc_info:
        ElevenLabsSynthesizer(None).synthesize("Bang!", "voice")
    assert "ELEVENLABS_API_KEY" in str(exc_info.value)


def test_list_voices():
    voice = SimpleNamespace(voice_id="abc", name="Announcer", category="premade")
    voices = SimpleNamespace(search=lambda: SimpleNamespace(voices=[voice]))
    synthesizer = ElevenLabsSynthesizer(None, client=_client(voices=voices))

    assert synthesizer.list_voices() == [{"voiceId": "abc", "name": "Announcer", "category": "premade"}]
