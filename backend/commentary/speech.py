import logging

import httpx
from elevenlabs import VoiceSettings
from elevenlabs.client import ElevenLabs
from elevenlabs.core import ApiError

from .errors import SPEECH_GENERATION, InvalidInput, MissingAPIKeyError, UpstreamFailure
from .styles import default_style

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "eleven_turbo_v2"
VOICE_SETTINGS = VoiceSettings(
    stability=0.8,
    similarity_boost=0.8,
    style=0.5,
    use_speaker_boost=True,
)


def _collect_audio(response) -> bytes:
    if isinstance(response, (bytes, bytearray)):
        return bytes(response)
    audio_bytes = b""
    for chunk in response:
        if isinstance(chunk, (bytes, bytearray)):
            audio_bytes += chunk
        elif hasattr(chunk, "read"):
            audio_bytes += chunk.read()
        else:
            audio_bytes += bytes(chunk)
    return audio_bytes


class ElevenLabsSynthesizer:
    def __init__(self, api_key: str | None, model_id: str = DEFAULT_MODEL_ID, client: ElevenLabs | None = None):
        self.model_id = model_id
        self._client = client
        if self._client is None and api_key:
            self._client = ElevenLabs(api_key=api_key)

    def _require_client(self) -> ElevenLabs:
        if self._client is None:
            raise MissingAPIKeyError("elevenlabs", step=SPEECH_GENERATION)
        return self._client

    def synthesize(self, text: str, voice_id: str | None = None) -> bytes:
        if not text or not text.strip():
            raise InvalidInput("Text is required", "Cannot synthesize empty text", step=SPEECH_GENERATION)
        client = self._require_client()
        voice_id = voice_id or default_style().voice_id
        logger.info(f"Generating speech with ElevenLabs ({len(text)} characters, voice {voice_id})")

        try:
            response = client.text_to_speech.convert(
                voice_id,
                text=text,
                model_id=self.model_id,
                voice_settings=VOICE_SETTINGS,
            )
            audio = _collect_audio(response)
        except ApiError as exc:
            raise UpstreamFailure(SPEECH_GENERATION, f"ElevenLabs API error: {exc.status_code} - {exc.body}") from exc
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise UpstreamFailure(SPEECH_GENERATION, f"ElevenLabs API error: {exc}") from exc

        if not audio:
            raise UpstreamFailure(SPEECH_GENERATION, "ElevenLabs API error: empty audio response")
        logger.info(f"Speech generated ({len(audio)} bytes)")
        return audio

    def list_voices(self) -> list[dict]:
        client = self._require_client()
        try:
            response = client.voices.search()
        except ApiError as exc:
            raise UpstreamFailure(SPEECH_GENERATION, f"ElevenLabs API error: {exc.status_code} - {exc.body}") from exc
        except (httpx.HTTPError, httpx.StreamError) as exc:
            raise UpstreamFailure(SPEECH_GENERATION, f"ElevenLabs API error: {exc}") from exc

        voices = []
        for voice in response.voices or []:
            voices.append(
                {
                    "voiceId": voice.voice_id,
                    "name": voice.name,
                    "category": getattr(voice, "category", None),
                }
            )
        logger.info(f"Found {len(voices)} available voices")
        return voices
