"""
Video → commentary → speech orchestration.

Each step is one outbound call to an external service; the pipeline holds the
collaborators it was built with and no per-request state.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .commentator import Commentary, Commentator, OpenAITextGenerator
from .config import Settings
from .errors import InvalidInput
from .speech import ElevenLabsSynthesizer
from .styles import resolve_voice
from .video_analysis import TwelveLabsAnalyzer, VideoAnalysis

logger = logging.getLogger(__name__)


def parse_duration(value, required: bool = False) -> float | None:
    """Validate a duration in seconds; ``None`` or ``""`` means absent."""
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise InvalidInput("Duration is required", "Please provide a duration parameter (in seconds)")
        return None

    invalid = InvalidInput("Invalid duration", "Duration must be a positive number (in seconds)")
    if isinstance(value, bool):
        raise invalid
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise invalid from exc
    if not math.isfinite(seconds) or seconds <= 0:
        raise invalid
    return seconds


def require_video_id(video_id: str | None) -> str:
    if not video_id or not video_id.strip():
        raise InvalidInput("Video ID is required", "Please provide a videoId parameter")
    return video_id.strip()


@dataclass
class VideoCommentary:
    analysis: VideoAnalysis
    commentary: Commentary
    duration_seconds: float | None


@dataclass
class NarratedCommentary:
    commentary: str
    style_id: str
    voice_id: str
    audio: bytes


class CommentaryPipeline:
    def __init__(self, *, analyzer, commentator: Commentator, synthesizer):
        self._analyzer = analyzer
        self._commentator = commentator
        self._synthesizer = synthesizer

    def analyze(self, video_id: str) -> VideoAnalysis:
        return self._analyzer.analyze(require_video_id(video_id))

    def commentate(
        self,
        description: str,
        duration_seconds: float | None = None,
        style_id: str | None = None,
    ) -> Commentary:
        duration_seconds = parse_duration(duration_seconds)
        return self._commentator.commentate(description, duration_seconds, style_id)

    def commentate_video(
        self,
        video_id: str,
        duration_seconds: float | None = None,
        style_id: str | None = None,
    ) -> VideoCommentary:
        video_id = require_video_id(video_id)
        duration_seconds = parse_duration(duration_seconds)
        logger.info(f"Step 1: analyzing video {video_id}")
        analysis = self._analyzer.analyze(video_id)
        logger.info(f"Step 2: generating commentary ({len(analysis.text)} character description)")
        commentary = self._commentator.commentate(analysis.text, duration_seconds, style_id)
        return VideoCommentary(analysis=analysis, commentary=commentary, duration_seconds=duration_seconds)

    def narrate(self, text: str, style_id: str | None = None, voice_id: str | None = None) -> NarratedCommentary:
        resolved_voice, selected_style = resolve_voice(style_id, voice_id)
        logger.info(f"Converting commentary to speech (style {selected_style}, voice {resolved_voice})")
        audio = self._synthesizer.synthesize(text, resolved_voice)
        return NarratedCommentary(commentary=text, style_id=selected_style, voice_id=resolved_voice, audio=audio)

    def list_voices(self) -> list[dict]:
        return self._synthesizer.list_voices()


def build_pipeline(settings: Settings) -> CommentaryPipeline:
    analyzer = TwelveLabsAnalyzer(
        settings.twelve_labs_api_key,
        base_url=settings.twelve_labs_base_url,
        timeout=settings.twelve_labs_timeout,
    )
    generator = OpenAITextGenerator(settings.openai_api_key, model=settings.openai_model)
    synthesizer = ElevenLabsSynthesizer(settings.elevenlabs_api_key, model_id=settings.elevenlabs_model_id)
    return CommentaryPipeline(
        analyzer=analyzer,
        commentator=Commentator(generator, temperature=settings.temperature),
        synthesizer=synthesizer,
    )
