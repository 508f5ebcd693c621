"""
Duration-aware basketball commentary: video analysis, length-matched commentary
generation and speech synthesis behind one pipeline.
"""

from __future__ import annotations

from .commentator import Commentary, Commentator, GenerationRequest, build_generation_request
from .errors import CommentaryError, EmptyGeneration, InvalidInput, MissingAPIKeyError, UpstreamFailure
from .length import duration_guidance, generation_limit, trim_to_sentences, word_budget
from .pipeline import CommentaryPipeline, build_pipeline, parse_duration
from .styles import COMMENTARY_STYLES, get_voice_id, is_valid_style, resolve_voice

__all__ = [
    "COMMENTARY_STYLES",
    "Commentary",
    "CommentaryError",
    "CommentaryPipeline",
    "Commentator",
    "EmptyGeneration",
    "GenerationRequest",
    "InvalidInput",
    "MissingAPIKeyError",
    "UpstreamFailure",
    "build_generation_request",
    "build_pipeline",
    "duration_guidance",
    "generation_limit",
    "get_voice_id",
    "is_valid_style",
    "parse_duration",
    "resolve_voice",
    "trim_to_sentences",
    "word_budget",
]
