"""Commentary styles and the ElevenLabs voices that read them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_STYLE_ID = "espn-steroid"
CUSTOM_STYLE_ID = "custom"


@dataclass(frozen=True)
class CommentaryStyle:
    id: str
    name: str
    description: str
    voice_id: str
    characteristics: tuple[str, ...] = field(default_factory=tuple)
    persona: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "voiceId": self.voice_id,
            "characteristics": list(self.characteristics),
        }


COMMENTARY_STYLES = [
    CommentaryStyle(
        id="kevin-harlan",
        name="Kevin Harlan",
        description="Legendary NBA broadcaster known for dramatic, passionate play-by-play",
        voice_id="YiUJCEfHcazOOIxtzmUX",
        characteristics=("Dramatic", "Passionate", "Legendary", "Play-by-play Master"),
        persona=(
            "a legendary NBA play-by-play broadcaster whose calls rise to a roar on every "
            "big moment, dramatic and passionate from tip-off to the final horn"
        ),
    ),
    CommentaryStyle(
        id="mike-breen",
        name="Mike Breen",
        description="High-energy, exciting commentary perfect for highlight reels",
        voice_id="bJwlnpYc7IzL75IA8ehy",
        characteristics=("High Energy", "Exciting", "Modern", "Hype-focused"),
        persona=(
            "a high-energy modern broadcaster built for highlight reels, quick on the call "
            "and quick to hype the biggest plays"
        ),
    ),
    CommentaryStyle(
        id="british-analyst",
        name="British Analyst",
        description="Sophisticated, articulate commentary with British flair",
        voice_id="8t6x0k43h2faV0HDWfnn",
        characteristics=("Sophisticated", "Articulate", "Professional", "International"),
        persona=(
            "a sophisticated British analyst who breaks the action down with articulate, "
            "measured insight and a dry wit"
        ),
    ),
    CommentaryStyle(
        id="espn-steroid",
        name="ESPN on Steroid",
        description="Traditional ESPN-style professional basketball commentary with extra intensity",
        voice_id="6XVUA6jZZtcqPTW6amVC",
        characteristics=("Professional", "Intense", "Authoritative", "High Energy"),
        persona=(
            "a legendary ESPN basketball commentator with decades of experience calling "
            "the most exciting games in NBA history"
        ),
    ),
]

STYLES_BY_ID = {style.id: style for style in COMMENTARY_STYLES}


def is_valid_style(style_id: str | None) -> bool:
    return isinstance(style_id, str) and style_id in STYLES_BY_ID


def default_style() -> CommentaryStyle:
    return STYLES_BY_ID[DEFAULT_STYLE_ID]


def get_style(style_id: str | None) -> CommentaryStyle:
    style = STYLES_BY_ID.get(style_id) if isinstance(style_id, str) else None
    if style is None:
        if style_id:
            logger.warning(f"Unknown commentary style: {style_id}, falling back to {DEFAULT_STYLE_ID}")
        return default_style()
    return style


def get_voice_id(style_id: str | None) -> str:
    return get_style(style_id).voice_id


def get_style_for_voice(voice_id: str) -> CommentaryStyle | None:
    for style in COMMENTARY_STYLES:
        if style.voice_id == voice_id:
            return style
    return None


def resolve_voice(style_id: str | None, legacy_voice_id: str | None = None) -> tuple[str, str]:
    """Return ``(voice_id, selected_style)`` for a request.

    A raw ``voiceId`` wins over the style and is reported as ``custom`` unless it
    belongs to a known style.
    """
    if legacy_voice_id:
        known = get_style_for_voice(legacy_voice_id)
        return legacy_voice_id, known.id if known else CUSTOM_STYLE_ID
    style = get_style(style_id)
    return style.voice_id, style.id
