from __future__ import annotations

import logging
from dataclasses import dataclass

import openai
from openai import OpenAI

from .errors import COMMENTARY_GENERATION, EmptyGeneration, InvalidInput, MissingAPIKeyError, UpstreamFailure
from .length import duration_guidance, generation_limit, trim_to_sentences, word_budget
from .styles import CommentaryStyle, get_style

logger = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.8

COMMENTARY_TRAITS = [
    "High energy and excitement",
    "Expert basketball knowledge and terminology",
    "Dramatic flair and storytelling",
    "References to player skills, strategy, and game context",
    "Use of classic basketball commentary phrases",
    "Build tension and excitement around key moments",
    "Professional broadcaster voice and pacing",
]


@dataclass(frozen=True)
class GenerationRequest:
    system_prompt: str
    prompt: str
    word_budget: int
    max_tokens: int
    temperature: float


@dataclass(frozen=True)
class Commentary:
    text: str
    raw_text: str
    word_budget: int
    style_id: str


def _system_prompt(style: CommentaryStyle) -> str:
    traits = ", ".join(trait.lower() for trait in style.characteristics)
    return (
        f"You are {style.persona}. Your delivery is {traits}. "
        "You bring basketball games to life with your words."
    )


def build_generation_request(
    description: str,
    duration_seconds: float | None = None,
    style: CommentaryStyle | None = None,
    temperature: float = DEFAULT_TEMPERATURE,
) -> GenerationRequest:
    style = style or get_style(None)
    budget = word_budget(duration_seconds)
    bullets = "\n".join(f"- {trait}" for trait in COMMENTARY_TRAITS)
    prompt = (
        f"You are {style.persona}. {style.description}.\n\n"
        "Transform the following video description into captivating basketball commentary "
        "in your own signature style. Make it sound like you're calling a live game with:\n\n"
        f"{bullets}\n\n"
        f"{duration_guidance(duration_seconds)}\n"
        "Finish every sentence you start.\n\n"
        f'Video Description: "{description}"\n\n'
        "Commentary:"
    )
    return GenerationRequest(
        system_prompt=_system_prompt(style),
        prompt=prompt,
        word_budget=budget,
        max_tokens=generation_limit(budget),
        temperature=temperature,
    )


class OpenAITextGenerator:
    def __init__(self, api_key: str | None, model: str = "gpt-4o", client: OpenAI | None = None):
        self.model = model
        self._client = client
        if self._client is None and api_key:
            self._client = OpenAI(api_key=api_key)

    def _require_client(self) -> OpenAI:
        if self._client is None:
            raise MissingAPIKeyError("openai", step=COMMENTARY_GENERATION)
        return self._client

    def generate(
        self,
        prompt: str,
        max_tokens: int,
        temperature: float,
        system_prompt: str | None = None,
    ) -> str | None:
        client = self._require_client()
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        try:
            completion = client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except openai.OpenAIError as exc:
            raise UpstreamFailure(COMMENTARY_GENERATION, f"OpenAI API error: {exc}") from exc

        if not completion.choices:
            return None
        return completion.choices[0].message.content

    def check_connection(self) -> bool:
        try:
            reply = self.generate("Say 'OpenAI connection successful' if you can hear me.", 50, 0.0)
        except (UpstreamFailure, MissingAPIKeyError) as exc:
            logger.warning(f"OpenAI connection test failed: {exc}")
            return False
        logger.info(f"OpenAI connection test successful: {reply}")
        return True


class Commentator:
    """Turns a clip description into length-matched spoken commentary."""

    def __init__(self, generator, temperature: float = DEFAULT_TEMPERATURE):
        self._generator = generator
        self._temperature = temperature

    def commentate(
        self,
        description: str,
        duration_seconds: float | None = None,
        style_id: str | None = None,
    ) -> Commentary:
        if not description or not isinstance(description, str) or not description.strip():
            raise InvalidInput(
                "Description is required",
                "Please provide a description of the video",
                step=COMMENTARY_GENERATION,
            )

        style = get_style(style_id)
        request = build_generation_request(description, duration_seconds, style, self._temperature)
        logger.info(
            f"Generating {style.id} commentary for "
            f"{duration_seconds if duration_seconds else 'unspecified'}s "
            f"(~{request.word_budget} words, max_tokens={request.max_tokens})"
        )

        raw = self._generator.generate(
            request.prompt,
            request.max_tokens,
            request.temperature,
            system_prompt=request.system_prompt,
        )
        if not raw or not raw.strip():
            raise EmptyGeneration()

        text = trim_to_sentences(raw, request.word_budget)
        logger.info(f"Commentary trimmed from {len(raw.split())} to {len(text.split())} words")
        return Commentary(text=text, raw_text=raw, word_budget=request.word_budget, style_id=style.id)
