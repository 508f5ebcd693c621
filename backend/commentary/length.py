"""
Commentary length control.

Spoken commentary has to fit the clip it is read over, so the prompt asks for a
word budget derived from the clip duration and the generated text is cut back
to whole sentences afterwards. The generator is given far more room than the
budget needs so it can finish its thought; the trimming happens here.
"""

from __future__ import annotations

import math
import re

WORDS_PER_SECOND = 2.5
DEFAULT_WORD_BUDGET = 40
GENERATION_MULTIPLIER = 3
MIN_GENERATION_LIMIT = 150
KEEP_ALL_TOLERANCE = 1.2
TRIM_CEILING = 1.3
MIN_TAIL_CHARS = 10

DEFAULT_GUIDANCE = "Generate a moderate-length commentary (about 30-40 words)."

# (inclusive upper bound in seconds, label, shape)
GUIDANCE_BUCKETS = [
    (5, "a very brief", "just 1-2 short sentences for this quick moment"),
    (15, "a short", "2-3 sentences for this brief action"),
    (30, "a moderate", "about 1 paragraph for this sequence"),
    (60, "a detailed", "2 paragraphs for this extended sequence"),
    (120, "a comprehensive", "2-3 paragraphs for this long sequence"),
]
OPEN_ENDED_GUIDANCE = ("an extensive", "3-4 paragraphs for this lengthy sequence")

_TERMINAL_RUN = re.compile(r"[.!?]+")
_TERMINAL_CHARS = (".", "!", "?")
_CONNECTIVES = (" and ", " with ", " as ")


def word_budget(duration_seconds: float | None = None) -> int:
    if not duration_seconds or not math.isfinite(duration_seconds):
        return DEFAULT_WORD_BUDGET
    # half-up, so 1 second is 3 words rather than banker's 2
    return int(math.floor(duration_seconds * WORDS_PER_SECOND + 0.5))


def duration_guidance(duration_seconds: float | None = None) -> str:
    if not duration_seconds:
        return DEFAULT_GUIDANCE

    words = word_budget(duration_seconds)
    label, shape = OPEN_ENDED_GUIDANCE
    for upper, bucket_label, bucket_shape in GUIDANCE_BUCKETS:
        if duration_seconds <= upper:
            label, shape = bucket_label, bucket_shape
            break
    return f"Generate {label} commentary ({words} words maximum) - {shape}."


def generation_limit(budget: int) -> int:
    return max(budget * GENERATION_MULTIPLIER, MIN_GENERATION_LIMIT)


def count_words(text: str) -> int:
    return len(text.split())


def split_sentences(text: str) -> list[str]:
    """Split text into sentences closed by runs of terminal punctuation.

    A trailing fragment with no closing punctuation is kept only when it reads
    like a finished clause: longer than ten characters and either ending in
    punctuation or containing a connective. Accepted fragments are closed with
    a period.
    """
    sentences = []
    last_end = 0
    for match in _TERMINAL_RUN.finditer(text):
        sentence = text[last_end : match.end()].strip()
        if sentence:
            sentences.append(sentence)
        last_end = match.end()

    tail = text[last_end:].strip()
    if _looks_complete(tail):
        if not tail.endswith(_TERMINAL_CHARS):
            tail += "."
        sentences.append(tail)
    return sentences


def _looks_complete(fragment: str) -> bool:
    if len(fragment) <= MIN_TAIL_CHARS:
        return False
    if fragment.endswith(_TERMINAL_CHARS):
        return True
    return any(connective in fragment for connective in _CONNECTIVES)


def trim_to_sentences(raw_text: str, budget: int) -> str:
    """Cut generated commentary back to whole sentences near ``budget`` words.

    Text within 20% of the budget is returned whole. Longer text keeps the
    leading sentences while the running word count stays within 30% of the
    budget, always keeping at least the first sentence. Never raises; the
    result always ends in terminal punctuation.
    """
    text = (raw_text or "").strip()
    sentences = split_sentences(text)

    if not sentences:
        return text if text.endswith(".") else f"{text}."

    counts = [count_words(sentence) for sentence in sentences]
    if sum(counts) <= budget * KEEP_ALL_TOLERANCE:
        return " ".join(sentences)

    ceiling = budget * TRIM_CEILING
    selected = []
    running = 0
    for sentence, count in zip(sentences, counts):
        if running + count > ceiling:
            break
        selected.append(sentence)
        running += count

    if not selected:
        selected = sentences[:1]
    return " ".join(selected)
