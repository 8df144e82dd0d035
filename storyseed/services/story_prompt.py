from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

DEFAULT_LENGTH = "short"
DEFAULT_TONE = "neutral"


@dataclass(frozen=True)
class LengthPolicy:
    max_tokens: int
    paragraphs: int


LENGTH_POLICIES: Dict[str, LengthPolicy] = {
    "short": LengthPolicy(max_tokens=300, paragraphs=3),
    "medium": LengthPolicy(max_tokens=600, paragraphs=5),
    "long": LengthPolicy(max_tokens=900, paragraphs=7),
}


def resolve_length_label(length: object) -> str:
    """Return ``length`` when it names a known policy, otherwise ``"short"``."""

    if isinstance(length, str) and length in LENGTH_POLICIES:
        return length
    return DEFAULT_LENGTH


def resolve_length_policy(length: object) -> LengthPolicy:
    return LENGTH_POLICIES[resolve_length_label(length)]


_STORY_TEMPLATE = """\
Write a {length} story.
Tone: {tone}
Seed elements: {seed}

Structure:
- {paragraphs} paragraphs
- Clear protagonist and goal
- Narrative arc (intro → conflict → climax → resolution)
- Emotional or meaningful ending

Return ONLY the story text."""


def build_story_prompt(seed: str, tone: str, length: str, policy: LengthPolicy) -> str:
    """Render the instruction sent to the model.

    Seed and tone are embedded verbatim; nothing is escaped.
    """

    return _STORY_TEMPLATE.format(
        length=length,
        tone=tone or DEFAULT_TONE,
        seed=seed,
        paragraphs=policy.paragraphs,
    )
