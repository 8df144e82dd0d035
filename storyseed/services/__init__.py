"""Service layer for story generation."""

from __future__ import annotations

from .story_cache import InMemoryStoryCache, StoryCache, story_cache_key  # noqa: F401
from .story_generation import GenerationRequest, GenerationResult, StoryService  # noqa: F401
from .story_prompt import (  # noqa: F401
    LENGTH_POLICIES,
    LengthPolicy,
    build_story_prompt,
    resolve_length_policy,
)

__all__ = [
    "GenerationRequest",
    "GenerationResult",
    "InMemoryStoryCache",
    "LENGTH_POLICIES",
    "LengthPolicy",
    "StoryCache",
    "StoryService",
    "build_story_prompt",
    "resolve_length_policy",
    "story_cache_key",
]
