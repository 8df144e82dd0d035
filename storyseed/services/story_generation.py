from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Tuple

from ..errors import (
    InvalidStoryRequest,
    MissingCredentialsError,
    StoryRequestError,
    UpstreamError,
)
from .story_cache import StoryCache, story_cache_key
from .story_prompt import DEFAULT_TONE, build_story_prompt, resolve_length_label, resolve_length_policy

if TYPE_CHECKING:  # pragma: no cover
    from ..generators import StoryGenerator

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationRequest:
    seed: str
    tone: str
    length: str

    @classmethod
    def from_payload(cls, payload: Any) -> "GenerationRequest":
        """Validate a decoded JSON body.

        Non-object bodies and non-string fields are treated as missing.
        """

        if not isinstance(payload, Mapping):
            payload = {}

        seed = _clean_text(payload.get("seed"))
        if not seed:
            raise InvalidStoryRequest("seed_required")

        tone = _clean_text(payload.get("tone")) or DEFAULT_TONE
        length = resolve_length_label(payload.get("length"))
        return cls(seed=seed, tone=tone, length=length)

    @property
    def cache_key(self) -> str:
        return story_cache_key(self.seed, self.tone, self.length)


@dataclass
class GenerationResult:
    text: str
    cached: bool

    def to_payload(self) -> Dict[str, Any]:
        return {"output": self.text, "cached": self.cached}


def _clean_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


class StoryService:
    """Validate, consult the cache, and call the model for one story request.

    The cache and generator are injected so each host (and each test) decides
    their lifetime. ``generator`` is ``None`` when no credential is
    configured; requests then fail with ``missing_token``.
    """

    def __init__(
        self,
        cache: StoryCache,
        generator: Optional["StoryGenerator"],
        *,
        credential_name: str = "REPLICATE_API_TOKEN",
    ) -> None:
        self.cache = cache
        self.generator = generator
        self.credential_name = credential_name

    def generate(self, request: GenerationRequest) -> GenerationResult:
        key = request.cache_key
        cached_text = self.cache.get(key)
        if cached_text is not None:
            LOGGER.info("Story cache hit for length=%s tone=%s", request.length, request.tone)
            return GenerationResult(text=cached_text, cached=True)

        if self.generator is None:
            raise MissingCredentialsError(f"{self.credential_name} is not set")

        policy = resolve_length_policy(request.length)
        prompt = build_story_prompt(request.seed, request.tone, request.length, policy)
        text = self.generator.generate(prompt, policy)

        self.cache.put(key, text)
        return GenerationResult(text=text, cached=False)

    def handle(self, method: str, payload: Any) -> Tuple[int, Dict[str, Any]]:
        """Run one HTTP-shaped request and return ``(status, body)``.

        Shared by the Flask route and the serverless handler.
        """

        try:
            if (method or "").upper() != "POST":
                raise InvalidStoryRequest("method_not_allowed", status_code=405)
            if self.generator is None:
                raise MissingCredentialsError(f"{self.credential_name} is not set")
            request = GenerationRequest.from_payload(payload)
            result = self.generate(request)
        except InvalidStoryRequest as exc:
            LOGGER.info("Rejected story request: %s", exc.code)
            return exc.status_code, exc.to_payload()
        except UpstreamError as exc:
            LOGGER.warning("Story generation failed (%s): %s", exc.code, exc.message)
            return exc.status_code, exc.to_payload()
        except StoryRequestError as exc:
            LOGGER.error("Story service misconfigured: %s", exc.message)
            return exc.status_code, exc.to_payload()
        except Exception as exc:
            LOGGER.exception("Unexpected error while generating a story")
            error = UpstreamError(str(exc) or exc.__class__.__name__)
            return error.status_code, error.to_payload()

        return 200, result.to_payload()
