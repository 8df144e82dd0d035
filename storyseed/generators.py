"""Hosted-model clients used to turn a story prompt into text.

Two backends share the same ``generate(prompt, policy)`` contract:

* :class:`ReplicateStoryGenerator` runs a Replicate model
  (``meta/meta-llama-3-8b-instruct`` by default). Language models on
  Replicate return the output as a sequence of string fragments, which are
  joined without a separator.
* :class:`OpenAIStoryGenerator` calls the Chat Completions API.

Both make a single attempt per call. Provider failures are re-raised as
:class:`~storyseed.errors.UpstreamError`, with quota or billing refusals
singled out as :class:`~storyseed.errors.QuotaExceededError` so the HTTP
layer can answer with 402.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Protocol, Union

import openai
import replicate
from replicate.exceptions import ReplicateError

from .errors import QuotaExceededError, UpstreamError
from .services.story_prompt import LengthPolicy

LOGGER = logging.getLogger(__name__)

DEFAULT_TEMPERATURE = 0.75
DEFAULT_TOP_P = 0.9

QUOTA_STATUS_CODE = 402


class StoryGenerator(Protocol):
    def generate(self, prompt: str, policy: LengthPolicy) -> str:
        ...


def join_output(output: Union[str, Iterable[Any], None]) -> str:
    """Collapse a provider result into one string.

    A plain string is returned untouched; any other iterable is treated as a
    stream of fragments and concatenated in order.
    """

    if output is None:
        return ""
    if isinstance(output, str):
        return output
    return "".join(str(fragment) for fragment in output)


class ReplicateStoryGenerator:
    def __init__(
        self,
        api_token: str,
        *,
        model: str = "meta/meta-llama-3-8b-instruct",
        temperature: float = DEFAULT_TEMPERATURE,
        top_p: Optional[float] = DEFAULT_TOP_P,
        client: Optional[Any] = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.top_p = top_p
        self._client = client if client is not None else replicate.Client(api_token=api_token)

    def build_input(self, prompt: str, policy: LengthPolicy) -> dict:
        payload = {
            "prompt": prompt,
            "max_new_tokens": policy.max_tokens,
            "temperature": self.temperature,
        }
        if self.top_p is not None:
            payload["top_p"] = self.top_p
        return payload

    def generate(self, prompt: str, policy: LengthPolicy) -> str:
        payload = self.build_input(prompt, policy)
        LOGGER.info("Running %s with max_new_tokens=%s", self.model, policy.max_tokens)
        try:
            output = self._client.run(self.model, input=payload)
            text = join_output(output)
        except ReplicateError as exc:
            status = getattr(exc, "status", None)
            if status == QUOTA_STATUS_CODE:
                raise QuotaExceededError(str(exc)) from exc
            raise UpstreamError(str(exc)) from exc
        except Exception as exc:
            raise UpstreamError(str(exc) or exc.__class__.__name__) from exc
        return _require_text(text)


class OpenAIStoryGenerator:
    """Chat Completions backend, a single user message per story."""

    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4o-mini",
        temperature: float = DEFAULT_TEMPERATURE,
        top_p: Optional[float] = DEFAULT_TOP_P,
        client: Optional[Any] = None,
    ) -> None:
        self.model = (model or "").strip()
        self.temperature = temperature
        self.top_p = top_p
        self._client = client if client is not None else openai.OpenAI(api_key=api_key)

    def generate(self, prompt: str, policy: LengthPolicy) -> str:
        kwargs = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": policy.max_tokens,
            "temperature": float(self.temperature),
            "n": 1,
        }
        if self.top_p is not None:
            kwargs["top_p"] = float(self.top_p)

        LOGGER.info("Requesting chat completion from %s with max_tokens=%s", self.model, policy.max_tokens)
        try:
            resp = self._client.chat.completions.create(**kwargs)
        except openai.APIStatusError as exc:
            if exc.status_code == QUOTA_STATUS_CODE or getattr(exc, "code", None) == "insufficient_quota":
                raise QuotaExceededError(str(exc)) from exc
            raise UpstreamError(str(exc)) from exc
        except openai.OpenAIError as exc:
            raise UpstreamError(str(exc)) from exc
        return _require_text(self._extract_text(resp))

    @staticmethod
    def _extract_text(resp: Any) -> str:
        choices = getattr(resp, "choices", []) or []
        if not choices:
            return ""
        msg = getattr(choices[0], "message", None)
        if isinstance(msg, dict):
            content = msg.get("content")
        else:
            content = getattr(msg, "content", None)
        if isinstance(content, list):
            return join_output(
                str(part.get("text") or "")
                for part in content
                if isinstance(part, dict) and part.get("type") == "text"
            )
        return str(content or "")


def _require_text(text: str) -> str:
    if not text.strip():
        raise UpstreamError("The model returned an empty response.")
    return text


def build_story_generator(settings: Mapping[str, Any]) -> Optional[StoryGenerator]:
    """Create the backend named by ``GENERATION_BACKEND``.

    Returns ``None`` when the backend's credential is not configured; the
    request handler reports that as ``missing_token``.
    """

    backend = (settings.get("GENERATION_BACKEND") or "replicate").strip().lower()
    temperature = settings.get("STORY_TEMPERATURE", DEFAULT_TEMPERATURE)
    top_p = settings.get("STORY_TOP_P", DEFAULT_TOP_P)

    if backend == "openai":
        api_key = (settings.get("OPENAI_API_KEY") or "").strip()
        if not api_key:
            LOGGER.warning("OPENAI_API_KEY is not set; story generation is disabled.")
            return None
        return OpenAIStoryGenerator(
            api_key,
            model=settings.get("OPENAI_MODEL") or "gpt-4o-mini",
            temperature=temperature,
            top_p=top_p,
        )

    if backend != "replicate":
        raise ValueError(f"Unsupported GENERATION_BACKEND: {backend!r}")

    api_token = (settings.get("REPLICATE_API_TOKEN") or "").strip()
    if not api_token:
        LOGGER.warning("REPLICATE_API_TOKEN is not set; story generation is disabled.")
        return None
    return ReplicateStoryGenerator(
        api_token,
        model=settings.get("STORY_MODEL") or "meta/meta-llama-3-8b-instruct",
        temperature=temperature,
        top_p=top_p,
    )


def credential_name(settings: Mapping[str, Any]) -> str:
    backend = (settings.get("GENERATION_BACKEND") or "replicate").strip().lower()
    return "OPENAI_API_KEY" if backend == "openai" else "REPLICATE_API_TOKEN"
