"""Error taxonomy shared by the story service and its transport adapters."""

from __future__ import annotations

from typing import Any, Dict, Optional


class StoryRequestError(RuntimeError):
    """Base class for failures that map onto an HTTP error response."""

    code = "generation_failed"
    status_code = 500

    def __init__(self, message: Optional[str] = None, *, code: Optional[str] = None) -> None:
        super().__init__(message or code or self.code)
        if code is not None:
            self.code = code
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.code}
        if self.message:
            payload["message"] = self.message
        return payload


class InvalidStoryRequest(StoryRequestError):
    """Raised when the caller can fix the request and try again."""

    code = "seed_required"
    status_code = 400

    def __init__(self, code: str = "seed_required", *, status_code: int = 400) -> None:
        super().__init__(code=code)
        self.status_code = status_code


class MissingCredentialsError(StoryRequestError):
    """Raised when the inference provider credential is not configured."""

    code = "missing_token"
    status_code = 500


class UpstreamError(StoryRequestError):
    """Raised when the inference provider call fails."""

    code = "generation_failed"
    status_code = 500

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.code, "details": self.message or ""}


class QuotaExceededError(UpstreamError):
    """The provider refused the call for lack of credits or quota."""

    code = "quota_exceeded"
    status_code = 402
