"""
Single-attempt delivery of a built prompt to the Claude API.

The outcome of every call is returned as a value rather than raised:
InvocationSuccess carries the completion text, InvocationFailure carries the
typed error explaining why there is no usable text. Callers branch on the
outcome type; nothing in this module propagates an exception upward.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Union

import anthropic
import httpx
from anthropic import AsyncAnthropic

from app.config import settings
from app.services.prompts import BuiltPrompt, HEALTH_ASSISTANT_SYSTEM_PROMPT


logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class InvocationError(Exception):
    """The model produced no usable completion for this call."""

    pass


class InitializationError(InvocationError):
    """The Claude client could not be constructed (missing or bad credential)."""

    pass


class ServiceUnavailableError(InvocationError):
    """AI service is temporarily unavailable."""

    pass


class RateLimitError(InvocationError):
    """Rate limit exceeded."""

    pass


class RequestTimeoutError(InvocationError):
    """The completion did not arrive within the configured timeout."""

    pass


class EmptyCompletionError(InvocationError):
    """The completion contained no text."""

    pass


# =============================================================================
# OUTCOMES
# =============================================================================


@dataclass(frozen=True)
class InvocationSuccess:
    text: str


@dataclass(frozen=True)
class InvocationFailure:
    error: InvocationError

    @property
    def reason(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


InvocationResult = Union[InvocationSuccess, InvocationFailure]


def create_anthropic_client(api_key: Optional[str] = None) -> Optional[AsyncAnthropic]:
    """
    Build the Claude client from settings.

    Returns None when no key is configured or construction fails; the invoker
    then reports InitializationError for every call.
    """
    key = settings.anthropic_api_key if api_key is None else api_key
    if not key:
        logger.warning("ANTHROPIC_API_KEY not set; AI features will use heuristics")
        return None

    timeout = httpx.Timeout(
        timeout=settings.ai_request_timeout,
        connect=settings.ai_connect_timeout,
    )
    try:
        # max_retries=0: one attempt per call, heuristics absorb failures
        return AsyncAnthropic(api_key=key, timeout=timeout, max_retries=0)
    except anthropic.AnthropicError as e:
        logger.warning("Claude client initialization failed: %s", e)
        return None


class ModelInvoker:
    """Sends one prompt per call to Claude and reports the outcome as a value."""

    def __init__(
        self,
        client: Optional[AsyncAnthropic],
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.client = client
        self.model = model or settings.assistant_model
        self.max_tokens = max_tokens or settings.assistant_max_tokens
        self.timeout = timeout or settings.ai_request_timeout

    @classmethod
    def from_settings(cls) -> "ModelInvoker":
        return cls(create_anthropic_client())

    async def invoke(self, prompt: BuiltPrompt) -> InvocationResult:
        if self.client is None:
            return InvocationFailure(InitializationError("AI client not initialized"))

        try:
            response = await asyncio.wait_for(
                self.client.messages.create(
                    model=self.model,
                    max_tokens=self.max_tokens,
                    system=HEALTH_ASSISTANT_SYSTEM_PROMPT,
                    messages=[{"role": "user", "content": self._build_content(prompt)}],
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return InvocationFailure(
                RequestTimeoutError(f"No response within {self.timeout:.1f}s")
            )
        except anthropic.APITimeoutError:
            return InvocationFailure(RequestTimeoutError("Claude API request timed out"))
        except anthropic.APIConnectionError:
            return InvocationFailure(
                ServiceUnavailableError("AI service temporarily unavailable")
            )
        except anthropic.RateLimitError:
            return InvocationFailure(
                RateLimitError("Too many requests, please try again in 1 minute")
            )
        except anthropic.APIStatusError as e:
            if e.status_code >= 500:
                return InvocationFailure(ServiceUnavailableError("AI service error"))
            return InvocationFailure(InvocationError(f"Request error: {e.message}"))
        except Exception as e:
            return InvocationFailure(InvocationError(f"Claude API call failed: {e}"))

        # Extract text from response (handle multi-block responses)
        text = ""
        for block in response.content:
            if hasattr(block, "text"):
                text += block.text

        if not text.strip():
            return InvocationFailure(EmptyCompletionError("Empty response from AI"))

        return InvocationSuccess(text)

    def _build_content(self, prompt: BuiltPrompt) -> Union[str, list[dict]]:
        if prompt.image is None:
            return prompt.text

        return [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": prompt.image.media_type,
                    "data": prompt.image.data,
                },
            },
            {"type": "text", "text": prompt.text},
        ]
