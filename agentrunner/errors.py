"""
Error types raised by agent invocations.

Every failure is fatal to the invocation and reaches the caller as one
AgentError subclass whose message can be shown to the user verbatim.
"""

from typing import Optional

import httpx
import openai
from google.genai import errors as genai_errors


class AgentError(Exception):
    """Base for all agentrunner errors."""

    def __init__(self, message: str, original: Optional[BaseException] = None):
        super().__init__(message)
        self.original = original


class AuthError(AgentError):
    """Missing or invalid API key (403)."""


class QuotaError(AgentError):
    """Rate limit or quota exceeded (429)."""


class OverloadError(AgentError):
    """Provider temporarily unavailable (503)."""


class ProviderError(AgentError):
    """Any other provider-side failure."""


class UnexpectedError(AgentError):
    """Anything not recognized as a provider error."""


class DepthExceededError(AgentError):
    """Tool execution went past the maximum number of turns."""


def error_for_status(status: Optional[int], message: str, original: Optional[BaseException] = None) -> AgentError:
    """
    Map a provider status code to the matching AgentError.

    Args:
        status: HTTP-like status code reported by the provider.
        message: Provider message, used for unrecognized statuses.
        original: The exception being translated.
    """
    if status == 403:
        return AuthError("API key not set, or isn't valid.", original)
    if status == 429:
        return QuotaError("API quota exceeded. Please check your Google Cloud account.", original)
    if status == 503:
        return OverloadError("API service overloaded. Please try again later.", original)
    return ProviderError(f"API Error: {message}", original)


def classify_gemini_error(error: BaseException) -> AgentError:
    """Translate an exception raised while talking to Gemini."""
    if isinstance(error, AgentError):
        return error
    if isinstance(error, genai_errors.APIError):
        return error_for_status(error.code, error.message or str(error), error)
    return UnexpectedError(f"Unexpected Error: {error}", error)


def classify_openai_error(error: BaseException) -> AgentError:
    """Translate an exception raised while talking to an OpenAI-compatible API."""
    if isinstance(error, AgentError):
        return error
    if isinstance(error, (openai.APIError, httpx.HTTPError)):
        return ProviderError(f"API Error: {error}", error)
    return UnexpectedError(f"Unexpected Error: {error}", error)
