"""Immutable settings snapshot passed into every agent invocation."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import dotenv

from .types import Provider

logger = logging.getLogger(__name__)

# Sentinel used by the settings UI for "leave the provider default alone"
DEFAULT = "Default"

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
LOCAL_API_KEY = "ollama"

_PROVIDERS = ("google", "openrouter", "local")


@dataclass(frozen=True)
class Settings:
    """
    Snapshot of the user settings read once at the start of a call.

    Attributes:
        provider: Provider variant ("google", "openrouter" or "local").
        model: Model identifier sent to the provider.
        google_api_key: Key for the Google GenAI API.
        openrouter_api_key: Key for OpenRouter.
        local_model_url: Base URL of a local OpenAI-compatible server.
        temperature: Sampling temperature, or "Default".
        max_output_tokens: Output token limit, or "Default".
        thinking_level: "Low", "High" or "Default" (Gemini 3 models only).
        max_history_turns: Number of past user/assistant turns sent as context.
    """

    provider: Provider = "google"
    model: str = "gemini-2.5-flash"
    google_api_key: str = ""
    openrouter_api_key: str = ""
    local_model_url: str = "http://localhost:11434/v1"
    temperature: str = DEFAULT
    max_output_tokens: str = DEFAULT
    thinking_level: str = DEFAULT
    max_history_turns: int = 5

    @property
    def api_key(self) -> str:
        """Credential for the selected provider."""
        if self.provider == "google":
            return self.google_api_key
        if self.provider == "openrouter":
            return self.openrouter_api_key
        return LOCAL_API_KEY

    @property
    def base_url(self) -> Optional[str]:
        """Base URL for OpenAI-compatible providers (None for Google)."""
        if self.provider == "openrouter":
            return OPENROUTER_BASE_URL
        if self.provider == "local":
            url = self.local_model_url
            return url[:-1] if url.endswith("/") else url
        return None

    def temperature_override(self) -> Optional[float]:
        if self.temperature == DEFAULT_SETTINGS.temperature:
            return None
        return float(self.temperature)

    def max_output_tokens_override(self) -> Optional[int]:
        if self.max_output_tokens == DEFAULT_SETTINGS.max_output_tokens:
            return None
        return int(self.max_output_tokens)

    def thinking_level_override(self) -> Optional[str]:
        """
        Thinking level to request, or None.

        Only Gemini 3 models accept a thinking level; anything other than
        "Low" is treated as "High".
        """
        if "3" not in self.model or self.thinking_level == DEFAULT_SETTINGS.thinking_level:
            return None
        return "LOW" if self.thinking_level == "Low" else "HIGH"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        """
        Build a snapshot from environment variables (and a .env file if present).

        Invalid provider or history values are logged and replaced by defaults.
        """
        dotenv.load_dotenv(dotenv_path)
        defaults = DEFAULT_SETTINGS

        provider = os.environ.get("AGENT_PROVIDER", defaults.provider).strip().lower()
        if provider not in _PROVIDERS:
            logger.warning(
                "Invalid AGENT_PROVIDER=%r; expected one of %s. Defaulting to %s.",
                provider,
                "/".join(_PROVIDERS),
                defaults.provider,
            )
            provider = defaults.provider

        turns_raw = os.environ.get("AGENT_MAX_HISTORY_TURNS", str(defaults.max_history_turns))
        try:
            max_history_turns = max(0, int(turns_raw))
        except ValueError:
            logger.warning(
                "Invalid AGENT_MAX_HISTORY_TURNS=%r; defaulting to %d.",
                turns_raw,
                defaults.max_history_turns,
            )
            max_history_turns = defaults.max_history_turns

        return cls(
            provider=provider,  # type: ignore[arg-type]
            model=os.environ.get("AGENT_MODEL", defaults.model),
            google_api_key=os.environ.get("GOOGLE_API_KEY", ""),
            openrouter_api_key=os.environ.get("OPENROUTER_API_KEY", ""),
            local_model_url=os.environ.get("LOCAL_MODEL_URL", defaults.local_model_url),
            temperature=os.environ.get("AGENT_TEMPERATURE", defaults.temperature),
            max_output_tokens=os.environ.get("AGENT_MAX_OUTPUT_TOKENS", defaults.max_output_tokens),
            thinking_level=os.environ.get("AGENT_THINKING_LEVEL", defaults.thinking_level),
            max_history_turns=max_history_turns,
        )


DEFAULT_SETTINGS = Settings()
