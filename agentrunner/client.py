import logging
from typing import Dict, Optional, Sequence, Type

from .functions import FunctionRegistry
from .inputs import FileInput
from .prompts import AGENT_SYSTEM_PROMPT
from .providers.base import BaseAgentProvider
from .providers.gemini import GeminiAgentProvider
from .providers.openai import OpenAICompatibleProvider
from .settings import Settings
from .types import Attachment, ChatMessage, UpdateCallback

logger = logging.getLogger(__name__)

PROVIDERS: Dict[str, Type[BaseAgentProvider]] = {
    "google": GeminiAgentProvider,
    "openrouter": OpenAICompatibleProvider,
    "local": OpenAICompatibleProvider,
}


def get_provider(
    settings: Settings,
    registry: FunctionRegistry,
    system_prompt: str = AGENT_SYSTEM_PROMPT,
) -> BaseAgentProvider:
    """
    Build the provider for a settings snapshot.

    Raises:
        ValueError: If the provider is not supported.
    """
    provider_cls = PROVIDERS.get(settings.provider)
    if provider_cls is None:
        raise ValueError(f"Provider '{settings.provider}' not configured or not supported.")
    return provider_cls(settings, registry, system_prompt)


class AgentRunner:
    """
    Entry point for the host application.

    Picks the provider once per call from the settings snapshot and hands
    the call to it.
    """

    def __init__(
        self,
        registry: Optional[FunctionRegistry] = None,
        settings: Optional[Settings] = None,
        system_prompt: str = AGENT_SYSTEM_PROMPT,
    ):
        """
        Args:
            registry: Functions the agent may call. Defaults to an empty registry.
            settings: Default settings snapshot. Read from the environment if omitted.
            system_prompt: System prompt for agent calls.
        """
        self.registry = registry or FunctionRegistry()
        self.settings = settings or Settings.from_env()
        self.system_prompt = system_prompt

    def provider_for(self, settings: Optional[Settings] = None) -> BaseAgentProvider:
        return get_provider(settings or self.settings, self.registry, self.system_prompt)

    async def call_agent(
        self,
        conversation: Sequence[ChatMessage],
        message: str,
        attachments: Sequence[Attachment],
        files: Sequence[FileInput],
        on_update: UpdateCallback,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Answer `message` with the function-calling agent.

        Output is streamed through `on_update(text, reasoning, tool_calls)`;
        treat every call as an increment to append.

        Args:
            conversation: Prior messages (not modified).
            message: The new user message.
            attachments: Notes attached to the message.
            files: Files sent inline with the message.
            on_update: Streaming callback.
            settings: Snapshot for this call; defaults to the runner settings.

        Raises:
            AgentError: With a message meant to be shown to the user.
        """
        provider = self.provider_for(settings)
        logger.debug("Agent call with %s (%s)", provider.settings.provider, provider.settings.model)
        await provider.run_agent(conversation, message, attachments, files, on_update)

    async def call_model(
        self,
        system: str,
        user: str,
        files: Sequence[FileInput] = (),
        settings: Optional[Settings] = None,
    ) -> str:
        """
        One request with no history and no tools.

        Returns:
            str: The model text ("" if there was none).
        """
        return await self.provider_for(settings).call_model(system, user, files)
