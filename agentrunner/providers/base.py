from abc import ABC, abstractmethod
from typing import Any, List, Sequence

from ..functions import FunctionRegistry
from ..inputs import FileInput
from ..settings import Settings
from ..types import Attachment, ChatMessage, FunctionDeclaration, UpdateCallback

# Model rounds allowed per agent invocation
MAX_TURNS = 5


class BaseAgentProvider(ABC):
    """
    Abstract base class for agent providers.

    A provider is built from one settings snapshot and serves one or more
    invocations with it.
    """

    def __init__(self, settings: Settings, registry: FunctionRegistry, system_prompt: str):
        self.settings = settings
        self.registry = registry
        self.system_prompt = system_prompt

    @abstractmethod
    async def run_agent(
        self,
        conversation: Sequence[ChatMessage],
        message: str,
        attachments: Sequence[Attachment],
        files: Sequence[FileInput],
        on_update: UpdateCallback,
    ) -> None:
        """
        Run the tool-calling loop for one user message.

        Args:
            conversation: Prior messages; read once, never modified.
            message: The new user message.
            attachments: Notes attached to the message.
            files: Files sent inline with the message.
            on_update: Called with (text delta, reasoning delta, new tool calls)
                as output arrives.

        Raises:
            AgentError: On any failure; the invocation stops immediately.
        """
        pass

    @abstractmethod
    async def call_model(self, system: str, user: str, files: Sequence[FileInput]) -> str:
        """
        Single request without history or tools.

        Returns:
            str: The model text, or "" if the provider returned none.
        """
        pass

    @abstractmethod
    def translate_tools(self, declarations: List[FunctionDeclaration]) -> List[Any]:
        """Convert provider-neutral declarations to the provider's tool format."""
        pass
