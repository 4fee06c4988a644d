from .client import AgentRunner, get_provider
from .errors import (
    AgentError, AuthError, QuotaError, OverloadError, ProviderError,
    UnexpectedError, DepthExceededError,
)
from .functions import FunctionRegistry
from .settings import Settings, DEFAULT_SETTINGS
from .types import ChatMessage, ToolCall, Attachment, FunctionDeclaration, Provider
from .rich_printer import RichAgentPrinter

__all__ = [
    "AgentRunner",
    "get_provider",
    "AgentError",
    "AuthError",
    "QuotaError",
    "OverloadError",
    "ProviderError",
    "UnexpectedError",
    "DepthExceededError",
    "FunctionRegistry",
    "Settings",
    "DEFAULT_SETTINGS",
    "ChatMessage",
    "ToolCall",
    "Attachment",
    "FunctionDeclaration",
    "Provider",
    "RichAgentPrinter",
]
