from typing import Literal, List, Dict, Any, Union, TypedDict, Callable, Optional

# =============================================================================
# Type Definitions
# =============================================================================

# Supported provider variants
Provider = Literal["google", "openrouter", "local"]

# Who wrote a message in the host application's conversation log
Sender = Literal["user", "bot", "error"]


class ToolCall(TypedDict, total=False):
    """
    A function call the agent executed, kept for display and audit.
    """
    name: str
    args: Dict[str, Any]
    response: Any


class Attachment(TypedDict, total=False):
    """
    A note attached to the user message. Only its path is sent to the model.
    """
    path: str
    name: str


class ChatMessage(TypedDict, total=False):
    """
    A message in the caller's conversation log.

    Senders:
    - "user": Message typed by the user
    - "bot": Agent response (optionally with the tool calls it made)
    - "error": Error surfaced in the chat; never sent back to a model
    """
    sender: Sender
    content: str
    tool_calls: List[ToolCall]


# Streaming callback: (text delta, reasoning delta, new tool calls)
UpdateCallback = Callable[[str, str, List[ToolCall]], None]


# =============================================================================
# Function Declarations
# =============================================================================

class FunctionDeclaration(TypedDict, total=False):
    """
    Provider-neutral function declaration.

    `parameters` uses Gemini schema type tags ("OBJECT", "STRING", ...).
    """
    name: str
    description: str
    parameters: Dict[str, Any]


class FunctionCall(TypedDict, total=False):
    """
    Canonical function call handed to the executor.
    """
    name: str
    args: Dict[str, Any]


# =============================================================================
# OpenAI-compatible wire format
# =============================================================================

class TextContent(TypedDict, total=False):
    type: Literal["text"]
    text: str


class ImageUrlDetail(TypedDict, total=False):
    url: str


class ImageContent(TypedDict, total=False):
    type: Literal["image_url"]
    image_url: ImageUrlDetail


ContentPart = Union[TextContent, ImageContent]


class FunctionPayload(TypedDict):
    name: str
    arguments: str  # JSON text


class WireToolCall(TypedDict):
    id: str
    type: Literal["function"]
    function: FunctionPayload


class SystemTurn(TypedDict):
    role: Literal["system"]
    content: str


class UserTurn(TypedDict):
    role: Literal["user"]
    content: Union[str, List[ContentPart]]


class AssistantTurn(TypedDict, total=False):
    role: Literal["assistant"]
    content: Optional[str]
    tool_calls: List[WireToolCall]


class ToolResultTurn(TypedDict):
    role: Literal["tool"]
    tool_call_id: str
    content: str


OpenAITurn = Union[SystemTurn, UserTurn, AssistantTurn, ToolResultTurn]
