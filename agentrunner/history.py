"""
History builders.

Both builders turn the caller's conversation log into the message format a
provider expects. They keep the last `2 * max_history_turns` messages, drop
error messages, and never modify the conversation they are given.
"""

import json
from typing import List, Sequence

from google.genai import types

from .types import AssistantTurn, ChatMessage, OpenAITurn, WireToolCall


def select_messages(conversation: Sequence[ChatMessage], max_history_turns: int) -> List[ChatMessage]:
    """
    Pick the messages that are sent back as context.

    One turn is a user message plus the reply, so the window is
    `2 * max_history_turns` messages. Error messages are dropped after the
    window is applied.
    """
    if max_history_turns <= 0:
        return []
    window = list(conversation)[-max_history_turns * 2:]
    return [msg for msg in window if msg.get("sender") != "error"]


def build_openai_history(conversation: Sequence[ChatMessage], max_history_turns: int) -> List[OpenAITurn]:
    """
    Flatten the conversation into OpenAI chat messages.

    Tool call ids are not stored on messages, so recorded calls get the
    synthetic ids `call_<index>`: one assistant message carrying all calls,
    followed by one tool message per call, in recorded order.

    Args:
        conversation: Caller's conversation log.
        max_history_turns: Number of turns to keep (0 sends no history).

    Returns:
        List of role-tagged messages, oldest first.
    """
    history: List[OpenAITurn] = []

    for msg in select_messages(conversation, max_history_turns):
        sender = msg.get("sender")
        content = msg.get("content", "")

        if sender == "user":
            history.append({"role": "user", "content": content})
            continue

        tool_calls = msg.get("tool_calls") or []
        if not tool_calls:
            history.append({"role": "assistant", "content": content})
            continue

        wire_calls: List[WireToolCall] = [
            {
                "id": f"call_{idx}",
                "type": "function",
                "function": {
                    "name": tc["name"],
                    "arguments": json.dumps(tc.get("args") or {}, default=str),
                },
            }
            for idx, tc in enumerate(tool_calls)
        ]
        assistant: AssistantTurn = {
            "role": "assistant",
            "content": content or None,
            "tool_calls": wire_calls,
        }
        history.append(assistant)

        for idx, tc in enumerate(tool_calls):
            history.append({
                "role": "tool",
                "tool_call_id": f"call_{idx}",
                "content": json.dumps(tc.get("response"), default=str),
            })

    return history


def build_gemini_history(conversation: Sequence[ChatMessage], max_history_turns: int) -> List[types.Content]:
    """
    Convert the conversation into Gemini `Content` turns.

    An agent reply with recorded tool calls becomes a model turn with the
    function calls, a user turn with their responses, and a model turn with
    the reply text (when there is any).
    """
    history: List[types.Content] = []

    for msg in select_messages(conversation, max_history_turns):
        content = msg.get("content", "")

        if msg.get("sender") == "user":
            history.append(types.Content(role="user", parts=[types.Part.from_text(text=content)]))
            continue

        tool_calls = msg.get("tool_calls") or []
        if tool_calls:
            history.append(types.Content(
                role="model",
                parts=[
                    types.Part.from_function_call(name=tc["name"], args=tc.get("args") or {})
                    for tc in tool_calls
                ],
            ))
            history.append(types.Content(
                role="user",
                parts=[
                    types.Part.from_function_response(name=tc["name"], response=_as_mapping(tc.get("response")))
                    for tc in tool_calls
                ],
            ))

        if content:
            history.append(types.Content(role="model", parts=[types.Part.from_text(text=content)]))

    return history


def _as_mapping(response):
    # Gemini function responses must be objects
    return response if isinstance(response, dict) else {"result": response}
