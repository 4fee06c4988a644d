import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx
from openai import AsyncOpenAI

from .base import BaseAgentProvider, MAX_TURNS
from ..errors import AgentError, ProviderError, classify_openai_error
from ..functions import FunctionRegistry
from ..history import build_openai_history
from ..inputs import FileInput, format_user_message, prepare_openai_content
from ..schema import to_openai_tools
from ..settings import Settings
from ..types import (
    Attachment, AssistantTurn, ChatMessage, FunctionDeclaration, OpenAITurn,
    UpdateCallback, WireToolCall,
)

logger = logging.getLogger(__name__)

# Temperature sent when the user kept the default
DEFAULT_TEMPERATURE = 1.0


class OpenAICompatibleProvider(BaseAgentProvider):
    """
    Agent provider for OpenAI-compatible APIs (OpenRouter, local servers).

    The history is a single growing list of messages. Every tool call the
    model streams in a turn is executed before the model is called again.
    """

    def __init__(
        self,
        settings: Settings,
        registry: FunctionRegistry,
        system_prompt: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(settings, registry, system_prompt)
        self.base_url = settings.base_url
        self.client = AsyncOpenAI(api_key=settings.api_key, base_url=self.base_url)
        self.http_client = http_client

    @property
    def provider_name(self) -> str:
        return self.settings.provider

    def translate_tools(self, declarations: List[FunctionDeclaration]) -> List[Dict[str, Any]]:
        return to_openai_tools(declarations)

    def _sampling_options(self) -> Dict[str, Any]:
        temperature = self.settings.temperature_override()
        options: Dict[str, Any] = {
            "temperature": DEFAULT_TEMPERATURE if temperature is None else temperature,
        }
        max_tokens = self.settings.max_output_tokens_override()
        if max_tokens is not None:
            options["max_tokens"] = max_tokens
        return options

    async def run_agent(
        self,
        conversation: Sequence[ChatMessage],
        message: str,
        attachments: Sequence[Attachment],
        files: Sequence[FileInput],
        on_update: UpdateCallback,
    ) -> None:
        try:
            await self._run(conversation, message, attachments, files, on_update)
        except AgentError:
            raise
        except Exception as e:
            raise classify_openai_error(e) from e

    async def _run(
        self,
        conversation: Sequence[ChatMessage],
        message: str,
        attachments: Sequence[Attachment],
        files: Sequence[FileInput],
        on_update: UpdateCallback,
    ) -> None:
        tools = self.translate_tools(self.registry.declarations)

        messages: List[OpenAITurn] = [{"role": "system", "content": self.system_prompt}]
        messages.extend(build_openai_history(conversation, self.settings.max_history_turns))
        messages.append({
            "role": "user",
            "content": prepare_openai_content(format_user_message(message, attachments), files),
        })

        turn = 0
        while turn < MAX_TURNS:
            logger.debug("%s turn %d (%d messages)", self.provider_name, turn + 1, len(messages))
            request_kwargs: Dict[str, Any] = {
                "model": self.settings.model,
                "messages": list(messages),
                "stream": True,
                **self._sampling_options(),
            }
            if tools:
                request_kwargs["tools"] = tools

            stream = await self.client.chat.completions.create(**request_kwargs)
            content, tool_calls = await self._consume_stream(stream, on_update)

            if not tool_calls:
                return

            assistant: AssistantTurn = {
                "role": "assistant",
                "content": content or None,
                "tool_calls": tool_calls,
            }
            messages.append(assistant)

            for tc in tool_calls:
                name = tc["function"]["name"]
                args = parse_arguments(name, tc["function"]["arguments"])
                response = await self.registry.execute({"name": name, "args": args})
                on_update("", "", [{"name": name, "args": args, "response": response}])
                messages.append({
                    "role": "tool",
                    "tool_call_id": tc["id"],
                    "content": json.dumps(response, default=str),
                })

            turn += 1

        logger.debug("%s stopped after %d tool turns", self.provider_name, MAX_TURNS)

    @staticmethod
    async def _consume_stream(stream, on_update: UpdateCallback):
        """
        Read one streamed reply.

        Text and reasoning deltas go straight to `on_update`. Tool call
        fragments are merged by index until the stream ends.

        Returns:
            (full text, tool calls in index order)
        """
        content = ""
        fragments: Dict[int, WireToolCall] = {}

        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta

            reasoning = getattr(delta, "reasoning", None) or getattr(delta, "reasoning_content", None)
            if delta.content or reasoning:
                content += delta.content or ""
                on_update(delta.content or "", reasoning or "", [])

            for tc in delta.tool_calls or []:
                if tc.index is None:
                    continue
                entry = fragments.get(tc.index)
                if entry is None:
                    entry = {
                        "id": tc.id or f"call_{tc.index}",
                        "type": "function",
                        "function": {"name": "", "arguments": ""},
                    }
                    fragments[tc.index] = entry
                if tc.function and tc.function.name:
                    entry["function"]["name"] += tc.function.name
                if tc.function and tc.function.arguments:
                    entry["function"]["arguments"] += tc.function.arguments

        return content, [fragments[idx] for idx in sorted(fragments)]

    async def call_model(self, system: str, user: str, files: Sequence[FileInput]) -> str:
        messages = [
            {"role": "system", "content": system},
            {"role": "user", "content": prepare_openai_content(user, files)},
        ]
        try:
            if self.settings.provider == "local":
                return await self._post_completion(messages)
            completion = await self.client.chat.completions.create(
                model=self.settings.model,
                messages=messages,
                **self._sampling_options(),
            )
        except AgentError:
            raise
        except Exception as e:
            raise classify_openai_error(e) from e

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    async def _post_completion(self, messages: List[Dict[str, Any]]) -> str:
        """
        POST {base_url}/chat/completions directly with a Bearer token.

        Raises:
            ProviderError: If the server answers with a non-2xx status.
        """
        body = {"model": self.settings.model, "messages": messages, **self._sampling_options()}
        headers = {"Authorization": f"Bearer {self.settings.api_key}"}
        url = f"{self.base_url}/chat/completions"

        if self.http_client is not None:
            resp = await self.http_client.post(url, json=body, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=None) as http_client:
                resp = await http_client.post(url, json=body, headers=headers)

        if not resp.is_success:
            raise ProviderError(f"API Error: {resp.status_code} {resp.text}")

        data = resp.json()
        choices = data.get("choices") or []
        if not choices:
            return ""
        return (choices[0].get("message") or {}).get("content") or ""


def parse_arguments(name: str, arguments: str) -> Dict[str, Any]:
    """
    Parse streamed tool arguments.

    Bad JSON is logged and replaced by {} so the turn can go on.
    """
    if not arguments:
        return {}
    try:
        args = json.loads(arguments)
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse arguments for tool %r: %s", name, e)
        return {}
    return args if isinstance(args, dict) else {}
