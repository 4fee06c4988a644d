import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from google import genai
from google.genai import types

from .base import BaseAgentProvider, MAX_TURNS
from ..errors import AgentError, AuthError, DepthExceededError, classify_gemini_error
from ..functions import FunctionRegistry
from ..history import build_gemini_history
from ..inputs import FileInput, format_user_message, prepare_gemini_parts
from ..settings import Settings
from ..types import Attachment, ChatMessage, FunctionDeclaration, UpdateCallback

logger = logging.getLogger(__name__)

SAFETY_SETTINGS = [
    types.SafetySetting(category=category, threshold=types.HarmBlockThreshold.BLOCK_NONE)
    for category in (
        types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        types.HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT,
        types.HarmCategory.HARM_CATEGORY_CIVIC_INTEGRITY,
        types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        types.HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT,
    )
]

# A function call picked from a turn, with the model content that carried it
PendingCall = Tuple[types.FunctionCall, types.Content]


def dedup_key(name: str, args: Optional[Dict[str, Any]]) -> str:
    """Identity of a function call (Gemini calls carry no id)."""
    return name + json.dumps(args or {}, sort_keys=True, default=str)


class GeminiAgentProvider(BaseAgentProvider):
    """
    Agent provider for the Google Gemini API (google-genai SDK).

    Each turn opens a new chat seeded with the history so far, streams the
    reply and executes at most one function call. The call and its response
    are appended to the history and the next turn starts from there.
    """

    def __init__(self, settings: Settings, registry: FunctionRegistry, system_prompt: str):
        super().__init__(settings, registry, system_prompt)
        if settings.google_api_key:
            self.client = genai.Client(
                api_key=settings.google_api_key,
                http_options=types.HttpOptions(api_version="v1beta"),
            )
        else:
            self.client = None

    def _require_client(self):
        if self.client is None:
            raise AuthError("API key not set, or isn't valid.")
        return self.client

    def translate_tools(self, declarations: List[FunctionDeclaration]) -> List[types.Tool]:
        if not declarations:
            return []
        return [types.Tool(function_declarations=[
            types.FunctionDeclaration(
                name=decl["name"],
                description=decl.get("description", ""),
                parameters=decl.get("parameters"),
            )
            for decl in declarations
        ])]

    def build_config(self, system_instruction: str, with_tools: bool) -> types.GenerateContentConfig:
        """
        Generation config from the settings snapshot.

        Temperature, output limit and thinking level are only set when the
        user changed them from their defaults.
        """
        thinking_config = types.ThinkingConfig(include_thoughts=True)
        thinking_level = self.settings.thinking_level_override()
        if thinking_level:
            thinking_config.thinking_level = types.ThinkingLevel[thinking_level]

        config_kwargs: Dict[str, Any] = {
            "system_instruction": system_instruction,
            "safety_settings": SAFETY_SETTINGS,
            "thinking_config": thinking_config,
        }
        if with_tools:
            tools = self.translate_tools(self.registry.declarations)
            if tools:
                config_kwargs["tools"] = tools

        temperature = self.settings.temperature_override()
        if temperature is not None:
            config_kwargs["temperature"] = temperature
        max_output_tokens = self.settings.max_output_tokens_override()
        if max_output_tokens is not None:
            config_kwargs["max_output_tokens"] = max_output_tokens

        return types.GenerateContentConfig(**config_kwargs)

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
            raise classify_gemini_error(e) from e

    async def _run(
        self,
        conversation: Sequence[ChatMessage],
        message: str,
        attachments: Sequence[Attachment],
        files: Sequence[FileInput],
        on_update: UpdateCallback,
    ) -> None:
        client = self._require_client()
        config = self.build_config(self.system_prompt, with_tools=True)

        history: List[types.Content] = []
        if conversation:
            history = build_gemini_history(conversation, self.settings.max_history_turns)

        parts = prepare_gemini_parts(format_user_message(message, attachments), files)
        executed: Set[str] = set()
        turn = 1

        while True:
            if turn > MAX_TURNS:
                raise DepthExceededError(
                    "Maximum tool execution depth reached. "
                    "This maximum number of turns is set to avoid infinite loops."
                )

            logger.debug("Gemini turn %d (%d history entries)", turn, len(history))
            chat = client.aio.chats.create(model=self.settings.model, config=config, history=history)
            pending = await self._stream_turn(chat, parts, on_update, executed)
            if pending is None:
                return

            call, model_content = pending
            args = dict(call.args or {})
            response = await self.registry.execute({"name": call.name, "args": args})
            on_update("", "", [{"name": call.name, "args": args, "response": response}])

            history = [*history, types.Content(role="user", parts=parts), model_content]
            parts = [types.Part.from_function_response(name=call.name, response=response)]
            turn += 1

    async def _stream_turn(
        self,
        chat,
        parts: List[types.Part],
        on_update: UpdateCallback,
        executed: Set[str],
    ) -> Optional[PendingCall]:
        """
        Stream one model reply.

        Forwards text and thoughts chunk by chunk and returns the first new
        function call seen in the reply, if any. Other calls in the same
        reply are ignored.
        """
        pending: Optional[PendingCall] = None

        async for chunk in await chat.send_message_stream(message=parts):
            candidates = chunk.candidates or []

            thoughts = []
            texts = []
            for idx, cand in enumerate(candidates):
                for part in _parts_of(cand):
                    if part.thought:
                        if part.text:
                            thoughts.append(part.text)
                    elif part.text and idx == 0:
                        texts.append(part.text)

            on_update("".join(texts), "\n".join(thoughts), [])

            if pending is None and candidates:
                pending = self._pick_call(candidates[0], executed)

        return pending

    @staticmethod
    def _pick_call(cand: types.Candidate, executed: Set[str]) -> Optional[PendingCall]:
        calls = [part.function_call for part in _parts_of(cand) if part.function_call]
        if not calls or not calls[0].name:
            return None

        call = calls[0]
        if len(calls) > 1:
            logger.debug("Ignoring %d extra function calls in this turn", len(calls) - 1)

        key = dedup_key(call.name, call.args)
        if key in executed:
            logger.debug("Skipping repeated call to %s", call.name)
            return None
        executed.add(key)
        return call, cand.content

    async def call_model(self, system: str, user: str, files: Sequence[FileInput]) -> str:
        try:
            client = self._require_client()
            response = await client.aio.models.generate_content(
                model=self.settings.model,
                contents=prepare_gemini_parts(user, files),
                config=self.build_config(system, with_tools=False),
            )
        except AgentError:
            raise
        except Exception as e:
            raise classify_gemini_error(e) from e

        return response.text or ""


def _parts_of(cand: types.Candidate) -> List[types.Part]:
    if cand.content and cand.content.parts:
        return list(cand.content.parts)
    return []
