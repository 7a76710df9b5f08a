"""LLM vendor bindings.

Each binding turns the vendor-neutral ``CompletionRequest`` into its SDK's
request shape and the SDK's answer back into a ``CompletionResult``:

- Anthropic: system prompt as a separate field, tool calls are ``tool_use``
  content blocks, results go back as ``tool_result`` blocks in a user turn.
- OpenAI: system prompt is the first message, tool calls are
  ``message.tool_calls`` with JSON-string arguments, results go back as
  ``role="tool"`` messages.

SDK errors are re-raised as ``ProviderError``; nothing is retried.
"""

import json
import time
from abc import ABC, abstractmethod

import anthropic
import openai

from automation_console.app.config import (
    ANTHROPIC_API_KEY,
    ANTHROPIC_MODEL,
    LLM_TIMEOUT_SECONDS,
    OPENAI_API_KEY,
    OPENAI_MODEL,
)
from automation_console.app.errors import ProviderError
from automation_console.app.models.chat import (
    ChatMessage,
    CompletionRequest,
    CompletionResult,
    Provider,
    ToolCall,
    ToolCallTurn,
    ToolResultTurn,
)
from automation_console.app.services.logging_service import get_logger

logger = get_logger(__name__)

# Anthropic rejects an empty message list; an empty transcript opens with this
EMPTY_TRANSCRIPT_PROMPT = "(The owner opened the assistant without writing anything yet.)"


class LLMProvider(ABC):
    """Base class for all vendor bindings."""

    provider: Provider

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """Run one model call.

        Raises:
            ProviderError: the vendor call failed or the binding is not configured.
        """


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API binding."""

    provider = Provider.ANTHROPIC

    def __init__(
        self,
        api_key: str | None = None,
        model: str = ANTHROPIC_MODEL,
        timeout: float = LLM_TIMEOUT_SECONDS,
        client=None,
    ):
        self.api_key = ANTHROPIC_API_KEY if api_key is None else api_key
        self.model = model
        self.timeout = timeout
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ProviderError("Anthropic API key is not configured", provider=self.provider.value)
            self._client = anthropic.AsyncAnthropic(
                api_key=self.api_key, timeout=self.timeout, max_retries=0
            )
        return self._client

    @staticmethod
    def to_messages(request: CompletionRequest) -> list[dict]:
        messages: list[dict] = []
        for turn in request.conversation:
            if isinstance(turn, ChatMessage):
                messages.append({"role": turn.role.value, "content": turn.content})
            elif isinstance(turn, ToolCallTurn):
                content: list[dict] = []
                if turn.text:
                    content.append({"type": "text", "text": turn.text})
                for call in turn.calls:
                    content.append({
                        "type": "tool_use",
                        "id": call.id,
                        "name": call.name,
                        "input": call.input or {},
                    })
                messages.append({"role": "assistant", "content": content})
            elif isinstance(turn, ToolResultTurn):
                messages.append({
                    "role": "user",
                    "content": [
                        {
                            "type": "tool_result",
                            "tool_use_id": result.call_id,
                            "content": result.content,
                            "is_error": result.is_error,
                        }
                        for result in turn.results
                    ],
                })
        if not messages:
            messages.append({"role": "user", "content": EMPTY_TRANSCRIPT_PROMPT})
        return messages

    @staticmethod
    def to_tools(request: CompletionRequest) -> list[dict]:
        return [
            {"name": spec.name, "description": spec.description, "input_schema": spec.parameters}
            for spec in request.tools
        ]

    @staticmethod
    def from_response(response) -> CompletionResult:
        blocks = list(response.content or [])
        text = next((b.text for b in blocks if b.type == "text"), None)
        tool_calls = []
        if response.stop_reason == "tool_use":
            tool_calls = [
                ToolCall(
                    id=b.id,
                    name=b.name,
                    input=b.input if isinstance(b.input, dict) else None,
                )
                for b in blocks
                if b.type == "tool_use"
            ]
        return CompletionResult(text=text, tool_calls=tool_calls, stop_reason=response.stop_reason)

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        start_time = time.time()
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=request.max_tokens,
                system=request.system,
                tools=self.to_tools(request),
                messages=self.to_messages(request),
            )
        except anthropic.AnthropicError as e:
            logger.error(f"Anthropic request failed: {type(e).__name__}: {e}")
            raise ProviderError(f"Anthropic request failed: {type(e).__name__}", provider=self.provider.value) from e

        result = self.from_response(response)
        logger.info(
            f"Anthropic answered in {time.time() - start_time:.2f}s "
            f"(stop_reason={result.stop_reason}, tool_calls={len(result.tool_calls)})"
        )
        return result


class OpenAIProvider(LLMProvider):
    """OpenAI Chat Completions binding."""

    provider = Provider.OPENAI

    def __init__(
        self,
        api_key: str | None = None,
        model: str = OPENAI_MODEL,
        timeout: float = LLM_TIMEOUT_SECONDS,
        client=None,
    ):
        self.api_key = OPENAI_API_KEY if api_key is None else api_key
        self.model = model
        self.timeout = timeout
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ProviderError("OpenAI API key is not configured", provider=self.provider.value)
            self._client = openai.AsyncOpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    @staticmethod
    def to_messages(request: CompletionRequest) -> list[dict]:
        messages: list[dict] = [{"role": "system", "content": request.system}]
        for turn in request.conversation:
            if isinstance(turn, ChatMessage):
                messages.append({"role": turn.role.value, "content": turn.content})
            elif isinstance(turn, ToolCallTurn):
                messages.append({
                    "role": "assistant",
                    "content": turn.text,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {"name": call.name, "arguments": json.dumps(call.input or {})},
                        }
                        for call in turn.calls
                    ],
                })
            elif isinstance(turn, ToolResultTurn):
                messages.extend(
                    {"role": "tool", "tool_call_id": result.call_id, "content": result.content}
                    for result in turn.results
                )
        return messages

    @staticmethod
    def to_tools(request: CompletionRequest) -> list[dict]:
        return [
            {
                "type": "function",
                "function": {
                    "name": spec.name,
                    "description": spec.description,
                    "parameters": spec.parameters,
                },
            }
            for spec in request.tools
        ]

    @staticmethod
    def _parse_arguments(raw: str | None) -> dict | None:
        try:
            parsed = json.loads(raw or "{}")
        except json.JSONDecodeError:
            logger.warning(f"OpenAI sent unparseable tool arguments: {raw!r}")
            return None
        return parsed if isinstance(parsed, dict) else None

    @classmethod
    def from_response(cls, response) -> CompletionResult:
        choice = response.choices[0]
        message = choice.message
        tool_calls = []
        if choice.finish_reason == "tool_calls":
            tool_calls = [
                ToolCall(
                    id=tc.id,
                    name=tc.function.name,
                    input=cls._parse_arguments(tc.function.arguments),
                )
                for tc in message.tool_calls or []
            ]
        return CompletionResult(text=message.content, tool_calls=tool_calls, stop_reason=choice.finish_reason)

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        start_time = time.time()
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                max_tokens=request.max_tokens,
                tools=self.to_tools(request),
                messages=self.to_messages(request),
            )
        except openai.OpenAIError as e:
            logger.error(f"OpenAI request failed: {type(e).__name__}: {e}")
            raise ProviderError(f"OpenAI request failed: {type(e).__name__}", provider=self.provider.value) from e

        if not response.choices:
            raise ProviderError("OpenAI returned no choices", provider=self.provider.value)

        result = self.from_response(response)
        logger.info(
            f"OpenAI answered in {time.time() - start_time:.2f}s "
            f"(finish_reason={result.stop_reason}, tool_calls={len(result.tool_calls)})"
        )
        return result


def build_provider(provider: Provider) -> LLMProvider:
    """Binding for a vendor, configured from the environment."""
    if provider == Provider.OPENAI:
        return OpenAIProvider()
    return AnthropicProvider()
