"""Assistant chat loop.

One ``converse`` call answers one owner message: the model is asked for a
reply, any tools it requests are run against the workflow engine and their
results fed back, until the model answers in plain text or the round limit
is reached.
"""

import re

from automation_console.app.config import CHAT_MAX_TOKENS, MAX_TOOL_ROUNDS
from automation_console.app.errors import OrchestrationError
from automation_console.app.models.chat import (
    ChatMessage,
    CompletionRequest,
    ConversationTurn,
    Provider,
    ToolCallTurn,
    ToolResultTurn,
)
from automation_console.app.services.llm_providers import LLMProvider, build_provider
from automation_console.app.services.logging_service import get_logger
from automation_console.app.services.tool_service import TOOL_SPECS, ToolExecutor
from automation_console.app.services.workflow_client import WorkflowRegistryClient, workflow_client
from automation_console.app.workflow_config import WorkflowRegistry

logger = get_logger(__name__)

FALLBACK_REPLY = "Sorry, I couldn't generate a response."

FORBIDDEN_WORDS = ("node", "webhook", "API", "JSON", "trigger", "instance", "execute", "payload", "schema")

# Longer forms first so "executed" is not caught as "execute" + "d"
PLAIN_REPLACEMENTS: list[tuple[str, str]] = [
    (r"for instance", "for example"),
    (r"nodes", "steps"),
    (r"node", "step"),
    (r"webhooks", "connections"),
    (r"webhook", "connection"),
    (r"apis", "connections"),
    (r"api", "connection"),
    (r"json", "data"),
    (r"triggered", "started"),
    (r"triggering", "starting"),
    (r"triggers", "starts"),
    (r"trigger", "start"),
    (r"instances", "copies"),
    (r"instance", "copy"),
    (r"executions", "runs"),
    (r"execution", "run"),
    (r"executed", "ran"),
    (r"executing", "running"),
    (r"executes", "runs"),
    (r"execute", "run"),
    (r"payloads", "data"),
    (r"payload", "data"),
    (r"schemas", "layouts"),
    (r"schema", "layout"),
]

_PLAIN_PATTERNS = [
    (re.compile(rf"\b{word}\b", re.IGNORECASE), replacement)
    for word, replacement in PLAIN_REPLACEMENTS
]

SYSTEM_PROMPT_TEMPLATE = """You are an AI automation assistant built into the business dashboard. You help the business owner understand and control their {count} automated workflows.

The {count} workflows you manage:
{workflows}

HARD RESTRICTIONS - never break these:
1. You cannot create brand-new automations - only manage or edit the existing {count}.
2. For ANY edit to a workflow, you MUST use create_safe_copy - never edit the original directly. This keeps the original as a backup so changes can be undone.
3. If asked to undo a change, use restore_original.
4. If a workflow was already edited, its copy is the version that is turned on: pass that copy's ID as the original for the next edit, and restore to the version it replaced.

HOW TO COMMUNICATE - very important:
- Write as if talking to someone who has never used automation tools
- Never use these words: {forbidden}
- Instead use: "step" (not node), "connection" (not webhook), "ran" (not executed/triggered), "turned on/off" (not active/inactive)
- Keep responses to 2-4 sentences. Be direct and friendly.
- When you make a change, confirm it in plain English (e.g. "Done, the Blog Creator is now turned off.")
- When something fails, explain it simply without technical details"""


def render_system_prompt(registry: WorkflowRegistry) -> str:
    workflows = "\n".join(
        f"- {meta.name} (ID: {workflow_id}): {meta.description}"
        for workflow_id, meta in registry.items()
    )
    return SYSTEM_PROMPT_TEMPLATE.format(
        count=len(registry),
        workflows=workflows,
        forbidden=", ".join(FORBIDDEN_WORDS),
    )


def _match_case(original: str, replacement: str) -> str:
    # Acronyms (API, JSON) read as ordinary words once replaced
    if len(original) > 1 and original.isupper():
        return replacement
    if original[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


def to_plain_language(text: str) -> str:
    """Rewrite technical vocabulary the owner should never see."""
    for pattern, replacement in _PLAIN_PATTERNS:
        text = pattern.sub(lambda m, r=replacement: _match_case(m.group(0), r), text)
    return text


class ChatService:
    """Drives one assistant reply across model calls and tool rounds."""

    def __init__(
        self,
        client: WorkflowRegistryClient | None = None,
        provider_factory=build_provider,
        max_rounds: int = MAX_TOOL_ROUNDS,
        max_tokens: int = CHAT_MAX_TOKENS,
    ):
        self.client = client or workflow_client
        self.executor = ToolExecutor(self.client)
        self.provider_factory = provider_factory
        self.max_rounds = max_rounds
        self.max_tokens = max_tokens

    def system_prompt(self) -> str:
        return render_system_prompt(self.client.registry)

    async def converse(self, transcript: list[ChatMessage], provider: Provider = Provider.ANTHROPIC) -> str:
        """Produce the assistant's next reply for ``transcript``.

        Raises:
            ProviderError: the vendor call failed.
            OrchestrationError: the model kept asking for tools past ``max_rounds``.
        """
        llm: LLMProvider = self.provider_factory(provider)
        conversation: list[ConversationTurn] = list(transcript)
        system = self.system_prompt()
        logger.info(f"Chat turn with {provider.value} ({len(transcript)} messages)")

        rounds = 0
        while True:
            result = await llm.complete(
                CompletionRequest(
                    conversation=conversation,
                    system=system,
                    tools=TOOL_SPECS,
                    max_tokens=self.max_tokens,
                )
            )
            if not result.wants_tools:
                reply = (result.text or "").strip()
                if not reply:
                    logger.warning(f"{provider.value} returned an empty reply")
                    return FALLBACK_REPLY
                return to_plain_language(reply)

            if rounds >= self.max_rounds:
                raise OrchestrationError(
                    f"The assistant needed more than {self.max_rounds} tool rounds to answer"
                )
            rounds += 1

            names = ", ".join(call.name for call in result.tool_calls)
            logger.info(f"Tool round {rounds}: {names}")
            results = await self.executor.execute_all(result.tool_calls)
            conversation.append(ToolCallTurn(text=result.text, calls=result.tool_calls))
            conversation.append(ToolResultTurn(results=results))


# Global service instance
chat_service = ChatService()
