"""Exception hierarchy shared by services and routers.

Every ``ConsoleError`` carries the HTTP status the API layer should answer
with; ``main.py`` renders them into the ``{success: false, error}`` envelope.
"""


class ConsoleError(Exception):
    """Base class for errors surfaced through the HTTP API."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(ConsoleError):
    """Malformed input, rejected before any outbound call."""

    status_code = 400


class NotConfiguredError(ConsoleError):
    """A feature was used without the credentials it needs."""


class WorkflowEngineError(ConsoleError):
    """The workflow engine was unreachable or answered with an error."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class SheetsError(ConsoleError):
    """Reading a spreadsheet failed."""


class ReportError(ConsoleError):
    """Fetching the insights report document failed."""


class ProviderError(ConsoleError):
    """The selected LLM vendor failed to produce a completion."""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider


class OrchestrationError(ConsoleError):
    """The chat loop could not reach a final reply."""


class ToolInputError(Exception):
    """A tool call's input did not match the tool's schema.

    Never reaches the HTTP layer: the chat loop turns it into a tool result.
    """
