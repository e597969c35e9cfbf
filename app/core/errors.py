"""
Application errors for clean API error handling.

Only failures that happen before the agent's answer is normalized are errors;
malformed agent output is turned into a fallback response instead.
"""


class ManifestoServiceError(Exception):
    """Base class for errors that abort a query turn."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(ManifestoServiceError):
    """Raised when the caller's input or chat_history is missing or has the wrong type."""


class RetrievalUnavailableError(ManifestoServiceError):
    """Raised when a manifesto search cannot reach its vector index or embedding API."""


class AgentInvocationFailedError(ManifestoServiceError):
    """Raised when the agent loop fails (model transport error, step budget or timeout exceeded)."""
