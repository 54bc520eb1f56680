"""Error kinds raised by the chat core."""

from typing import Any, Optional


class ChatCostError(Exception):
    """Base class for all chat core errors."""


class ConfigurationError(ChatCostError):
    """Raised when the session is missing something required to send (e.g. the API key)."""


class ProviderError(ChatCostError):
    """Non-success HTTP status or transport failure from a provider."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Any = None,
    ):
        self.status_code = status_code  # None for transport failures
        self.payload = payload
        super().__init__(message)


class ValidationError(ChatCostError):
    """Prompt input violates a constraint, or the System Prompt was asked to be deleted."""


class NotFoundError(ChatCostError):
    """An operation referenced an unknown prompt id."""

    def __init__(self, prompt_id: str):
        self.prompt_id = prompt_id
        super().__init__(f"Prompt not found: {prompt_id}")
