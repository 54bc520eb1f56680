"""Provider adapter abstraction.

Each supported LLM API family gets one adapter that translates a canonical
conversation into its wire request and parses its response back into a canonical
result. The conversation layer depends on BaseAdapter only.
Implementations live under chatcost.core.providers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

from chatcost.core.errors import ConfigurationError
from chatcost.core.estimator import TokenEstimator

if TYPE_CHECKING:
    from chatcost.core.session import SessionConfig


# Sampling temperature sent with every request.
DEFAULT_TEMPERATURE = 0.7


class ProviderIdentity(str, Enum):
    """API family a request targets."""

    OPENAI = "openai"
    GOOGLE = "google"
    ANTHROPIC = "anthropic"
    CUSTOM = "custom"


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """Canonical provider-independent chat message."""

    role: Role
    content: str

    def __post_init__(self):
        # Accept plain strings ("user") as well as Role members.
        object.__setattr__(self, "role", Role(self.role))

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class ProviderRequest:
    """Everything needed for the outbound HTTP call."""

    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ParsedResponse:
    """Canonical result of a provider reply."""

    content: str
    tokens: int


def extract_path(data: Any, *path: Any) -> Any:
    """Walk nested dicts/lists, returning None as soon as a level is missing or mistyped."""
    current = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list) or len(current) <= key:
                return None
        elif not isinstance(current, dict) or key not in current:
            return None
        current = current[key]
    return current


def split_system(messages: Sequence[Message]):
    """Return (system content or None, non-system messages in order)."""
    system = next((m.content for m in messages if m.role is Role.SYSTEM), None)
    rest = [m for m in messages if m.role is not Role.SYSTEM]
    return system, rest


class BaseAdapter(ABC):
    """Abstract base for provider adapters. Implement this to add a new API family."""

    identity: ProviderIdentity

    def __init__(
        self,
        token_estimator: Optional[TokenEstimator] = None,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        """Initialize the adapter.

        Args:
            token_estimator: Used when the provider does not report usage (heuristic if None)
            temperature: Sampling temperature placed in the request body
        """
        self._estimator = token_estimator or TokenEstimator()
        self._temperature = temperature

    def build_request(
        self,
        messages: Sequence[Message],
        config: "SessionConfig",
    ) -> ProviderRequest:
        """Translate a conversation into this provider's request.

        Args:
            messages: Ordered canonical messages (not modified)
            config: Session configuration supplying credential, model and base URL

        Returns:
            ProviderRequest with endpoint URL, headers and JSON body

        Raises:
            ConfigurationError: If the credential is empty
        """
        if not config.credential:
            raise ConfigurationError(
                f"API key is not configured for provider '{self.identity.value}'"
            )
        return self._build_request(
            list(messages),
            credential=config.credential,
            model=config.model,
            base_url=config.base_url.rstrip("/"),
        )

    @abstractmethod
    def _build_request(
        self,
        messages: List[Message],
        credential: str,
        model: str,
        base_url: str,
    ) -> ProviderRequest:
        """Provider-specific request shape. The credential is known to be non-empty."""
        pass

    @abstractmethod
    def extract_content(self, raw: Any) -> str:
        """Pull the reply text out of a decoded response body, "" when absent."""
        pass

    def extract_usage(self, raw: Any) -> Optional[int]:
        """Provider-reported completion tokens, or None when the provider reports none."""
        return None

    def parse_response(self, raw: Any) -> ParsedResponse:
        """Parse a decoded response body. Never raises for malformed bodies."""
        content = self.extract_content(raw)
        if not isinstance(content, str):
            content = ""
        tokens = self.extract_usage(raw)
        if tokens is None:
            tokens = self._estimator.estimate_tokens(content)
        return ParsedResponse(content=content, tokens=tokens)
