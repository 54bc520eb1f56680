"""ChatCost - multi-provider LLM chat with token and cost accounting."""

__version__ = "0.1.0"

from chatcost.core.estimator import TokenEstimator, estimate_tokens
from chatcost.core.pricing import PricingEntry, PricingTable
from chatcost.core.calculator import CostBreakdown, CostCalculator, UsageTotals
from chatcost.core.errors import (
    ChatCostError,
    ConfigurationError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from chatcost.core.provider import (
    BaseAdapter,
    Message,
    ParsedResponse,
    ProviderIdentity,
    ProviderRequest,
    Role,
)
from chatcost.core.providers import (
    AnthropicAdapter,
    CustomAdapter,
    GoogleAdapter,
    OpenAIAdapter,
)
from chatcost.core.executor import ProviderExecutor
from chatcost.core.session import ProviderSettings, SessionConfig
from chatcost.core.templates import Prompt, TemplateEngine
from chatcost.core.conversation import Conversation, ConversationEntry
from chatcost.config.settings import Settings

__all__ = [
    "TokenEstimator",
    "estimate_tokens",
    "PricingEntry",
    "PricingTable",
    "CostBreakdown",
    "CostCalculator",
    "UsageTotals",
    "ChatCostError",
    "ConfigurationError",
    "NotFoundError",
    "ProviderError",
    "ValidationError",
    "BaseAdapter",
    "Message",
    "ParsedResponse",
    "ProviderIdentity",
    "ProviderRequest",
    "Role",
    "AnthropicAdapter",
    "CustomAdapter",
    "GoogleAdapter",
    "OpenAIAdapter",
    "ProviderExecutor",
    "ProviderSettings",
    "SessionConfig",
    "Prompt",
    "TemplateEngine",
    "Conversation",
    "ConversationEntry",
    "Settings",
]
