"""Factory for provider adapters. Callers dispatch on ProviderIdentity, never on URLs."""

from typing import Any, Dict, Optional, Type, Union

from chatcost.core.estimator import TokenEstimator
from chatcost.core.provider import BaseAdapter, ParsedResponse, ProviderIdentity
from chatcost.core.providers import (
    AnthropicAdapter,
    CustomAdapter,
    GoogleAdapter,
    OpenAIAdapter,
)

ADAPTERS: Dict[ProviderIdentity, Type[BaseAdapter]] = {
    ProviderIdentity.OPENAI: OpenAIAdapter,
    ProviderIdentity.GOOGLE: GoogleAdapter,
    ProviderIdentity.ANTHROPIC: AnthropicAdapter,
    ProviderIdentity.CUSTOM: CustomAdapter,
}


def create(
    provider: Union[ProviderIdentity, str],
    token_estimator: Optional[TokenEstimator] = None,
    **kwargs: Any,
) -> BaseAdapter:
    """Create the adapter for a provider identity.

    Args:
        provider: ProviderIdentity or its value, e.g. "google"
        token_estimator: Estimator for providers that omit usage
        **kwargs: Passed to the adapter constructor (e.g. temperature)

    Returns:
        BaseAdapter implementation

    Raises:
        ValueError: If the provider is not supported
    """
    try:
        identity = ProviderIdentity(provider.lower().strip() if isinstance(provider, str) else provider)
    except ValueError:
        supported = ", ".join(p.value for p in ProviderIdentity)
        raise ValueError(f"Unknown provider: {provider}. Supported: {supported}") from None
    return ADAPTERS[identity](token_estimator=token_estimator, **kwargs)


def parse_response(
    provider: Union[ProviderIdentity, str],
    raw: Any,
    token_estimator: Optional[TokenEstimator] = None,
) -> ParsedResponse:
    """Parse a decoded response body for the given provider."""
    return create(provider, token_estimator=token_estimator).parse_response(raw)
