"""Custom endpoint adapter (OpenAI-compatible servers)."""

from chatcost.core.provider import ProviderIdentity
from chatcost.core.providers.openai import OpenAIAdapter


class CustomAdapter(OpenAIAdapter):
    """OpenAI request/response shape against a user-supplied base URL.

    The model identifier is passed through unchanged; no defaulting applies.
    """

    identity = ProviderIdentity.CUSTOM
