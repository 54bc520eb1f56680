"""Concrete provider adapter implementations."""

from chatcost.core.providers.openai import OpenAIAdapter
from chatcost.core.providers.google import GoogleAdapter
from chatcost.core.providers.anthropic import AnthropicAdapter
from chatcost.core.providers.custom import CustomAdapter

__all__ = ["OpenAIAdapter", "GoogleAdapter", "AnthropicAdapter", "CustomAdapter"]
