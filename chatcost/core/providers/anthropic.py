"""Anthropic Messages API adapter."""

from typing import Any, Dict, List

from chatcost.core.provider import (
    BaseAdapter,
    Message,
    ProviderIdentity,
    ProviderRequest,
    extract_path,
    split_system,
)

ANTHROPIC_VERSION = "2023-06-01"
# The Messages API requires max_tokens on every request.
DEFAULT_MAX_TOKENS = 1024


class AnthropicAdapter(BaseAdapter):
    """POST {base}/v1/messages with x-api-key and anthropic-version headers."""

    identity = ProviderIdentity.ANTHROPIC

    def __init__(self, *args: Any, max_tokens: int = DEFAULT_MAX_TOKENS, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._max_tokens = max_tokens

    def _build_request(
        self,
        messages: List[Message],
        credential: str,
        model: str,
        base_url: str,
    ) -> ProviderRequest:
        system, rest = split_system(messages)
        body: Dict[str, Any] = {
            "model": model,
            "messages": [m.to_dict() for m in rest],
        }
        if system:
            body["system"] = system
        body["max_tokens"] = self._max_tokens
        body["temperature"] = self._temperature

        return ProviderRequest(
            url=f"{base_url}/v1/messages",
            headers={
                "Content-Type": "application/json",
                "x-api-key": credential,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            body=body,
        )

    def extract_content(self, raw: Any) -> str:
        # Usage is not read here; reply tokens are always estimated for this API.
        return extract_path(raw, "content", 0, "text") or ""
