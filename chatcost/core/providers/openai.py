"""OpenAI-style chat completions adapter."""

from typing import Any, List, Optional

from chatcost.core.provider import (
    BaseAdapter,
    Message,
    ProviderIdentity,
    ProviderRequest,
    extract_path,
)


class OpenAIAdapter(BaseAdapter):
    """Bearer-authenticated POST {base}/chat/completions with the message list verbatim."""

    identity = ProviderIdentity.OPENAI

    def _build_request(
        self,
        messages: List[Message],
        credential: str,
        model: str,
        base_url: str,
    ) -> ProviderRequest:
        return ProviderRequest(
            url=f"{base_url}/chat/completions",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {credential}",
            },
            body={
                "model": model,
                "messages": [m.to_dict() for m in messages],
                "temperature": self._temperature,
            },
        )

    def extract_content(self, raw: Any) -> str:
        return extract_path(raw, "choices", 0, "message", "content") or ""

    def extract_usage(self, raw: Any) -> Optional[int]:
        tokens = extract_path(raw, "usage", "completion_tokens")
        if isinstance(tokens, int) and not isinstance(tokens, bool) and tokens >= 0:
            return tokens
        return None
