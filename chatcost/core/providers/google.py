"""Google generative-language (Gemini) adapter.

Auth travels in the ``key`` query parameter, not a header. The system message
becomes ``systemInstruction`` and assistant turns use the ``model`` role.
"""

from typing import Any, Dict, List

from chatcost.core.provider import (
    BaseAdapter,
    Message,
    ProviderIdentity,
    ProviderRequest,
    Role,
    extract_path,
    split_system,
)

MODEL_NAMESPACE = "models/"
ASSISTANT_ROLE = "model"
# Sent when nothing but a system message is left; the API rejects empty contents.
EMPTY_CONVERSATION_TEXT = "Hello"


def _model_path(model: str) -> str:
    return model if "/" in model else f"{MODEL_NAMESPACE}{model}"


def _content_block(message: Message) -> Dict[str, Any]:
    return {
        "role": "user" if message.role is Role.USER else ASSISTANT_ROLE,
        "parts": [{"text": message.content}],
    }


class GoogleAdapter(BaseAdapter):
    """POST {base}/models/{model}:generateContent?key={credential}."""

    identity = ProviderIdentity.GOOGLE

    def _build_request(
        self,
        messages: List[Message],
        credential: str,
        model: str,
        base_url: str,
    ) -> ProviderRequest:
        system, rest = split_system(messages)
        contents = [_content_block(m) for m in rest]
        if not contents:
            contents = [{"parts": [{"text": EMPTY_CONVERSATION_TEXT}]}]

        body: Dict[str, Any] = {"contents": contents}
        if system:
            body["systemInstruction"] = {"parts": [{"text": system}]}
        body["generationConfig"] = {"temperature": self._temperature}

        return ProviderRequest(
            url=f"{base_url}/{_model_path(model)}:generateContent?key={credential}",
            headers={"Content-Type": "application/json"},
            body=body,
        )

    def extract_content(self, raw: Any) -> str:
        return extract_path(raw, "candidates", 0, "content", "parts", 0, "text") or ""
