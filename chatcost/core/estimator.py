"""Token estimation for chat text.

Providers that do not report usage get their reply counted here. The default is a
fast heuristic (~4 characters or ~3/4 of a word per token); tiktoken is optional.
"""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
TOKENS_PER_WORD = 4 / 3
MESSAGE_OVERHEAD_TOKENS = 4


def estimate_tokens(text: str) -> int:
    """Estimate tokens for text with the character/word density heuristic.

    Args:
        text: Input text

    Returns:
        Non-negative token count; 0 for empty text, at least 1 otherwise
    """
    if not text:
        return 0
    by_chars = len(text) / CHARS_PER_TOKEN
    by_words = len(text.split()) * TOKENS_PER_WORD
    return max(1, round((by_chars + by_words) / 2))


class TokenEstimator:
    """Estimates token counts for text inputs."""

    def __init__(self, estimation_mode: str = "heuristic"):
        """Initialize the token estimator.

        Args:
            estimation_mode: Estimation mode - "heuristic" or "tiktoken"
        """
        self.estimation_mode = estimation_mode
        self._encoders = {}  # Cache for tiktoken encoders

    def estimate_tokens(self, text: str, model: Optional[str] = None) -> int:
        """Estimate token count for text.

        Args:
            text: Input text to estimate
            model: Model name (only used to pick a tiktoken encoding)

        Returns:
            Estimated token count
        """
        if not text:
            return 0

        if self.estimation_mode == "tiktoken":
            try:
                return max(1, self._estimate_with_tiktoken(text, model))
            except Exception as e:
                logger.warning(
                    f"Tiktoken estimation failed for model {model}: {e}. "
                    "Falling back to heuristic."
                )
        return estimate_tokens(text)

    def estimate_from_messages(
        self,
        messages: List[Dict[str, Any]],
        model: Optional[str] = None,
    ) -> int:
        """Estimate token count for chat messages.

        Args:
            messages: List of message dicts with 'role' and 'content'
            model: Model name

        Returns:
            Estimated token count including per-message formatting overhead
        """
        total_tokens = 0
        for message in messages:
            content = message.get("content", "")
            if isinstance(content, str):
                total_tokens += self.estimate_tokens(content, model)
            total_tokens += MESSAGE_OVERHEAD_TOKENS
        return total_tokens

    def batch_estimate(self, texts: List[str], model: Optional[str] = None) -> List[int]:
        """Estimate tokens for multiple texts."""
        return [self.estimate_tokens(text, model) for text in texts]

    def _estimate_with_tiktoken(self, text: str, model: Optional[str]) -> int:
        import tiktoken

        key = model or "cl100k_base"
        if key not in self._encoders:
            try:
                self._encoders[key] = tiktoken.encoding_for_model(model or "")
            except KeyError:
                logger.info(
                    f"Model {model} not recognized by tiktoken, "
                    "using cl100k_base encoding"
                )
                self._encoders[key] = tiktoken.get_encoding("cl100k_base")

        return len(self._encoders[key].encode(text))
