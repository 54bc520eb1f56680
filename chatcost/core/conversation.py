"""Conversation accumulator: one send cycle plus running usage and cost.

A send appends the user entry, calls the provider through the session's adapter,
appends the reply (or a synthetic error entry) and folds both token counts into
the running totals. Cost is accumulated per exchange at the pricing of the model
active for that exchange, so later model switches never re-price earlier turns.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple, TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from chatcost.core.calculator import CostBreakdown, CostCalculator, UsageTotals
from chatcost.core.errors import ChatCostError, ValidationError
from chatcost.core.estimator import TokenEstimator
from chatcost.core.executor import ProviderExecutor
from chatcost.core.pricing import PricingEntry
from chatcost.core.provider import Message, Role
from chatcost.core.session import SessionConfig
from chatcost.core.templates import Prompt, TemplateEngine

if TYPE_CHECKING:
    from chatcost.storage.tracker import ExchangeTracker

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ConversationEntry:
    """One visible turn. Never mutated after creation."""

    role: Role
    content: str
    timestamp: datetime = field(default_factory=_utcnow)
    tokens: Optional[int] = None
    is_error: bool = False

    def to_message(self) -> Message:
        return Message(role=self.role, content=self.content)


def error_description(error: Exception) -> str:
    """Human-readable text for a synthetic error entry."""
    return (
        "Error: Failed to get response from the API. "
        "Please check your API key and configuration.\n\n"
        f"Details: {error}"
    )


class Conversation:
    """Append-only conversation bound to one session. One send at a time."""

    def __init__(
        self,
        session: SessionConfig,
        templates: Optional[TemplateEngine] = None,
        executor: Optional[ProviderExecutor] = None,
        calculator: Optional[CostCalculator] = None,
        token_estimator: Optional[TokenEstimator] = None,
        tracker: Optional["ExchangeTracker"] = None,
    ):
        """Initialize the conversation.

        Args:
            session: Live session configuration (provider, credential, model, base URL)
            templates: Prompt library supplying the System Prompt
            executor: Performs the HTTP exchange (default executor if None)
            calculator: Prices usage (bundled pricing table if None)
            token_estimator: Estimates user-entry tokens
            tracker: Optional exchange ledger written after every send
        """
        self.session = session
        self._estimator = token_estimator or TokenEstimator()
        self.templates = templates or TemplateEngine(token_estimator=self._estimator)
        self.executor = executor or ProviderExecutor(token_estimator=self._estimator)
        self.calculator = calculator or CostCalculator()
        self.tracker = tracker
        self._entries: List[ConversationEntry] = []
        self._usage = UsageTotals()
        self._cost = CostBreakdown()

    @property
    def entries(self) -> Tuple[ConversationEntry, ...]:
        return tuple(self._entries)

    @property
    def usage(self) -> UsageTotals:
        return UsageTotals(self._usage.input_tokens, self._usage.output_tokens)

    @property
    def cost(self) -> CostBreakdown:
        """Cost accumulated so far, each exchange priced at its own model."""
        return self._cost

    @property
    def active_pricing(self) -> PricingEntry:
        """Pricing entry that applies to the next exchange."""
        return self.calculator.pricing_table.lookup(self.session.model)

    def build_messages(self) -> List[Message]:
        """System Prompt followed by every non-error entry, in order."""
        messages = [Message(role=Role.SYSTEM, content=self.templates.system_prompt.content)]
        messages.extend(e.to_message() for e in self._entries if not e.is_error)
        return messages

    def _append(self, entry: ConversationEntry) -> ConversationEntry:
        self._entries.append(entry)
        return entry

    async def send(self, text: str) -> ConversationEntry:
        """Send user text and return the assistant entry appended for it.

        Failures while talking to the provider do not raise; they become a synthetic
        assistant entry carrying the error description and zero tokens.

        Raises:
            ValidationError: If the text is blank (nothing is appended)
        """
        if not text or not text.strip():
            raise ValidationError("Message must not be empty")

        pricing = self.active_pricing
        user_entry = self._append(
            ConversationEntry(
                role=Role.USER,
                content=text,
                tokens=self._estimator.estimate_tokens(text),
            )
        )
        messages = self.build_messages()

        error: Optional[Exception] = None
        try:
            reply = await self.executor.complete(messages, self.session)
        except Exception as e:
            if isinstance(e, ChatCostError):
                logger.error("Send to %s failed: %s", self.session.provider.value, e)
            else:
                logger.exception("Unexpected error sending to %s", self.session.provider.value)
            error = e
            reply_entry = ConversationEntry(
                role=Role.ASSISTANT,
                content=error_description(e),
                tokens=0,
                is_error=True,
            )
        else:
            reply_entry = ConversationEntry(
                role=Role.ASSISTANT,
                content=reply.content,
                tokens=reply.tokens,
            )
        self._append(reply_entry)

        exchange = UsageTotals(
            input_tokens=user_entry.tokens or 0,
            output_tokens=reply_entry.tokens or 0,
        )
        self._usage.input_tokens += exchange.input_tokens
        self._usage.output_tokens += exchange.output_tokens
        exchange_cost = self.calculator.compute_cost(exchange, pricing)
        self._cost = self._cost + exchange_cost

        if self.tracker is not None:
            # In-memory entries and totals stay authoritative when the ledger write fails
            try:
                self.tracker.record_exchange(
                    provider=self.session.provider.value,
                    model=self.session.model,
                    usage=exchange,
                    cost=exchange_cost,
                    error_message=str(error) if error else None,
                )
            except SQLAlchemyError as e:
                logger.error("Failed to record exchange: %s", e)
        return reply_entry

    async def send_prompt(self, prompt: Prompt, user_input: str = "") -> ConversationEntry:
        """Render a stored prompt against user input and send the result."""
        return await self.send(self.templates.render(prompt, user_input))

    def clear(self) -> None:
        """Discard all entries and reset usage and cost. Session and prompts are untouched."""
        self._entries.clear()
        self._usage = UsageTotals()
        self._cost = CostBreakdown()
