"""Cost calculation from accumulated token usage."""

from dataclasses import dataclass
from typing import Optional

from chatcost.core.pricing import PricingEntry, PricingTable


@dataclass
class UsageTotals:
    """Input/output tokens accumulated across a conversation."""

    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class CostBreakdown:
    """Dollar cost split by direction. No rounding is applied."""

    input_cost: float = 0.0
    output_cost: float = 0.0
    total_cost: float = 0.0

    def __add__(self, other: "CostBreakdown") -> "CostBreakdown":
        return CostBreakdown(
            input_cost=self.input_cost + other.input_cost,
            output_cost=self.output_cost + other.output_cost,
            total_cost=self.total_cost + other.total_cost,
        )

    def __repr__(self) -> str:
        return (
            f"CostBreakdown(input=${self.input_cost:.6f}, "
            f"output=${self.output_cost:.6f}, total=${self.total_cost:.6f})"
        )


class CostCalculator:
    """Combines usage totals with pricing entries."""

    def __init__(self, pricing_table: Optional[PricingTable] = None):
        """Initialize the cost calculator.

        Args:
            pricing_table: Pricing table instance (creates default if None)
        """
        self.pricing_table = pricing_table or PricingTable()

    @staticmethod
    def compute_cost(usage: UsageTotals, entry: PricingEntry) -> CostBreakdown:
        """Price a usage total against one pricing entry.

        Args:
            usage: Accumulated input/output tokens
            entry: Per-token prices

        Returns:
            CostBreakdown with input, output and total cost
        """
        input_cost = usage.input_tokens * entry.input_price
        output_cost = usage.output_tokens * entry.output_price
        return CostBreakdown(
            input_cost=input_cost,
            output_cost=output_cost,
            total_cost=input_cost + output_cost,
        )

    def cost_for_model(self, usage: UsageTotals, model: str) -> CostBreakdown:
        """Price usage for a model id (unknown models use the default entry)."""
        return self.compute_cost(usage, self.pricing_table.lookup(model))
