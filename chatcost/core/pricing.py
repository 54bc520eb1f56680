"""Pricing table mapping model identifiers to per-token prices."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PricingEntry:
    """Dollar price per input and output token for one model."""

    model: str
    input_price: float
    output_price: float


class PricingTable:
    """Static model -> price lookup. Unknown models resolve to the default entry."""

    def __init__(self, pricing_file_path: Optional[str] = None):
        """Initialize the pricing table.

        Args:
            pricing_file_path: Path to the pricing JSON file. If None, uses the bundled
                config/pricing.json.
        """
        self._entries: Dict[str, PricingEntry] = {}
        self._aliases: Dict[str, str] = {}
        self._default_model: str = ""
        self._pricing_file_path = pricing_file_path
        self.load_pricing()

    def load_pricing(self) -> None:
        """Load pricing data from JSON file.

        Raises:
            FileNotFoundError: If the pricing file doesn't exist.
            json.JSONDecodeError: If the pricing file is invalid JSON.
            ValueError: If the default model has no pricing entry.
        """
        if self._pricing_file_path:
            pricing_path = Path(self._pricing_file_path)
        else:
            package_dir = Path(__file__).parent.parent
            pricing_path = package_dir / "config" / "pricing.json"

        if not pricing_path.exists():
            raise FileNotFoundError(f"Pricing file not found: {pricing_path}")

        with open(pricing_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        self._aliases = data.get("model_aliases", {})
        self._entries = {
            name: PricingEntry(
                model=name,
                input_price=prices["input_cost_per_token"],
                output_price=prices["output_cost_per_token"],
            )
            for name, prices in data.get("models", {}).items()
        }
        self._default_model = data.get("default_model", "")
        if self._default_model not in self._entries:
            raise ValueError(
                f"Default model '{self._default_model}' has no pricing entry in {pricing_path}"
            )
        logger.debug("Loaded pricing for %d models from %s", len(self._entries), pricing_path)

    @property
    def default_model(self) -> str:
        return self._default_model

    def _resolve_model(self, model_name: str) -> str:
        """Resolve model aliases to canonical names."""
        return self._aliases.get(model_name, model_name)

    def lookup(self, model_name: str) -> PricingEntry:
        """Get the pricing entry for a model, falling back to the default entry.

        Args:
            model_name: Model identifier (aliases are resolved)

        Returns:
            PricingEntry for the model, or the default entry for unknown models
        """
        resolved = self._resolve_model(model_name)
        entry = self._entries.get(resolved)
        if entry is None:
            logger.debug("No pricing for %r, using default %r", model_name, self._default_model)
            return self._entries[self._default_model]
        return entry

    def list_supported_models(self) -> list[str]:
        """List all models with pricing information."""
        return sorted(self._entries.keys())

    def add_model_pricing(
        self,
        model_name: str,
        input_price: float,
        output_price: float,
    ) -> PricingEntry:
        """Add or update pricing for a model.

        Args:
            model_name: Name of the model
            input_price: Dollars per input token
            output_price: Dollars per output token
        """
        entry = PricingEntry(model=model_name, input_price=input_price, output_price=output_price)
        self._entries[model_name] = entry
        return entry

    def has_model(self, model_name: str) -> bool:
        """Check if a model has its own pricing entry (aliases count)."""
        return self._resolve_model(model_name) in self._entries
