"""Exchange ledger: per-send tokens and cost, with history and aggregate stats."""

from typing import Dict, List, Optional

from sqlalchemy import func

from chatcost.core.calculator import CostBreakdown, UsageTotals
from chatcost.storage.database import DatabaseManager, Exchange
from chatcost.config.settings import Settings


class ExchangeTracker:
    """Records exchanges and answers usage/cost queries."""

    def __init__(
        self,
        database_manager: Optional[DatabaseManager] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the exchange tracker.

        Args:
            database_manager: Database manager instance (creates default if None)
            settings: Settings instance (creates default if None)
        """
        self.settings = settings or Settings()
        self.db_manager = database_manager or DatabaseManager(
            str(self.settings.get_database_path())
        )
        self.db_manager.init_db()

    def close(self) -> None:
        """Release database connections. Call when done (e.g. in tests before deleting temp DB)."""
        self.db_manager.dispose()

    def record_exchange(
        self,
        provider: str,
        model: str,
        usage: UsageTotals,
        cost: CostBreakdown,
        error_message: Optional[str] = None,
    ) -> Exchange:
        """Store one exchange.

        Args:
            provider: Provider identity value
            model: Model identifier active for the exchange
            usage: Input/output tokens of this exchange only
            cost: Cost of this exchange
            error_message: Failure description when the send failed

        Returns:
            Created Exchange object (detached)
        """
        with self.db_manager.get_session() as session:
            exchange = Exchange(
                provider=provider,
                model=model,
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                input_cost=cost.input_cost,
                output_cost=cost.output_cost,
                total_cost=cost.total_cost,
                error_message=error_message,
            )
            session.add(exchange)
            session.commit()
            session.refresh(exchange)
            session.expunge(exchange)

        return exchange

    def get_recent_exchanges(
        self,
        limit: int = 10,
        model: Optional[str] = None
    ) -> List[Exchange]:
        """Get recent exchanges, newest first.

        Args:
            limit: Maximum number of exchanges to return
            model: Filter by model name (optional)
        """
        with self.db_manager.get_session() as session:
            query = session.query(Exchange).order_by(Exchange.timestamp.desc())

            if model:
                query = query.filter(Exchange.model == model)

            exchanges = query.limit(limit).all()
            session.expunge_all()
            return exchanges

    def get_usage_stats(self, model: Optional[str] = None) -> Dict[str, float]:
        """Aggregate tokens, cost and failures.

        Args:
            model: Filter by model name (optional)

        Returns:
            Dict with exchange_count, failed_count, input_tokens, output_tokens,
            total_cost and avg_cost
        """
        with self.db_manager.get_session() as session:
            query = session.query(
                func.count(Exchange.id),
                func.count(Exchange.error_message),
                func.coalesce(func.sum(Exchange.input_tokens), 0),
                func.coalesce(func.sum(Exchange.output_tokens), 0),
                func.coalesce(func.sum(Exchange.total_cost), 0.0),
            )
            if model:
                query = query.filter(Exchange.model == model)

            count, failed, input_tokens, output_tokens, total_cost = query.one()

        return {
            "exchange_count": count,
            "failed_count": failed,
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_cost": total_cost,
            "avg_cost": total_cost / count if count else 0.0,
        }

    def get_total_cost(self, model: Optional[str] = None) -> float:
        """Get total cost across all exchanges.

        Args:
            model: Filter by model name (optional)
        """
        with self.db_manager.get_session() as session:
            query = session.query(func.sum(Exchange.total_cost))

            if model:
                query = query.filter(Exchange.model == model)

            total = query.scalar()
            return total or 0.0
