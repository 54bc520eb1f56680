"""SQLite-backed prompt store used by TemplateEngine for write-through persistence."""

from typing import List, Optional

from sqlalchemy import func

from chatcost.core.templates import Prompt
from chatcost.storage.database import DatabaseManager, PromptRecord
from chatcost.config.settings import Settings


def _to_prompt(record: PromptRecord) -> Prompt:
    return Prompt(
        id=record.id,
        name=record.name,
        content=record.content,
        tokens=record.tokens,
        is_template=bool(record.is_template),
    )


class PromptRepository:
    """Loads and saves Prompt records."""

    def __init__(
        self,
        database_manager: Optional[DatabaseManager] = None,
        settings: Optional[Settings] = None,
    ):
        """Initialize the repository.

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
        """Release database connections."""
        self.db_manager.dispose()

    def list_prompts(self) -> List[Prompt]:
        """All stored prompts in creation order."""
        with self.db_manager.get_session() as session:
            records = session.query(PromptRecord).order_by(PromptRecord.position).all()
            return [_to_prompt(r) for r in records]

    def save_prompt(self, prompt: Prompt) -> None:
        """Insert or update a prompt, keeping its original position."""
        with self.db_manager.get_session() as session:
            record = session.get(PromptRecord, prompt.id)
            if record is None:
                last = session.query(func.max(PromptRecord.position)).scalar()
                record = PromptRecord(id=prompt.id, position=(last or 0) + 1)
                session.add(record)
            record.name = prompt.name
            record.content = prompt.content
            record.tokens = prompt.tokens
            record.is_template = prompt.is_template

    def delete_prompt(self, prompt_id: str) -> None:
        with self.db_manager.get_session() as session:
            session.query(PromptRecord).filter(PromptRecord.id == prompt_id).delete()
