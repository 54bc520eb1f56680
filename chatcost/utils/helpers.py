"""Utility functions and helpers."""

from pathlib import Path
from typing import Iterable, TYPE_CHECKING

if TYPE_CHECKING:
    from chatcost.core.conversation import ConversationEntry

TRANSCRIPT_SEPARATOR = "\n---\n\n"


def read_prompt_from_file(file_path: str) -> str:
    """Read prompt text from a file.

    Args:
        file_path: Path to file containing prompt

    Returns:
        Prompt text

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def format_cost(cost: float) -> str:
    """Format cost as currency string (e.g. "$0.000338")."""
    return f"${cost:.6f}"


def format_tokens(tokens: int) -> str:
    """Format token count with thousands separator (e.g. "1,250")."""
    return f"{tokens:,}"


def format_price_per_1k(price_per_token: float) -> str:
    """Per-token price shown per 1K tokens, the way providers publish it."""
    return f"${price_per_token * 1000:.4f}"


def truncate_text(text: str, max_length: int = 100) -> str:
    """Truncate text to maximum length.

    Args:
        text: Text to truncate
        max_length: Maximum length

    Returns:
        Truncated text with ellipsis if needed
    """
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def format_transcript(entries: Iterable["ConversationEntry"]) -> str:
    """Render entries as plain text: ``[time] ROLE:`` header, content, ``---`` between."""
    blocks = []
    for entry in entries:
        time = entry.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        blocks.append(f"[{time}] {entry.role.value.upper()}:\n{entry.content}\n")
    return TRANSCRIPT_SEPARATOR.join(blocks)


def save_transcript(entries: Iterable["ConversationEntry"], file_name: str) -> Path:
    """Write a transcript to ``file_name`` (``.txt`` appended when missing)."""
    path = Path(file_name)
    if path.suffix != ".txt":
        path = path.with_name(path.name + ".txt")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_transcript(entries), encoding="utf-8")
    return path
