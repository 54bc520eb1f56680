"""Prompt library with a protected System Prompt and placeholder rendering."""

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Protocol

from chatcost.core.errors import NotFoundError, ValidationError
from chatcost.core.estimator import TokenEstimator

logger = logging.getLogger(__name__)

SYSTEM_PROMPT_ID = "system"
SYSTEM_PROMPT_NAME = "System Prompt"
DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."

# Reserved token replaced by live user input when a template is rendered.
INPUT_PLACEHOLDER = "{{input}}"
# Substituted for empty input so previews stay non-empty.
EMPTY_INPUT_PLACEHOLDER = "[your input]"

UPDATABLE_FIELDS = {"name", "content", "is_template"}
# Shortest id prefix accepted by resolve(); `prompts list` shows this many characters.
MIN_ID_PREFIX = 8


@dataclass(frozen=True)
class Prompt:
    """A stored prompt body. ``tokens`` is derived from ``content``."""

    id: str
    name: str
    content: str
    tokens: int
    is_template: bool = False

    @property
    def is_system(self) -> bool:
        return self.id == SYSTEM_PROMPT_ID


class PromptStore(Protocol):
    """Persistence hooks called directly by each mutating TemplateEngine method."""

    def list_prompts(self) -> List[Prompt]:
        ...

    def save_prompt(self, prompt: Prompt) -> None:
        ...

    def delete_prompt(self, prompt_id: str) -> None:
        ...


def _require_text(value: Any, field_name: str) -> str:
    text = value.strip() if isinstance(value, str) else ""
    if not text:
        raise ValidationError(f"Prompt {field_name} must not be empty")
    return text


def render(prompt: Prompt, user_input: str) -> str:
    """Resolve a prompt against live user input.

    Templates get every placeholder replaced by ``user_input`` (or a descriptive
    stand-in when it is empty). Plain prompts are returned unchanged.
    """
    if not prompt.is_template:
        return prompt.content
    return prompt.content.replace(INPUT_PLACEHOLDER, user_input or EMPTY_INPUT_PLACEHOLDER)


class TemplateEngine:
    """CRUD over prompts, in insertion order, with an always-present System Prompt."""

    def __init__(
        self,
        store: Optional[PromptStore] = None,
        token_estimator: Optional[TokenEstimator] = None,
    ):
        """Initialize the engine, loading any prompts already in the store.

        Args:
            store: Optional persistence (e.g. storage.prompts.PromptRepository)
            token_estimator: Used to derive prompt token counts
        """
        self._store = store
        self._estimator = token_estimator or TokenEstimator()
        self._prompts: Dict[str, Prompt] = {}

        if store is not None:
            for prompt in store.list_prompts():
                self._prompts[prompt.id] = prompt
            logger.debug("Loaded %d prompts from store", len(self._prompts))

        if SYSTEM_PROMPT_ID not in self._prompts:
            self._put(self._make(SYSTEM_PROMPT_ID, SYSTEM_PROMPT_NAME, DEFAULT_SYSTEM_PROMPT, False))

    def _make(self, prompt_id: str, name: str, content: str, is_template: bool) -> Prompt:
        return Prompt(
            id=prompt_id,
            name=name,
            content=content,
            tokens=self._estimator.estimate_tokens(content),
            is_template=bool(is_template),
        )

    def _put(self, prompt: Prompt) -> Prompt:
        self._prompts[prompt.id] = prompt
        if self._store is not None:
            self._store.save_prompt(prompt)
        return prompt

    @property
    def system_prompt(self) -> Prompt:
        return self._prompts[SYSTEM_PROMPT_ID]

    def create(self, name: str, content: str, is_template: bool = False) -> Prompt:
        """Create a prompt with a fresh id.

        Raises:
            ValidationError: If name or content is empty after trimming
        """
        prompt = self._make(
            uuid.uuid4().hex,
            _require_text(name, "name"),
            _require_text(content, "content"),
            is_template,
        )
        return self._put(prompt)

    def get(self, prompt_id: str) -> Prompt:
        try:
            return self._prompts[prompt_id]
        except KeyError:
            raise NotFoundError(prompt_id) from None

    def find_by_name(self, name: str) -> Optional[Prompt]:
        """First prompt whose name matches case-insensitively, or None."""
        wanted = name.strip().lower()
        return next((p for p in self._prompts.values() if p.name.lower() == wanted), None)

    def resolve(self, ref: str) -> Prompt:
        """Look a prompt up by exact id, then name, then a unique id prefix.

        Prefixes shorter than MIN_ID_PREFIX are never matched.

        Raises:
            NotFoundError: If nothing matches or a prefix is ambiguous
        """
        ref = (ref or "").strip()
        if ref in self._prompts:
            return self._prompts[ref]
        named = self.find_by_name(ref) if ref else None
        if named is not None:
            return named
        if len(ref) >= MIN_ID_PREFIX:
            matches = [p for p in self._prompts.values() if p.id.startswith(ref)]
            if len(matches) == 1:
                return matches[0]
        raise NotFoundError(ref)

    def list(self, include_system: bool = False) -> List[Prompt]:
        """Prompts in creation order; the System Prompt only when asked for."""
        return [p for p in self._prompts.values() if include_system or not p.is_system]

    def update(self, prompt_id: str, **fields: Any) -> Prompt:
        """Update name, content and/or is_template. Token count follows content.

        Raises:
            NotFoundError: If the id is unknown
            ValidationError: On empty name/content, unknown fields, or non-content
                edits to the System Prompt
        """
        current = self.get(prompt_id)
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update prompt fields: {', '.join(sorted(unknown))}")
        if current.is_system and set(fields) - {"content"}:
            raise ValidationError("Only the content of the System Prompt can be edited")

        changes: Dict[str, Any] = {}
        if "name" in fields:
            changes["name"] = _require_text(fields["name"], "name")
        if "content" in fields:
            content = _require_text(fields["content"], "content")
            changes["content"] = content
            if content != current.content:
                changes["tokens"] = self._estimator.estimate_tokens(content)
        if "is_template" in fields:
            changes["is_template"] = bool(fields["is_template"])

        return self._put(replace(current, **changes))

    def update_system_prompt(self, content: str) -> Prompt:
        return self.update(SYSTEM_PROMPT_ID, content=content)

    def delete(self, prompt_id: str) -> None:
        """Delete a prompt.

        Raises:
            NotFoundError: If the id is unknown
            ValidationError: If asked to delete the System Prompt
        """
        prompt = self.get(prompt_id)
        if prompt.is_system:
            raise ValidationError("The System Prompt cannot be deleted")
        del self._prompts[prompt_id]
        if self._store is not None:
            self._store.delete_prompt(prompt_id)

    def render(self, prompt: Prompt, user_input: str = "") -> str:
        return render(prompt, user_input)
