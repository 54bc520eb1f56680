"""Unit tests for the template engine."""

import pytest
from unittest.mock import Mock

from chatcost.core.errors import NotFoundError, ValidationError
from chatcost.core.estimator import estimate_tokens
from chatcost.core.templates import (
    DEFAULT_SYSTEM_PROMPT,
    EMPTY_INPUT_PLACEHOLDER,
    INPUT_PLACEHOLDER,
    SYSTEM_PROMPT_ID,
    Prompt,
    TemplateEngine,
)


@pytest.fixture
def engine():
    return TemplateEngine()


def test_system_prompt_always_present(engine):
    system = engine.system_prompt
    assert system.id == SYSTEM_PROMPT_ID
    assert system.content == DEFAULT_SYSTEM_PROMPT
    assert system.tokens == estimate_tokens(DEFAULT_SYSTEM_PROMPT)
    assert engine.list() == []
    assert engine.list(include_system=True) == [system]


def test_create_assigns_id_and_tokens(engine):
    prompt = engine.create("  Summarize  ", "  Summarize this text please.  ")

    assert prompt.name == "Summarize"
    assert prompt.content == "Summarize this text please."
    assert prompt.tokens == estimate_tokens("Summarize this text please.")
    assert prompt.is_template is False
    assert engine.get(prompt.id) == prompt


def test_create_generates_unique_ids(engine):
    ids = {engine.create(f"p{i}", "content").id for i in range(20)}
    assert len(ids) == 20


@pytest.mark.parametrize("name, content", [("", "x"), ("x", ""), ("   ", "x"), ("x", "\n\t ")])
def test_create_rejects_empty_fields(engine, name, content):
    with pytest.raises(ValidationError):
        engine.create(name, content)
    assert engine.list() == []


def test_update_recomputes_tokens_on_content_change(engine):
    prompt = engine.create("p", "short")
    updated = engine.update(prompt.id, content="a much longer piece of content than before")

    assert updated.id == prompt.id
    assert updated.tokens == estimate_tokens("a much longer piece of content than before")
    assert engine.get(prompt.id) == updated


def test_update_name_and_flag(engine):
    prompt = engine.create("p", "Translate: {{input}}")
    updated = engine.update(prompt.id, name="Translate", is_template=True)

    assert updated.name == "Translate"
    assert updated.is_template is True
    assert updated.tokens == prompt.tokens


def test_update_unknown_id(engine):
    with pytest.raises(NotFoundError):
        engine.update("missing", name="x")


def test_update_rejects_empty_and_unknown_fields(engine):
    prompt = engine.create("p", "c")
    with pytest.raises(ValidationError):
        engine.update(prompt.id, content="  ")
    with pytest.raises(ValidationError):
        engine.update(prompt.id, tokens=5)


def test_update_system_prompt_content(engine):
    updated = engine.update_system_prompt("You are terse.")
    assert engine.system_prompt == updated
    assert updated.tokens == estimate_tokens("You are terse.")


def test_system_prompt_name_cannot_change(engine):
    with pytest.raises(ValidationError):
        engine.update(SYSTEM_PROMPT_ID, name="Other")


def test_delete_system_prompt_rejected(engine):
    with pytest.raises(ValidationError):
        engine.delete(SYSTEM_PROMPT_ID)
    assert engine.system_prompt.id == SYSTEM_PROMPT_ID


def test_delete_then_lookup_fails(engine):
    prompt = engine.create("p", "c")
    engine.delete(prompt.id)

    with pytest.raises(NotFoundError):
        engine.get(prompt.id)
    with pytest.raises(NotFoundError):
        engine.delete(prompt.id)


def test_render_replaces_every_placeholder(engine):
    prompt = engine.create("t", f"A {INPUT_PLACEHOLDER} B {INPUT_PLACEHOLDER} C", is_template=True)
    assert engine.render(prompt, "X") == "A X B X C"


def test_render_empty_input_uses_descriptive_placeholder(engine):
    prompt = engine.create("t", f"Explain {INPUT_PLACEHOLDER}", is_template=True)
    assert engine.render(prompt, "") == f"Explain {EMPTY_INPUT_PLACEHOLDER}"


def test_render_non_template_returns_content(engine):
    prompt = engine.create("p", f"Literal {INPUT_PLACEHOLDER}")
    for user_input in ["", "X", "anything at all"]:
        assert engine.render(prompt, user_input) == prompt.content


def test_find_by_name(engine):
    prompt = engine.create("Code Review", "Review this")
    assert engine.find_by_name("code review") == prompt
    assert engine.find_by_name("nope") is None


def test_resolve_prefers_exact_id_then_name(engine):
    target = engine.create("Code Review", "Review this")
    # A prompt whose name collides with the first character of another id
    named = engine.create(target.id[0], "Named after a prefix")

    assert engine.resolve(target.id) == target
    assert engine.resolve(target.id[0]) == named
    assert engine.resolve("code review") == target
    assert engine.resolve(SYSTEM_PROMPT_ID).is_system


def test_resolve_accepts_unique_listed_prefix(engine):
    prompt = engine.create("p", "c")
    assert engine.resolve(prompt.id[:8]) == prompt


@pytest.mark.parametrize("ref", ["", "   ", "s", "abc"])
def test_resolve_short_or_unknown_reference(engine, ref):
    engine.create("p", "c")
    with pytest.raises(NotFoundError):
        engine.resolve(ref)


def test_resolve_ambiguous_prefix():
    store = Mock()
    store.list_prompts.return_value = [
        Prompt(id="abcdef0001", name="one", content="c", tokens=1),
        Prompt(id="abcdef0002", name="two", content="c", tokens=1),
    ]
    engine = TemplateEngine(store=store)

    with pytest.raises(NotFoundError):
        engine.resolve("abcdef00")
    assert engine.resolve("abcdef0002").name == "two"


def test_store_receives_write_through_calls():
    store = Mock()
    store.list_prompts.return_value = []
    engine = TemplateEngine(store=store)

    # The default System Prompt is written on first load
    assert store.save_prompt.call_args[0][0].id == SYSTEM_PROMPT_ID

    prompt = engine.create("p", "c")
    store.save_prompt.assert_called_with(prompt)
    updated = engine.update(prompt.id, content="d")
    store.save_prompt.assert_called_with(updated)
    engine.delete(prompt.id)
    store.delete_prompt.assert_called_once_with(prompt.id)


def test_store_contents_are_loaded():
    saved = [
        Prompt(id=SYSTEM_PROMPT_ID, name="System Prompt", content="Be brief.", tokens=2),
        Prompt(id="abc", name="p", content="c", tokens=1),
    ]
    store = Mock()
    store.list_prompts.return_value = saved
    engine = TemplateEngine(store=store)

    assert engine.system_prompt.content == "Be brief."
    assert engine.list() == [saved[1]]
    store.save_prompt.assert_not_called()
