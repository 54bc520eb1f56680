"""Unit tests for the conversation accumulator."""

import asyncio
import json

import httpx
import pytest
from unittest.mock import AsyncMock, Mock
from sqlalchemy.exc import OperationalError

from chatcost.core.calculator import CostCalculator, UsageTotals
from chatcost.core.conversation import Conversation
from chatcost.core.errors import ValidationError
from chatcost.core.estimator import estimate_tokens
from chatcost.core.executor import ProviderExecutor
from chatcost.core.provider import ParsedResponse, Role
from chatcost.core.session import SessionConfig
from chatcost.core.templates import TemplateEngine


def run(coro):
    return asyncio.run(coro)


def openai_reply(content, completion_tokens=None):
    body = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    if completion_tokens is not None:
        body["usage"] = {"completion_tokens": completion_tokens}
    return body


@pytest.fixture
def session():
    session = SessionConfig("openai")
    session.set_credential("sk-test")
    return session


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def conversation(session, requests_seen):
    def handler(request):
        requests_seen.append(json.loads(request.content))
        return httpx.Response(200, json=openai_reply("Hi there", completion_tokens=3))

    executor = ProviderExecutor(transport=httpx.MockTransport(handler))
    return Conversation(session=session, executor=executor)


def test_send_hello_scenario(conversation):
    """Two entries, input tokens estimated, output tokens from provider usage."""
    reply = run(conversation.send("Hello"))

    entries = conversation.entries
    assert len(entries) == 2
    assert entries[0].role is Role.USER
    assert entries[0].content == "Hello"
    assert entries[0].tokens == estimate_tokens("Hello")
    assert entries[1] is reply
    assert reply.role is Role.ASSISTANT
    assert reply.content == "Hi there"
    assert reply.tokens == 3
    assert conversation.usage == UsageTotals(input_tokens=estimate_tokens("Hello"), output_tokens=3)


def test_request_carries_system_prompt_and_history(conversation, requests_seen):
    conversation.templates.update_system_prompt("Be terse")
    run(conversation.send("Hello"))
    run(conversation.send("And again"))

    assert requests_seen[1]["messages"] == [
        {"role": "system", "content": "Be terse"},
        {"role": "user", "content": "Hello"},
        {"role": "assistant", "content": "Hi there"},
        {"role": "user", "content": "And again"},
    ]


def test_blank_input_rejected_without_side_effects(conversation):
    with pytest.raises(ValidationError):
        run(conversation.send("   "))
    assert conversation.entries == ()
    assert conversation.usage == UsageTotals()


def test_unconfigured_session_appends_error_entry():
    """Missing credentials become a visible synthetic reply with zero tokens."""
    conversation = Conversation(session=SessionConfig("openai"))

    reply = run(conversation.send("Hello"))

    assert len(conversation.entries) == 2
    assert reply.is_error is True
    assert reply.tokens == 0
    assert "API key is not configured" in reply.content
    assert conversation.usage == UsageTotals(estimate_tokens("Hello"), 0)


def test_provider_error_appends_error_entry(session):
    def handler(request):
        return httpx.Response(429, json={"error": "rate limited"})

    conversation = Conversation(
        session=session,
        executor=ProviderExecutor(transport=httpx.MockTransport(handler)),
    )
    reply = run(conversation.send("Hello"))

    assert reply.is_error
    assert "429" in reply.content
    assert "rate limited" in reply.content


def test_error_entries_are_not_replayed(session, requests_seen):
    responses = [
        httpx.Response(500, json={"error": "boom"}),
        httpx.Response(200, json=openai_reply("ok")),
    ]

    def handler(request):
        requests_seen.append(json.loads(request.content))
        return responses.pop(0)

    conversation = Conversation(
        session=session,
        executor=ProviderExecutor(transport=httpx.MockTransport(handler)),
    )
    run(conversation.send("first"))
    run(conversation.send("second"))

    roles = [m["role"] for m in requests_seen[1]["messages"]]
    assert roles == ["system", "user", "user"]
    assert len(conversation.entries) == 4


def test_unexpected_exception_becomes_error_entry(session):
    executor = Mock(spec=ProviderExecutor)
    executor.complete = AsyncMock(side_effect=RuntimeError("kaboom"))
    conversation = Conversation(session=session, executor=executor)

    reply = run(conversation.send("Hello"))

    assert reply.is_error
    assert "kaboom" in reply.content


def test_cost_accumulates_per_exchange_pricing(session):
    executor = Mock(spec=ProviderExecutor)
    executor.complete = AsyncMock(return_value=ParsedResponse(content="x", tokens=1000))
    calculator = CostCalculator()
    conversation = Conversation(session=session, executor=executor, calculator=calculator)

    run(conversation.send("Hello"))
    first = conversation.cost
    gpt_4o = calculator.pricing_table.lookup("gpt-4o")
    assert first.output_cost == pytest.approx(1000 * gpt_4o.output_price)

    session.set_model("gpt-3.5-turbo")
    assert conversation.active_pricing.model == "gpt-3.5-turbo"
    # Switching model does not re-price what was already spent
    assert conversation.cost == first

    run(conversation.send("Hello"))
    cheap = calculator.pricing_table.lookup("gpt-3.5-turbo")
    assert conversation.cost.output_cost == pytest.approx(
        1000 * gpt_4o.output_price + 1000 * cheap.output_price
    )
    assert conversation.cost.total_cost == pytest.approx(
        conversation.cost.input_cost + conversation.cost.output_cost
    )


def test_send_prompt_renders_template(session):
    executor = Mock(spec=ProviderExecutor)
    executor.complete = AsyncMock(return_value=ParsedResponse(content="ok", tokens=1))
    templates = TemplateEngine()
    prompt = templates.create("Translate", "Translate to French: {{input}}", is_template=True)
    conversation = Conversation(session=session, templates=templates, executor=executor)

    run(conversation.send_prompt(prompt, "good morning"))

    assert conversation.entries[0].content == "Translate to French: good morning"


def test_clear_resets_entries_and_totals_only(conversation, session):
    prompt = conversation.templates.create("p", "c")
    run(conversation.send("Hello"))

    conversation.clear()

    assert conversation.entries == ()
    assert conversation.usage == UsageTotals()
    assert conversation.cost.total_cost == 0.0
    assert session.credential == "sk-test"
    assert conversation.templates.get(prompt.id) == prompt


def test_entries_are_a_snapshot(conversation):
    run(conversation.send("Hello"))
    snapshot = conversation.entries
    run(conversation.send("Again"))
    assert len(snapshot) == 2
    assert len(conversation.entries) == 4


def test_tracker_records_each_exchange(session):
    executor = Mock(spec=ProviderExecutor)
    executor.complete = AsyncMock(return_value=ParsedResponse(content="ok", tokens=5))
    tracker = Mock()
    conversation = Conversation(session=session, executor=executor, tracker=tracker)

    run(conversation.send("Hello"))

    kwargs = tracker.record_exchange.call_args.kwargs
    assert kwargs["provider"] == "openai"
    assert kwargs["model"] == "gpt-4o"
    assert kwargs["usage"] == UsageTotals(estimate_tokens("Hello"), 5)
    assert kwargs["cost"] == conversation.cost
    assert kwargs["error_message"] is None


def test_ledger_failure_keeps_turn_and_totals(session, caplog):
    executor = Mock(spec=ProviderExecutor)
    executor.complete = AsyncMock(return_value=ParsedResponse(content="ok", tokens=1))
    tracker = Mock()
    tracker.record_exchange.side_effect = OperationalError(
        "INSERT INTO exchanges", {}, Exception("database is locked")
    )
    conversation = Conversation(session=session, executor=executor, tracker=tracker)

    reply = run(conversation.send("Hello"))

    assert reply.content == "ok"
    assert len(conversation.entries) == 2
    assert conversation.usage.output_tokens == 1
    assert "Failed to record exchange" in caplog.text

    # The session keeps going after a failed write
    run(conversation.send("Again"))
    assert len(conversation.entries) == 4
