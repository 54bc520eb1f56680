"""Unit tests for session configuration."""

import pytest
from pydantic import ValidationError

from chatcost.config.settings import Settings
from chatcost.core.provider import ProviderIdentity
from chatcost.core.session import PROVIDER_DEFAULTS, ProviderSettings, SessionConfig


def test_defaults_for_initial_provider():
    session = SessionConfig()
    assert session.provider is ProviderIdentity.GOOGLE
    assert session.model == "gemini-2.0-flash"
    assert session.base_url == "https://generativelanguage.googleapis.com/v1beta"
    assert session.credential == ""
    assert session.is_configured is False


@pytest.mark.parametrize(
    "provider, model, base_url",
    [
        ("openai", "gpt-4o", "https://api.openai.com/v1"),
        ("google", "gemini-2.0-flash", "https://generativelanguage.googleapis.com/v1beta"),
        ("anthropic", "claude-3-haiku", "https://api.anthropic.com"),
        ("custom", "", ""),
    ],
)
def test_switch_applies_provider_defaults(provider, model, base_url):
    session = SessionConfig(provider="openai" if provider != "openai" else "google")
    session.set_credential("some-key")

    session.switch_provider(provider)

    assert session.model == model
    assert session.base_url == base_url
    assert session.credential == ""  # credentials are never defaulted


def test_is_configured_follows_credential():
    session = SessionConfig("openai")
    session.set_credential("sk-123")
    assert session.is_configured is True
    session.set_credential("")
    assert session.is_configured is False


def test_round_trip_restores_settings():
    """Switching away and back restores credential, model and base URL exactly."""
    session = SessionConfig("openai")
    session.set_credential("sk-openai")
    session.set_model("gpt-3.5-turbo")
    session.set_base_url("https://proxy.example.com/v1")

    session.switch_provider("anthropic")
    session.set_credential("sk-ant")
    session.switch_provider("openai")

    assert session.credential == "sk-openai"
    assert session.model == "gpt-3.5-turbo"
    assert session.base_url == "https://proxy.example.com/v1"

    session.switch_provider("anthropic")
    assert session.credential == "sk-ant"
    assert session.model == "claude-3-haiku"


def test_switch_to_current_provider_is_noop():
    session = SessionConfig("anthropic")
    session.set_credential("k")
    session.set_model("claude-3-5-sonnet")

    session.switch_provider("anthropic")

    assert session.credential == "k"
    assert session.model == "claude-3-5-sonnet"


def test_switch_rejects_unknown_provider():
    with pytest.raises(ValueError):
        SessionConfig().switch_provider("unknown")


def test_custom_model_passes_through_unchanged():
    session = SessionConfig("custom")
    session.set_model("my-org/finetune-v2")
    assert session.model == "my-org/finetune-v2"


def test_stored_settings_reports_pending_values():
    session = SessionConfig("openai")
    session.set_credential("sk")
    session.switch_provider("google")

    assert session.stored_settings("openai") == ProviderSettings(
        credential="sk", model="gpt-4o", base_url="https://api.openai.com/v1"
    )
    assert session.stored_settings("anthropic") == PROVIDER_DEFAULTS[ProviderIdentity.ANTHROPIC]


def test_snapshot_excludes_credential():
    session = SessionConfig("openai")
    session.set_credential("sk-secret")
    snapshot = session.snapshot()

    assert snapshot == {
        "provider": "openai",
        "model": "gpt-4o",
        "base_url": "https://api.openai.com/v1",
        "is_configured": True,
    }
    assert "sk-secret" not in repr(session)


def test_from_settings_seeds_overrides():
    settings = Settings(
        default_provider="anthropic",
        anthropic_api_key="sk-ant",
        openai_api_key="sk-openai",
        openai_model="gpt-3.5-turbo",
        custom_base_url="http://localhost:8000/v1",
    )
    session = SessionConfig.from_settings(settings)

    assert session.provider is ProviderIdentity.ANTHROPIC
    assert session.credential == "sk-ant"
    assert session.model == "claude-3-haiku"

    session.switch_provider("openai")
    assert session.credential == "sk-openai"
    assert session.model == "gpt-3.5-turbo"

    session.switch_provider("custom")
    assert session.base_url == "http://localhost:8000/v1"


def test_settings_default_provider_is_normalized():
    assert Settings(default_provider=" OpenAI ").default_provider is ProviderIdentity.OPENAI


def test_settings_rejects_unknown_default_provider(monkeypatch):
    monkeypatch.setenv("CHATCOST_DEFAULT_PROVIDER", "Gemini")
    with pytest.raises(ValidationError):
        Settings()
