"""Session configuration: provider selection with per-provider remembered settings.

Switching provider stores the outgoing provider's credential/model/base URL under
its own key and loads the incoming provider's stored values, or its defaults.
Setters write through to the per-provider record immediately.
"""

import logging
from dataclasses import dataclass, replace
from typing import Dict, Optional, TYPE_CHECKING, Union

from chatcost.core.provider import ProviderIdentity

if TYPE_CHECKING:
    from chatcost.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderSettings:
    """Credential, model and endpoint remembered for one provider."""

    credential: str = ""
    model: str = ""
    base_url: str = ""


# Credentials are never defaulted.
PROVIDER_DEFAULTS: Dict[ProviderIdentity, ProviderSettings] = {
    ProviderIdentity.OPENAI: ProviderSettings(
        model="gpt-4o",
        base_url="https://api.openai.com/v1",
    ),
    ProviderIdentity.GOOGLE: ProviderSettings(
        model="gemini-2.0-flash",
        base_url="https://generativelanguage.googleapis.com/v1beta",
    ),
    ProviderIdentity.ANTHROPIC: ProviderSettings(
        model="claude-3-haiku",
        base_url="https://api.anthropic.com",
    ),
    ProviderIdentity.CUSTOM: ProviderSettings(),
}


class SessionConfig:
    """Live provider configuration for one chat session. Single writer; no locking."""

    def __init__(
        self,
        provider: Union[ProviderIdentity, str] = ProviderIdentity.GOOGLE,
        stored: Optional[Dict[ProviderIdentity, ProviderSettings]] = None,
    ):
        """Initialize the session configuration.

        Args:
            provider: Provider selected at start
            stored: Previously stored per-provider overrides (copied)
        """
        self._stored: Dict[ProviderIdentity, ProviderSettings] = dict(stored or {})
        self._provider = ProviderIdentity(provider)
        self._current = self._load(self._provider)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "SessionConfig":
        """Seed the session from Settings (env vars, .env, YAML)."""
        stored: Dict[ProviderIdentity, ProviderSettings] = {}
        for identity in ProviderIdentity:
            defaults = PROVIDER_DEFAULTS[identity]
            key = identity.value
            overrides = ProviderSettings(
                credential=settings.get_api_key(key) or "",
                model=settings.get_model(key) or defaults.model,
                base_url=settings.get_base_url(key) or defaults.base_url,
            )
            if overrides != defaults:
                stored[identity] = overrides
        return cls(provider=settings.default_provider, stored=stored)

    def _load(self, provider: ProviderIdentity) -> ProviderSettings:
        return self._stored.get(provider, PROVIDER_DEFAULTS[provider])

    def _store(self, values: ProviderSettings) -> None:
        self._current = values
        self._stored[self._provider] = values

    @property
    def provider(self) -> ProviderIdentity:
        return self._provider

    @property
    def credential(self) -> str:
        return self._current.credential

    @property
    def model(self) -> str:
        return self._current.model

    @property
    def base_url(self) -> str:
        return self._current.base_url

    @property
    def is_configured(self) -> bool:
        return bool(self._current.credential)

    def switch_provider(self, provider: Union[ProviderIdentity, str]) -> None:
        """Switch provider. Always legal; a no-op if the target is already current."""
        target = ProviderIdentity(provider)
        if target is self._provider:
            return
        self._stored[self._provider] = self._current
        logger.debug("Switching provider %s -> %s", self._provider.value, target.value)
        self._provider = target
        self._current = self._load(target)

    def set_credential(self, credential: str) -> None:
        self._store(replace(self._current, credential=credential.strip()))

    def set_model(self, model: str) -> None:
        self._store(replace(self._current, model=model.strip()))

    def set_base_url(self, base_url: str) -> None:
        self._store(replace(self._current, base_url=base_url.strip()))

    def stored_settings(self, provider: Union[ProviderIdentity, str]) -> ProviderSettings:
        """Values the given provider would load on switch (stored or defaults)."""
        identity = ProviderIdentity(provider)
        if identity is self._provider:
            return self._current
        return self._load(identity)

    def snapshot(self) -> Dict[str, object]:
        """Current values for a settings view. The credential itself is not included."""
        return {
            "provider": self._provider.value,
            "model": self.model,
            "base_url": self.base_url,
            "is_configured": self.is_configured,
        }

    def __repr__(self) -> str:
        return (
            f"SessionConfig(provider={self._provider.value}, model={self.model}, "
            f"base_url={self.base_url}, configured={self.is_configured})"
        )
