from __future__ import annotations

import threading
from collections.abc import Callable

from modelscan.core.providers.base import Provider
from modelscan.core.runtime.errors import UnknownProviderError

ProviderFactory = Callable[[str], Provider]


class ProviderRegistry:
    """Maps provider names to factories that build a provider from a credential."""

    def __init__(self) -> None:
        self._factories: dict[str, ProviderFactory] = {}
        self._lock = threading.Lock()

    def register(self, name: str, factory: ProviderFactory) -> None:
        with self._lock:
            self._factories[name] = factory

    def get_factory(self, name: str) -> ProviderFactory | None:
        return self._factories.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def list_providers(self) -> list[str]:
        return sorted(self._factories.keys())

    def create(self, name: str, credential: str) -> Provider:
        factory = self.get_factory(name)
        if factory is None:
            raise UnknownProviderError(name)
        return factory(credential)
