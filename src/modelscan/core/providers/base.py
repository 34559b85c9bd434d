from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TextIO

from modelscan.core.providers.models import Endpoint, Model, ProviderCapabilities
from modelscan.core.providers.validator import validate_endpoints
from modelscan.core.runtime.errors import SetupError
from modelscan.core.telemetry.logging import get_logger


class Provider(ABC):
    """Uniform contract every backend adapter implements.

    An instance is bound to one credential and owns its endpoint list: the list
    is built on the first :meth:`get_endpoints` call and the same records are
    returned (and updated by validation) from then on.
    """

    name: str

    def __init__(self, credential: str) -> None:
        self.credential = credential
        self._endpoints: list[Endpoint] | None = None
        self.logger = get_logger(f"modelscan.providers.{self.name}")

    def _log(self, verbose: bool, event: str, **fields) -> None:
        log = self.logger.info if verbose else self.logger.debug
        log(event, provider=self.name, **fields)

    @abstractmethod
    async def list_models(self, verbose: bool = False) -> list[Model]:
        """Discover the models the backend currently offers.

        Raises:
            RemoteError: the backend is unreachable or answered with a failure status.
            DecodeError: the response body does not have the expected shape.
        """
        raise NotImplementedError

    @abstractmethod
    def get_capabilities(self) -> ProviderCapabilities:
        raise NotImplementedError

    @abstractmethod
    def _build_endpoints(self) -> list[Endpoint]:
        raise NotImplementedError

    def get_endpoints(self) -> list[Endpoint]:
        if self._endpoints is None:
            self._endpoints = self._build_endpoints()
        return self._endpoints

    @abstractmethod
    async def probe_endpoint(self, endpoint: Endpoint) -> None:
        """Issue one request against ``endpoint``; raise if it is not usable."""
        raise NotImplementedError

    async def validate_endpoints(
        self,
        verbose: bool = False,
        timeout_seconds: float | None = None,
        stream: TextIO | None = None,
    ) -> None:
        """Probe every declared endpoint concurrently.

        Per-endpoint results are recorded on the records returned by
        :meth:`get_endpoints`; probe failures are never raised from here.
        """
        try:
            endpoints = self.get_endpoints()
        except (TypeError, ValueError) as exc:
            raise SetupError(f"cannot build endpoint list: {exc}", provider=self.name) from exc

        self._log(verbose, "endpoint_validation_started", endpoints=len(endpoints))
        await validate_endpoints(
            endpoints,
            self.probe_endpoint,
            provider=self.name,
            timeout_seconds=timeout_seconds,
            verbose=verbose,
            stream=stream,
        )
        self._log(verbose, "endpoint_validation_finished", endpoints=len(endpoints))

    @abstractmethod
    async def test_model(self, model_id: str, verbose: bool = False) -> None:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
