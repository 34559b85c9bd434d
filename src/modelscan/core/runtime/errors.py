from __future__ import annotations

import re


class ProviderError(Exception):
    """Base class for failures raised by provider operations."""

    def __init__(self, message: str, *, provider: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.provider = provider


class SetupError(ProviderError):
    """A request could not even be constructed (bad URL, unencodable payload)."""


class RemoteError(ProviderError):
    """The backend answered with a failure status or could not be reached."""

    def __init__(self, message: str, *, status_code: int | None = None, provider: str | None = None) -> None:
        super().__init__(message, provider=provider)
        self.status_code = status_code

    @property
    def transient(self) -> bool:
        # no status means the request never got an answer
        return self.status_code is None


class DecodeError(ProviderError):
    """The backend answered successfully but the body had an unexpected shape."""


class UnknownProviderError(KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"unknown provider: {self.name}"


def compact_message(message: str, max_len: int = 220) -> str:
    msg = re.sub(r"\s+", " ", message)
    return msg.strip()[:max_len]


def compact_error_summary(exc: BaseException, max_len: int = 220) -> str:
    return f"{exc.__class__.__name__}: {compact_message(str(exc), max_len=max_len)}"
