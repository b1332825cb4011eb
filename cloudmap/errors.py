"""Exception hierarchy for cloudmap.

A resource that cannot be found is not an error: lookups return ``None``.
"""

from __future__ import annotations

from pathlib import Path


class CloudMapError(Exception):
    """Base class for every error raised by cloudmap."""


class FetchError(CloudMapError):
    """Raised when a service's remote enumeration fails.

    During a full sync ``failures`` holds every failed service and its cause;
    ``service`` and ``cause`` describe the first one in registration order.
    """

    def __init__(
        self,
        service: str,
        cause: BaseException,
        failures: dict[str, BaseException] | None = None,
    ) -> None:
        super().__init__(f"Fetching service '{service}' failed: {cause}")
        self.service = service
        self.cause = cause
        self.failures = failures if failures is not None else {service: cause}


class PersistenceError(CloudMapError):
    """Raised when a graph snapshot cannot be loaded or saved."""

    def __init__(self, service: str, path: Path, cause: BaseException | str) -> None:
        super().__init__(f"Snapshot for service '{service}' at {path} unusable: {cause}")
        self.service = service
        self.path = path
        self.cause = cause


class UnknownServiceError(CloudMapError, KeyError):
    """Raised when a sync names a service the coordinator was not given."""

    def __init__(self, service: str) -> None:
        super().__init__(f"Unknown service: {service}")
        self.service = service

    def __str__(self) -> str:
        return str(self.args[0])
