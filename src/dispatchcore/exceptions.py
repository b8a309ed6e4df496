"""Custom exception hierarchy for dispatchcore."""

from __future__ import annotations


class DispatchError(Exception):
    """Base exception for all dispatchcore errors."""


class DispatchConfigError(DispatchError):
    """Invalid or missing configuration."""


class StoreError(DispatchError):
    """A backing store query failed (network, non-2xx, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str = "",
        table: str = "",
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.table = table
        super().__init__(message)


class StoreUnavailableError(StoreError):
    """No store collaborator is configured for the requested data."""


class TableNotProvisionedError(StoreError):
    """The backing table does not exist yet (Postgres code ``42P01``).

    Reported separately from generic store failures because the fix is an
    operator action (run the provisioning SQL), not a retry.
    """
