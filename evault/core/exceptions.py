"""Custom exception hierarchy for the E-Vault backend.

Every service-layer error inherits from EVaultError, giving the API layer
a single base class to catch and translate into structured JSON responses.
Subclasses are grouped by the bridge that raises them: session, wallet and
contract, object storage, and the mock data store.
"""

from __future__ import annotations

from typing import Any


class EVaultError(Exception):
    """Base exception for all E-Vault errors."""

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class NotConnected(EVaultError):
    """Raised when no wallet account was supplied or granted."""


class LookupFailed(EVaultError):
    """Raised when the identity lookup behind authentication throws."""


class Unregistered(EVaultError):
    """Raised when the wallet address has no registered identity."""


# ---------------------------------------------------------------------------
# Wallet / contract bridge
# ---------------------------------------------------------------------------


class WalletUnavailable(EVaultError):
    """Raised when no wallet provider is configured or reachable."""


class UserRejected(EVaultError):
    """Raised when the account access request is declined (EIP-1193 code 4001)."""


class InvalidIdentity(EVaultError):
    """Raised when a registration request is malformed (unknown role, missing id)."""


class AlreadyRegistered(EVaultError):
    """Raised when the signing address already has a registered identity."""


class DuplicateId(EVaultError):
    """Raised when a bar or judicial id is already bound to another address."""


class OperationInProgress(EVaultError):
    """Raised when a different write for the same account is still in flight."""


class ChainError(EVaultError):
    """Raised on RPC failure, contract revert, or receipt timeout."""


# ---------------------------------------------------------------------------
# Document storage
# ---------------------------------------------------------------------------


class MissingOwner(EVaultError):
    """Raised when an upload arrives without the owner address header."""


class MissingFile(EVaultError):
    """Raised when an upload request carries no file part."""


class TooLarge(EVaultError):
    """Raised when an upload exceeds the configured byte ceiling."""

    def __init__(
        self,
        message: str,
        *,
        limit_bytes: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.limit_bytes = limit_bytes


class StorageError(EVaultError):
    """Raised when the object store rejects or fails an operation."""


# ---------------------------------------------------------------------------
# Mock data store
# ---------------------------------------------------------------------------


class NotFoundError(EVaultError):
    """Raised when a requested resource does not exist."""
