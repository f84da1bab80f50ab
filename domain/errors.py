from __future__ import annotations

from typing import Any, Optional


class GatewayError(Exception):
    """Base class for every error raised by the gateway itself."""


class ConfigurationError(GatewayError):
    pass


class BootError(GatewayError):
    """The session could not be initialised; the application must not start."""


class SessionNotInitializedError(GatewayError):
    def __init__(self) -> None:
        super().__init__("Session is not initialized; call initialize() first.")


class NotSignedInError(GatewayError):
    def __init__(self, operation: str) -> None:
        super().__init__(f"Sign in is required to call {operation}.")
        self.operation = operation


class UnsupportedMethodError(GatewayError):
    def __init__(self, method_name: str, profile: str) -> None:
        super().__init__(
            f"Method {method_name} is not available in the {profile} profile."
        )
        self.method_name = method_name
        self.profile = profile


class InvalidAmountError(GatewayError, ValueError):
    def __init__(self, amount: Any, reason: str = "") -> None:
        message = f"Cannot parse amount {amount!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.amount = amount


class ContractCallError(GatewayError):
    """
    The ledger rejected a call.

    `payload` is the raw error object returned by the RPC node or the
    failed transaction outcome, kept as-is for the caller to inspect.
    """

    def __init__(self, message: str, payload: Optional[Any] = None) -> None:
        super().__init__(message)
        self.payload = payload
