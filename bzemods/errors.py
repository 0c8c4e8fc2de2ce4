"""Error types raised by the chain modules."""

from __future__ import annotations

import enum


class SdkError(Exception):
    """An error registered under a codespace with a numeric code."""

    codespace = "sdk"
    code = 1
    description = "internal"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        if self.message:
            return f"{self.message}: {self.description}"
        return self.description


class InsufficientFundsError(SdkError):
    """An account does not hold enough coins for a transfer."""

    code = 5
    description = "insufficient funds"


class UnknownRequestError(SdkError):
    """A message or proposal of a type nobody handles."""

    code = 6
    description = "unknown request"


class InvalidAddressError(SdkError):
    """An account address that cannot be decoded."""

    code = 7
    description = "invalid address"


class InvalidCoinsError(SdkError):
    """A coin amount or denomination that is not acceptable."""

    code = 10
    description = "invalid coins"


class InvalidRequestError(SdkError):
    """A request that breaks one of the module's rules."""

    code = 18
    description = "invalid request"


class InvalidProposalContentError(SdkError):
    """A governance proposal whose content is malformed."""

    codespace = "cointrunk"
    code = 5
    description = "invalid proposal content"


class StatusCode(enum.Enum):
    """Status codes carried by query errors."""

    INVALID_ARGUMENT = "InvalidArgument"
    NOT_FOUND = "NotFound"
    INTERNAL = "Internal"


class QueryError(Exception):
    """An error answered by a query service: a status code and a description."""

    def __init__(self, code: StatusCode, message: str) -> None:
        super().__init__(code, message)
        self.code = code
        self.message = message

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryError):
            return NotImplemented
        return self.code == other.code and self.message == other.message

    def __hash__(self) -> int:
        return hash((self.code, self.message))

    def __str__(self) -> str:
        return f"rpc error: code = {self.code.value} desc = {self.message}"