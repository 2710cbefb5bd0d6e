"""
Exceptions for the Ault SDK.

Errors fall into a few families: configuration defects (registry, signer
shape, chain id) that no retry can fix, input validation failures the caller
must correct, and transport failures that are retried per policy before they
surface. A non-zero broadcast code is not an exception; it is returned as
data on the broadcast result.
"""
from typing import Optional


class AultError(Exception):
    """Base exception for all Ault SDK errors."""
    pass


class ConfigurationError(AultError):
    """Raised for unrecoverable setup defects (registry, signer, chain id)."""
    pass


class UnknownMessageTypeError(ConfigurationError):
    """Raised when a type URL is not in the EIP-712 registry."""

    def __init__(self, type_url: str):
        self.type_url = type_url
        super().__init__(f"Unknown message type: {type_url}")


class UnsupportedLegacyAminoError(ConfigurationError):
    """Raised when a message cannot be bridged through legacy Amino JSON."""

    def __init__(self, type_url: str):
        self.type_url = type_url
        super().__init__(
            f"Message type {type_url} is not registered in the chain's legacy amino codec; "
            "EIP-712 signing is not supported yet."
        )


class UnresolvableChainIdError(ConfigurationError):
    """Raised when no EVM chain id can be derived from a Cosmos chain id."""

    def __init__(self, chain_id: str):
        self.chain_id = chain_id
        super().__init__(f"Unable to resolve EVM chain ID from chainId: {chain_id}")


class FieldOrderError(ConfigurationError):
    """Raised at import time when registry field lists are not in descending order."""
    pass


class SignerDetectionError(ConfigurationError):
    """Raised when a signer input matches none of the supported shapes."""
    pass


class ValidationError(AultError):
    """Raised when caller-supplied input is malformed."""
    pass


class SignatureMismatchError(ValidationError):
    """Raised when a recovered public key does not belong to the signer address."""

    def __init__(self, expected: str, recovered: str):
        self.expected = expected
        self.recovered = recovered
        super().__init__(
            f"Recovered public key does not match signer address: expected {expected}, got {recovered}"
        )


class NetworkError(AultError):
    """Raised when a request cannot be completed at the transport level."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        super().__init__(message)


class RequestTimeoutError(NetworkError):
    """Raised when a request exceeds its timeout."""
    pass


class CancelledError(NetworkError):
    """Raised when the caller's cancel event fires before a request completes."""
    pass


class ApiError(AultError):
    """Raised when the REST endpoint answers with a non-success status or bad JSON."""

    def __init__(self, message: str, status: Optional[int] = None, url: Optional[str] = None,
                 body: Optional[str] = None):
        self.status = status
        self.url = url
        self.body = body
        super().__init__(message)


class PaginationLoopError(AultError):
    """Raised when a pagination cursor repeats."""

    def __init__(self, cursor: Optional[str] = None):
        self.cursor = cursor
        super().__init__("Pagination cursor repeated")
