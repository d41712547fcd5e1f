from __future__ import annotations


class ClauseCraftError(Exception):
    """Base class for errors raised by the ClauseCraft core."""


class ConfigurationError(ClauseCraftError):
    """The process cannot start with the current settings."""


class DuplicateUser(ClauseCraftError):
    """An account with this email already exists."""


class ContractTooLong(ClauseCraftError):
    """Contract exceeds the estimated-token ceiling; no model call was made."""

    message = "Contract is too long. Please reduce the text length and try again."

    def __init__(self, estimated_tokens: int, limit: int):
        super().__init__(self.message)
        self.estimated_tokens = estimated_tokens
        self.limit = limit


class GatewayError(ClauseCraftError):
    """Network, timeout, non-2xx or empty completion from the inference endpoint."""


class NormalizationError(ClauseCraftError):
    """Model output could not be turned into the expected record."""


class InvalidGenerationFormat(NormalizationError):
    """Generation output parsed, but carried no usable `content`."""
