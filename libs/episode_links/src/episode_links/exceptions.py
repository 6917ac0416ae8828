"""Exceptions for episode link resolution."""


class EpisodeLinksError(Exception):
    """Base exception for episode link resolution errors."""

    pass


class TransportError(EpisodeLinksError):
    """Raised when a request fails at the network or HTTP layer."""

    pass


class ApplicationError(EpisodeLinksError):
    """Raised when a well-formed response carries an in-band error payload."""

    pass


class DecodeError(EpisodeLinksError):
    """Raised when a response body is malformed or has an unexpected shape."""

    pass
