"""
Domain exception taxonomy for the Contractor Engine.

Services raise these; the API routers translate them into HTTP responses:

    InvalidInput         -> 400
    NotFound             -> 404
    UpstreamUnavailable  -> 503

The matching path surfaces every one of them to the caller. The learning path
catches store failures at its own boundary and only logs them, so callers of
record_outcome() never see UpstreamUnavailable.
"""


class EngineError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(EngineError):
    """Empty or malformed requirement list or outcome report."""


class UpstreamUnavailable(EngineError):
    """Provider catalog or aggregate store unreachable, or too slow."""


class NotFound(EngineError):
    """A referenced event or provider does not exist."""
