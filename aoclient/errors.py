"""Machine-readable error categories for ao client failures."""


class AOError(Exception):
    """Base exception for all ao client errors."""


class SignerError(AOError):
    """Signing capability missing or rejected the payload."""


class BuildError(AOError):
    """Required field missing or invalid for the requested operation."""


class TransportError(AOError):
    """Network failure or non-2xx HTTP status.

    The status code is kept on ``status_code`` (``None`` when the request
    never got a response); the underlying ``requests`` exception, if any,
    is chained as ``__cause__``.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(AOError):
    """Response body is not valid JSON or lacks required fields."""


class ComputationError(AOError):
    """The compute unit evaluated the request and reported an error.

    ``error`` is the exact string from the result body. The decoded result
    is attached as ``result`` for diagnostics.
    """

    def __init__(self, error: str, result=None):
        super().__init__(error)
        self.error = error
        self.result = result


class IdentityError(AOError):
    """Identity key loading or generation error."""


class SignatureError(AOError):
    """Signature verification failed."""


class ConfigError(AOError):
    """Invalid client configuration."""
