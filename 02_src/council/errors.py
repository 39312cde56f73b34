"""Error taxonomy shared by the streamer, the orchestrators and the relay."""


class CouncilError(Exception):
    """Base class for all Bot Council errors."""


class ValidationError(CouncilError):
    """Bad user input; raised before any network call is made."""


class TransportError(CouncilError):
    """Non-2xx relay response or a network failure before a response."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @classmethod
    def from_response(cls, status_code: int, body: str) -> "TransportError":
        return cls(f"API error: {status_code} - {body}", status_code, body)


class CancellationError(CouncilError):
    """A user-initiated stop. Never surfaced as a failure."""


class MalformedFragmentError(CouncilError):
    """A data line whose payload is not JSON or lacks the expected shape."""
