class ConversionError(Exception):
    """Base class for every failure the render pipeline reports to a client.

    Each subclass carries the HTTP status it maps to; the web layer is the
    only place that turns these into responses.
    """

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(ConversionError):
    """The request body stream failed before it was fully read."""


class PayloadTooLarge(ConversionError):
    status_code = 413

    def __init__(self, message: str = "Request body too large") -> None:
        super().__init__(message)


class InvalidRequest(ConversionError):
    """Client supplied a body that cannot be turned into a ConversionRequest."""

    status_code = 400


class InvalidEncoding(InvalidRequest):
    def __init__(self, message: str = "Invalid JSON") -> None:
        super().__init__(message)


class MissingField(InvalidRequest):
    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}")
        self.field = field


class UnsupportedFormat(InvalidRequest):
    def __init__(self, value: str) -> None:
        super().__init__(f"Unsupported format: {value}")
        self.value = value


class SpawnError(ConversionError):
    """The conversion engine process could not be started."""


class ConversionFailed(ConversionError):
    """The engine exited non-zero, or was killed after the timeout."""

    def __init__(self, message: str, *, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
